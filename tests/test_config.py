"""
Test cases for configuration loading.
"""
import tempfile
import unittest
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from gesture_recitation.config import BUNDLED_DATA_DIR, load_config

MINIMAL_CONFIG = """
camera: {index: 1, width: 640, height: 480, fps: 15}
detector:
  model_asset_path: hand.task
  min_detection_confidence: 0.6
  min_tracking_confidence: 0.5
classifier:
  touch_max_normalized_distance: 0.2
timing:
  hold_threshold_ms: 1000
data:
  surah_dir: surahs
display: {show_landmarks: false, window_name: Test}
"""


class TestLoadConfig(unittest.TestCase):
    """Test YAML configuration loading."""

    def test_default_config(self):
        cfg = load_config()
        self.assertEqual(cfg.detector.max_num_hands, 2)
        self.assertEqual(cfg.timing.hold_threshold_ms, 1500)
        self.assertEqual(cfg.timing.reveal_ms, 3000)
        self.assertEqual(cfg.timing.transition_ms, 500)
        self.assertAlmostEqual(cfg.classifier.touch_max_normalized_distance, 0.15)
        self.assertAlmostEqual(cfg.classifier.apart_min_wrist_separation, 0.35)
        self.assertEqual(cfg.data.surah_dir, BUNDLED_DATA_DIR)

    def test_partial_sections_keep_defaults(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "config.yaml"
            path.write_text(MINIMAL_CONFIG, encoding="utf-8")
            cfg = load_config(str(path))

            self.assertEqual(cfg.camera.index, 1)
            self.assertAlmostEqual(cfg.detector.min_presence_confidence, 0.6)
            self.assertFalse(cfg.detector.swap_handedness)
            self.assertAlmostEqual(cfg.classifier.touch_max_normalized_distance, 0.2)
            self.assertAlmostEqual(cfg.classifier.palm_flatness_max_z, 0.15)
            self.assertEqual(cfg.timing.hold_threshold_ms, 1000)
            self.assertEqual(cfg.timing.reveal_ms, 3000)
            # Relative data paths resolve against the config file
            self.assertEqual(cfg.data.surah_dir, Path(tmp) / "surahs")

    def test_empty_sections_keep_defaults(self):
        text = MINIMAL_CONFIG.replace(
            "classifier:\n  touch_max_normalized_distance: 0.2\ntiming:\n  hold_threshold_ms: 1000\n",
            "classifier:\ntiming:\n",
        )
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "config.yaml"
            path.write_text(text, encoding="utf-8")
            cfg = load_config(str(path))

            self.assertAlmostEqual(cfg.classifier.touch_max_normalized_distance, 0.15)
            self.assertEqual(cfg.timing.hold_threshold_ms, 1500)

    def test_missing_file(self):
        with self.assertRaises(FileNotFoundError):
            load_config("/nonexistent/config.yaml")


if __name__ == '__main__':
    unittest.main()
