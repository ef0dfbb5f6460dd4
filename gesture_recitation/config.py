"""
Configuration management for the gesture recitation system.
"""
import yaml
from pathlib import Path
from typing import Optional, Dict, Any
from dataclasses import dataclass


DEFAULT_CONFIG_PATH = Path(__file__).parent / "config.default.yaml"
BUNDLED_DATA_DIR = Path(__file__).parent / "data"


@dataclass
class CameraConfig:
    """Camera configuration settings."""
    index: int
    width: int
    height: int
    fps: int


@dataclass
class DetectorConfig:
    """MediaPipe Hand Landmarker configuration settings."""
    model_asset_path: str
    max_num_hands: int
    min_detection_confidence: float
    min_presence_confidence: float
    min_tracking_confidence: float
    swap_handedness: bool


@dataclass
class ClassifierConfig:
    """Empirical gesture thresholds, in normalized image units unless noted."""
    extend_margin: float = 0.0
    fold_margin: float = 0.0
    touch_max_wrist_separation: float = 0.5
    touch_max_normalized_distance: float = 0.15  # fraction of hand scale
    apart_min_wrist_separation: float = 0.35
    apart_require_motion: bool = False
    apart_history_frames: int = 5
    apart_min_separation_growth: float = 0.05
    palm_flatness_max_z: float = 0.15
    palms_max_wrist_separation: float = 0.5


@dataclass
class TimingConfig:
    """Progression durations in milliseconds."""
    hold_threshold_ms: int = 1500
    reveal_ms: int = 3000
    transition_ms: int = 500
    max_tick_gap_ms: int = 250


@dataclass
class DataConfig:
    """Surah content location."""
    surah_dir: Path


@dataclass
class DisplayConfig:
    """Display configuration settings."""
    show_landmarks: bool
    window_name: str


@dataclass
class Cfg:
    """Main configuration class."""
    camera: CameraConfig
    detector: DetectorConfig
    classifier: ClassifierConfig
    timing: TimingConfig
    data: DataConfig
    display: DisplayConfig


def load_config(path: Optional[str] = None) -> Cfg:
    """
    Load configuration from YAML file.

    Args:
        path: Path to config file. If None, uses the bundled config.default.yaml

    Returns:
        Configuration object with all settings
    """
    config_path = Path(path) if path is not None else DEFAULT_CONFIG_PATH
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path, 'r', encoding='utf-8') as f:
        data = yaml.safe_load(f) or {}

    return _dict_to_config(data, base_dir=config_path.parent)


def _dict_to_config(data: Dict[str, Any], base_dir: Path = DEFAULT_CONFIG_PATH.parent) -> Cfg:
    """Convert dictionary to configuration object."""
    camera_data = data['camera']
    camera = CameraConfig(
        index=camera_data['index'],
        width=camera_data['width'],
        height=camera_data['height'],
        fps=camera_data['fps']
    )

    det_data = data['detector']
    detector = DetectorConfig(
        model_asset_path=det_data['model_asset_path'],
        max_num_hands=det_data.get('max_num_hands', 2),
        min_detection_confidence=det_data['min_detection_confidence'],
        min_presence_confidence=det_data.get('min_presence_confidence', det_data['min_detection_confidence']),
        min_tracking_confidence=det_data['min_tracking_confidence'],
        swap_handedness=det_data.get('swap_handedness', False)
    )

    # Unlisted thresholds keep their dataclass defaults
    classifier = ClassifierConfig(**(data.get('classifier') or {}))
    timing = TimingConfig(**(data.get('timing') or {}))

    surah_dir = (data.get('data') or {}).get('surah_dir')
    if surah_dir is None:
        surah_path = BUNDLED_DATA_DIR
    else:
        surah_path = Path(surah_dir)
        if not surah_path.is_absolute():
            surah_path = base_dir / surah_path

    display_data = data['display']
    display = DisplayConfig(
        show_landmarks=display_data['show_landmarks'],
        window_name=display_data['window_name']
    )

    return Cfg(
        camera=camera,
        detector=detector,
        classifier=classifier,
        timing=timing,
        data=DataConfig(surah_dir=surah_path),
        display=display
    )
