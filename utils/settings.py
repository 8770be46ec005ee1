"""Project wide configuration dataclasses and default values."""

from dataclasses import dataclass
from pathlib import Path

# Root dir
BASE_DIR = Path(__file__).resolve().parent.parent

# Reference frame every merged cloud is expressed in
WORLD_FRAME = "world"

# States accepted by PositionControl.set_position
POSITION_IDLE = 0
POSITION_SAVE = 1
POSITION_GO_TO = 2


@dataclass(frozen=True)
class Paths:
    """
    Filesystem locations used by the project (config, logs).
    """

    CONF_DIR: Path = BASE_DIR / "conf"
    APP_CONFIG: Path = CONF_DIR / "app.yaml"


paths = Paths()


@dataclass(frozen=True)
class LoggingCfg:
    """
    Logging configuration for the project.

    - level: Log level ("INFO", "DEBUG", etc.)
    - json: Enable/disable structured JSON logging.
    - log_dir: Directory where log files are stored.
    - log_format: Console log output format.
    - log_file_format: File log output format.
    - progress_bar_format: TQDM progress bar format.
    """

    level: str = "INFO"
    json: bool = True
    log_dir: Path = Path(".logs")
    log_format: str = (
        "<green>{time:MM-DD HH:mm:ss}</green>"
        "[<level>{level:.3}</level>]"
        "[<cyan>{extra[module]:.16}</cyan>:<cyan>{line:<3}</cyan>]"
        "<level>{message}</level>"
    )
    log_file_format: str = "{time:YYYY-MM-DD HH:mm:ss}[{level}][{file}:{line}]{message}"
    progress_bar_format: str = (
        "{l_bar}{bar}| {n_fmt}/{total_fmt} [{elapsed}<{remaining}]"
    )


logging = LoggingCfg()


@dataclass(frozen=True)
class CoalescerCfg:
    """
    Capture coalescing parameters.
    A waiter re-checks the shared slot every ``poll_interval`` seconds and
    gives up after ``wait_timeout`` seconds (the producer itself is never
    timed out).
    """

    poll_interval: float = 0.05  # sec
    wait_timeout: float = 60.0  # sec


coalescer = CoalescerCfg()


@dataclass(frozen=True)
class SegmentCfg:
    """
    Region-growing segmentation defaults (units of the capture, usually mm).
    - voxel_size: bucket edge length and absorption distance.
    - min_height: points with z below this are floor/background.
    """

    voxel_size: float = 5.0
    min_height: float = 20.0


segment = SegmentCfg()


@dataclass(frozen=True)
class TimingCfg:
    """Thresholds above which pipeline stages log their duration."""

    crop_pipeline: float = 0.25  # sec
    projection: float = 0.1  # sec


timing = TimingCfg()


@dataclass(frozen=True)
class MultiPoseCfg:
    """Defaults for multi-position capture."""

    settle_seconds: float = 1.0


multi_pose = MultiPoseCfg()


@dataclass(frozen=True)
class UndistortCfg:
    """Fixed iteration count of the Brown-Conrady inverse."""

    iterations: int = 10


undistort = UndistortCfg()


@dataclass(frozen=True)
class CameraIntrinsicsCfg:
    """
    Intrinsic camera parameters for the pinhole/Brown-Conrady model.
    """

    width: int
    height: int
    fx: float  # focal length X
    fy: float  # focal length Y
    ppx: float  # principal point X (cx)
    ppy: float  # principal point Y (cy)
    coeffs: tuple[float, float, float, float, float]  # k1, k2, k3, p1, p2


# Intel RealSense colour stream, 1280x720, zero distortion reported
INTRINSICS_REALSENSE = CameraIntrinsicsCfg(
    width=1280,
    height=720,
    fx=906.0663452148438,
    fy=905.1234741210938,
    ppx=646.94970703125,
    ppy=374.4667663574219,
    coeffs=(0.0, 0.0, 0.0, 0.0, 0.0),
)
