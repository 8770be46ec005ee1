import sys, os
sys.path.insert(0, os.path.dirname(os.path.dirname(__file__)))
import pytest
from omegaconf import OmegaConf
from utils.config import Config, DictConfigLoader, YamlConfigLoader
from utils.errors import ConfigurationError
from utils.settings import paths
from vision.camera.config import (
    CropCameraConfig,
    LookAtCameraConfig,
    MergeConfig,
    MultiplePosesConfig,
    load_camera_config,
    load_camera_properties,
)
from vision.pointcloud import ColorFilter

APP = {
    "logging": {"level": "DEBUG", "json": False},
    "cameras": {
        "crop": {
            "type": "crop",
            "src": "rs",
            "min": {"x": -1, "y": -2, "z": -3},
            "max": [1, 2, 3],
            "good_colors": [{"color": [255, 0, 0], "distance": 30}],
        },
        "look": {"type": "look_at", "src": "crop"},
        "bad": {"type": "merge"},
        "odd": {"type": "teleport"},
    },
    "camera_properties": {
        "rs": {"intrinsics": {"width": 4, "height": 3, "fx": 1, "fy": 1, "ppx": 2, "ppy": 1.5}}
    },
}


@pytest.fixture
def app_config(tmp_path):
    data = dict(APP, logging=dict(APP["logging"], log_dir=str(tmp_path)))
    Config.set_loader(DictConfigLoader(data))
    Config.load(force_reload=True)
    yield
    Config.set_loader(YamlConfigLoader())


def test_dotted_get(app_config):
    assert Config.get("cameras.look.src") == "crop"
    assert Config.get("cameras.missing.src", "dflt") == "dflt"


def test_load_camera_config(app_config):
    crop = load_camera_config("crop")
    assert isinstance(crop, CropCameraConfig)
    assert crop.min == (-1, -2, -3)
    assert crop.max == (1, 2, 3)
    assert crop.good_colors == (ColorFilter((255, 0, 0), 30.0),)
    assert crop.frame == "rs"
    look = load_camera_config("look")
    assert isinstance(look, LookAtCameraConfig)
    assert look.voxel_size == 5.0


def test_load_camera_config_errors(app_config):
    with pytest.raises(ConfigurationError):
        load_camera_config("bad")
    with pytest.raises(ConfigurationError):
        load_camera_config("odd")
    with pytest.raises(ConfigurationError):
        load_camera_config("missing")


def test_load_camera_properties(app_config):
    props = load_camera_properties("rs")
    assert props.intrinsics.ppy == 1.5
    assert props.distortion is None


def test_shipped_config_parses():
    data = OmegaConf.to_container(YamlConfigLoader().load(paths.APP_CONFIG))
    for name, cam in data["cameras"].items():
        cfg = {
            "crop": CropCameraConfig,
            "look_at": LookAtCameraConfig,
            "merge": MergeConfig,
            "multiple_poses": MultiplePosesConfig,
        }[cam["type"]].from_dict(cam)
        assert cfg.validate()


def test_validate_dependencies():
    assert CropCameraConfig("a", (0, 0, 0), (1, 1, 1)).validate() == ["a"]
    assert MergeConfig(("a", "b")).validate() == ["a", "b"]
    cfg = MultiplePosesConfig("cam", ("p1", "p2"))
    assert cfg.validate() == ["p1", "p2", "cam"]
    assert cfg.sleep_time() == 1.0
    with pytest.raises(ConfigurationError):
        CropCameraConfig("", (0, 0, 0), (1, 1, 1)).validate()
    with pytest.raises(ConfigurationError):
        MergeConfig().validate()
    with pytest.raises(ConfigurationError):
        MultiplePosesConfig("cam").validate()
    with pytest.raises(ConfigurationError):
        LookAtCameraConfig("cam", voxel_size=0).validate()
    with pytest.raises(ConfigurationError):
        CropCameraConfig.from_dict({"src": "a", "min": [1, 2]})


def test_yaml_overrides():
    loader = YamlConfigLoader(["cameras.table_crop.src=other", "logging.level=DEBUG"])
    cfg = loader.load(paths.APP_CONFIG)
    assert cfg.cameras.table_crop.src == "other"
    assert cfg.logging.level == "DEBUG"


def test_section(app_config):
    assert Config.section("cameras.look") == {"type": "look_at", "src": "crop"}
    with pytest.raises(ConfigurationError):
        Config.section("cameras.look.src")
    with pytest.raises(ConfigurationError):
        Config.section("nowhere")
