import pytest

from hand_breath.config import BreathConfig, default_config


def test_defaults():
    assert default_config.smoothing == 0.3
    assert default_config.easing == 0.08
    assert default_config.time_step == 0.01
    assert (default_config.min_camera_distance, default_config.max_camera_distance) == (3.0, 15.0)
    assert set(default_config.layers) == {"outer", "middle", "inner"}
    assert sum(layer.count for layer in default_config.layers.values()) == 10000


@pytest.mark.parametrize(
    "overrides",
    [
        {"smoothing": 0.0},
        {"smoothing": 1.5},
        {"easing": 0.0},
        {"hand_size_far": 0.2, "hand_size_near": 0.2},
        {"min_camera_distance": 15.0, "max_camera_distance": 3.0},
        {"time_step": 0.0},
        {"render_fps": -1.0},
    ],
)
def test_invalid_values_rejected(overrides):
    with pytest.raises(ValueError):
        BreathConfig(**overrides)


def test_with_overrides_ignores_none():
    config = default_config.with_overrides(camera_index=None, render_fps=30.0, seed=3)
    assert config.camera_index == 0
    assert config.render_fps == 30.0
    assert config.seed == 3
    assert default_config.render_fps == 60.0


def test_from_env_parses_by_field_type():
    config = BreathConfig.from_env({
        "HAND_BREATH_SMOOTHING": "0.5",
        "HAND_BREATH_CAMERA_INDEX": "2",
        "HAND_BREATH_WALL_CLOCK": "yes",
        "HAND_BREATH_SEED": "11",
        "UNRELATED": "x",
    })
    assert config.smoothing == 0.5
    assert config.camera_index == 2
    assert config.wall_clock is True
    assert config.seed == 11
    assert config.easing == 0.08


def test_from_env_empty_gives_defaults():
    assert BreathConfig.from_env({}) == BreathConfig()


def test_from_env_validates():
    with pytest.raises(ValueError):
        BreathConfig.from_env({"HAND_BREATH_EASING": "2"})


def test_layers_are_read_only_and_hashable():
    config = BreathConfig()
    with pytest.raises(TypeError):
        config.layers["extra"] = config.layers["outer"]
    assert hash(config) == hash(BreathConfig())
    assert config == BreathConfig()


def test_layers_copied_from_caller():
    layers = {"inner": default_config.layers["inner"]}
    config = BreathConfig(layers=layers)
    layers["outer"] = default_config.layers["outer"]
    assert set(config.layers) == {"inner"}
    assert set(config.with_overrides(seed=1).layers) == {"inner"}
