import pytest

from config import PhysicsConfig, ConfigError


def test_defaults():
    config = PhysicsConfig()
    assert config.follow_strength == 0.3
    assert config.spring_constant == 0.1
    assert config.repulsion_strength == 50.0
    assert config.ideal_distance == 100.0
    assert config.drag_damping == 0.85
    assert config.decay_factor == 0.88
    assert config.settle_threshold == 0.1
    assert config.layout_repulsion == 5000.0
    assert config.layout_spring_k == 0.05
    assert config.layout_damping == 0.85
    assert config.layout_center_attraction == 0.01
    assert config.validate() is config


@pytest.mark.parametrize("overrides", [
    {"drag_damping": 0.0},
    {"drag_damping": 1.0},
    {"decay_factor": 1.2},
    {"settle_threshold": 0.0},
    {"ideal_distance": -1.0},
    {"follow_strength": -0.1},
    {"frame_interval_ms": 0},
    {"layout_max_iterations": -5},
    {"layout_damping": 1.0},
    {"layout_repulsion": -1.0},
    {"layout_center_attraction": -0.01},
])
def test_validate_rejects_out_of_range(overrides):
    with pytest.raises(ConfigError):
        PhysicsConfig(**overrides).validate()


def test_from_mapping_coerces_and_ignores_unknown_keys():
    config = PhysicsConfig.from_mapping({"follow_strength": "0.5", "frame_interval_ms": 33.0, "colour": "red"})
    assert config.follow_strength == 0.5
    assert config.frame_interval_ms == 33
    assert isinstance(config.frame_interval_ms, int)
    assert config.spring_constant == 0.1


def test_from_mapping_none_gives_defaults():
    assert PhysicsConfig.from_mapping(None) == PhysicsConfig()


@pytest.mark.parametrize("mapping", [
    {"follow_strength": "strong"},
    {"decay_factor": 2},
    ["follow_strength", 0.3],
])
def test_from_mapping_rejects_bad_input(mapping):
    with pytest.raises(ConfigError):
        PhysicsConfig.from_mapping(mapping)


def test_to_dict_roundtrip():
    config = PhysicsConfig(ideal_distance=80.0)
    assert PhysicsConfig.from_mapping(config.to_dict()) == config
