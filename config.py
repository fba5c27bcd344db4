import logging
from dataclasses import dataclass, asdict, fields

logger = logging.getLogger(__name__)


class ConfigError(ValueError):
    pass


@dataclass
class PhysicsConfig:
    # Drag physics (connected nodes while dragging)
    follow_strength: float = 0.3
    spring_constant: float = 0.1
    repulsion_strength: float = 50.0
    ideal_distance: float = 100.0
    drag_damping: float = 0.85

    # Deceleration after release
    decay_factor: float = 0.88
    settle_threshold: float = 0.1

    # Frame loop
    frame_interval_ms: int = 16

    # Initial layout
    layout_max_iterations: int = 300
    layout_edge_length: float = 100.0
    layout_repulsion: float = 5000.0
    layout_spring_k: float = 0.05
    layout_damping: float = 0.85
    layout_center_attraction: float = 0.01

    def validate(self):
        """Raises ConfigError if any value is out of range. Returns self."""
        for name in ("drag_damping", "decay_factor", "layout_damping"):
            value = getattr(self, name)
            if not 0.0 < value < 1.0:
                raise ConfigError(f"{name} must be between 0 and 1 (exclusive), got {value}")

        for name in ("settle_threshold", "ideal_distance", "layout_edge_length"):
            value = getattr(self, name)
            if value <= 0:
                raise ConfigError(f"{name} must be positive, got {value}")

        for name in ("follow_strength", "spring_constant", "repulsion_strength",
                     "layout_repulsion", "layout_spring_k", "layout_center_attraction"):
            value = getattr(self, name)
            if value < 0:
                raise ConfigError(f"{name} must not be negative, got {value}")

        if self.frame_interval_ms < 1:
            raise ConfigError(f"frame_interval_ms must be at least 1, got {self.frame_interval_ms}")
        if self.layout_max_iterations < 0:
            raise ConfigError(f"layout_max_iterations must not be negative, got {self.layout_max_iterations}")
        return self

    @classmethod
    def from_mapping(cls, mapping):
        """Builds a validated config from a dict. Unknown keys are ignored."""
        if mapping is None:
            return cls()
        if not isinstance(mapping, dict):
            raise ConfigError(f"physics settings must be an object, got {type(mapping).__name__}")

        kwargs = {}
        for f in fields(cls):
            if f.name not in mapping:
                continue
            caster = int if f.type in (int, "int") else float
            try:
                kwargs[f.name] = caster(mapping[f.name])
            except (TypeError, ValueError):
                raise ConfigError(f"invalid value for {f.name}: {mapping[f.name]!r}")

        unknown = set(mapping) - {f.name for f in fields(cls)}
        if unknown:
            logger.warning(f"Ignoring unknown physics settings: {', '.join(sorted(unknown))}")

        return cls(**kwargs).validate()

    def to_dict(self):
        return asdict(self)
