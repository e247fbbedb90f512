"""Tunable constants for the layout engine."""

from dataclasses import dataclass, fields
from pathlib import Path
from tomllib import TOMLDecodeError, load
from typing import Any


@dataclass(frozen=True)
class LayoutConfig:
    """Table sizing and force parameters."""

    # Table sizing
    node_width: float = 280
    base_height: float = 50
    column_height: float = 40

    # Forces
    link_distance: float = 200
    charge_strength: float = -1000
    collision_padding: float = 50
    center_x: float = 720
    center_y: float = 450

    # Simulation
    iterations: int = 300
    alpha_min: float = 0.001
    velocity_decay: float = 0.4
    seed: int | None = None

    def __post_init__(self) -> None:
        """Reject values the simulation cannot work with."""
        if self.node_width <= 0 or self.base_height < 0 or self.column_height < 0:
            msg = "Table dimensions must be positive"
            raise ValueError(msg)
        if self.iterations < 0:
            msg = f"Iterations must not be negative, got {self.iterations}"
            raise ValueError(msg)
        if not 0.0 < self.alpha_min < 1.0:
            msg = f"alpha_min must be between 0 and 1, got {self.alpha_min}"
            raise ValueError(msg)
        if not 0.0 <= self.velocity_decay <= 1.0:
            msg = f"velocity_decay must be between 0 and 1, got {self.velocity_decay}"
            raise ValueError(msg)

    def table_height(self, column_count: int) -> float:
        """Height of a table rectangle holding ``column_count`` columns."""
        return self.base_height + self.column_height * column_count


def config_from_mapping(values: dict[str, Any]) -> LayoutConfig:
    """Build a config from a mapping, rejecting unknown keys."""
    known = {f.name for f in fields(LayoutConfig)}
    if unknown := sorted(set(values) - known):
        msg = f"Unknown layout settings: {', '.join(unknown)}"
        raise ValueError(msg)
    return LayoutConfig(**values)


def load_layout_config(path: Path) -> LayoutConfig:
    """Load the ``[layout]`` table of a TOML file."""
    try:
        with path.open("rb") as f:
            document = load(f)
    except TOMLDecodeError as err:
        msg = f"Invalid layout config {path}: {err}"
        raise ValueError(msg) from err
    return config_from_mapping(document.get("layout", {}))
