"""Force-directed placement of schema tables."""

from layout.config import LayoutConfig, config_from_mapping, load_layout_config
from layout.engine import LayoutNode, default_forces, layout_tables
from layout.forces import (
    Body,
    CenterForce,
    CollisionForce,
    Force,
    LinkForce,
    ManyBodyForce,
    collision_radius,
)
from layout.simulation import Simulation

__all__ = [
    "Body",
    "CenterForce",
    "CollisionForce",
    "Force",
    "LayoutConfig",
    "LayoutNode",
    "LinkForce",
    "ManyBodyForce",
    "Simulation",
    "collision_radius",
    "config_from_mapping",
    "default_forces",
    "layout_tables",
    "load_layout_config",
]
