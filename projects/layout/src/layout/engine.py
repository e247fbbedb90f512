"""Layout engine placing tables with a force simulation."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from logging import getLogger
from random import Random
from typing import TYPE_CHECKING

from layout.config import LayoutConfig
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

if TYPE_CHECKING:
    from dbml import Relationship, Table

logger = getLogger(__name__)


@dataclass
class LayoutNode:
    """Placed rectangle of one table.

    ``x`` and ``y`` are the top-left corner. The engine writes them once;
    afterwards only explicit moves change them.
    """

    name: str
    width: float
    height: float
    x: float
    y: float

    def overlaps(self, other: LayoutNode) -> bool:
        """Whether the two rectangles intersect."""
        return (
            self.x < other.x + other.width
            and other.x < self.x + self.width
            and self.y < other.y + other.height
            and other.y < self.y + self.height
        )

    @property
    def center(self) -> tuple[float, float]:
        """Centre point of the rectangle."""
        return self.x + self.width / 2, self.y + self.height / 2


def table_bodies(tables: Iterable[Table], config: LayoutConfig) -> list[Body]:
    """One body per table, tall enough for its columns."""
    return [
        Body(
            id=table.name,
            width=config.node_width,
            height=config.table_height(len(table.columns)),
        )
        for table in tables
    ]


def relationship_links(relationships: Iterable[Relationship]) -> list[tuple[str, str]]:
    """One link per relationship; parallel relationships stay separate links."""
    return [(rel.from_table, rel.to_table) for rel in relationships]


def default_forces(
    relationships: Iterable[Relationship],
    config: LayoutConfig,
) -> dict[str, Force]:
    """Spring, repulsion, centring and collision forces."""
    return {
        "link": LinkForce(relationship_links(relationships), config.link_distance),
        "charge": ManyBodyForce(config.charge_strength),
        "center": CenterForce(config.center_x, config.center_y),
        "collision": CollisionForce(collision_radius(config.collision_padding)),
    }


def layout_tables(
    tables: Iterable[Table],
    relationships: Iterable[Relationship],
    config: LayoutConfig | None = None,
    *,
    forces: Mapping[str, Force] | None = None,
) -> dict[str, LayoutNode]:
    """Run the simulation and return the settled rectangle of every table.

    Args:
        tables: Tables to place; each gets exactly one node
        relationships: Relationships pulling tables together
        config: Sizing and force parameters
        forces: Replacement for the default force set

    Returns:
        Layout nodes keyed by table name, in table order

    """
    config = config or LayoutConfig()
    bodies = table_bodies(tables, config)
    simulation = Simulation(
        bodies,
        random=Random(config.seed),
        alpha_min=config.alpha_min,
        velocity_decay=config.velocity_decay,
        decay_steps=config.iterations,
    )
    selected = forces if forces is not None else default_forces(relationships, config)
    for name, force in selected.items():
        simulation.add_force(name, force)

    simulation.tick(config.iterations)
    logger.debug("Placed %d tables in %d ticks", len(bodies), config.iterations)

    return {
        body.id: LayoutNode(
            body.id,
            body.width,
            body.height,
            body.x - body.width / 2,
            body.y - body.height / 2,
        )
        for body in bodies
    }
