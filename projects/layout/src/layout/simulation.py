"""Fixed-step force simulation."""

from __future__ import annotations

from collections.abc import Sequence
from logging import getLogger
from math import cos, pi, sin, sqrt
from random import Random
from typing import TYPE_CHECKING, Self

if TYPE_CHECKING:
    from layout.forces import Body, Force

logger = getLogger(__name__)

INITIAL_RADIUS = 10
INITIAL_ANGLE = pi * (3 - sqrt(5))


class Simulation:
    """Velocity-Verlet integration of a set of named forces.

    ``alpha`` starts at 1 and decays geometrically so that it reaches
    ``alpha_min`` after ``decay_steps`` ticks. Ticking never stops early.
    """

    def __init__(
        self,
        bodies: Sequence[Body],
        *,
        random: Random | None = None,
        alpha_min: float = 0.001,
        velocity_decay: float = 0.4,
        decay_steps: int = 300,
    ) -> None:
        """Create a simulation, seeding unplaced bodies on a spiral."""
        self.bodies = bodies
        self.random = random or Random()
        self.alpha = 1.0
        self.alpha_min = alpha_min
        self.alpha_decay = 1 - alpha_min ** (1 / max(decay_steps, 1))
        self.velocity_decay = 1 - velocity_decay
        self._forces: dict[str, Force] = {}
        self._place_bodies()

    def _place_bodies(self) -> None:
        """Phyllotaxis arrangement, so initial placement needs no randomness."""
        for index, body in enumerate(self.bodies):
            radius = INITIAL_RADIUS * sqrt(0.5 + index)
            angle = index * INITIAL_ANGLE
            body.x = radius * cos(angle)
            body.y = radius * sin(angle)
            body.vx = body.vy = 0.0

    def add_force(self, name: str, force: Force) -> Self:
        """Register a force under ``name``, replacing any previous one."""
        force.initialize(self.bodies, self.random)
        self._forces[name] = force
        return self

    def remove_force(self, name: str) -> Self:
        """Unregister a force."""
        self._forces.pop(name, None)
        return self

    def force(self, name: str) -> Force | None:
        """Look up a registered force."""
        return self._forces.get(name)

    def tick(self, iterations: int = 1) -> Self:
        """Advance the simulation by ``iterations`` steps."""
        for _ in range(iterations):
            self.alpha += (0.0 - self.alpha) * self.alpha_decay
            for force in self._forces.values():
                force.apply(self.alpha)
            for body in self.bodies:
                body.vx *= self.velocity_decay
                body.vy *= self.velocity_decay
                body.x += body.vx
                body.y += body.vy
        return self
