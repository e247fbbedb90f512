"""Forces acting on the bodies of a layout simulation.

Every force follows the same two-step protocol: ``initialize`` binds it to the
bodies once, and ``apply`` adjusts velocities (or positions) for one tick at
the current ``alpha``.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from logging import getLogger
from math import sqrt
from random import Random
from typing import Protocol, TypeAlias

logger = getLogger(__name__)

Radius: TypeAlias = "Callable[[Body], float]"

JIGGLE = 1e-6


@dataclass(slots=True)
class Body:
    """A rectangle moving in the simulation, positioned by its centre."""

    id: str
    width: float
    height: float
    x: float = 0.0
    y: float = 0.0
    vx: float = 0.0
    vy: float = 0.0


class Force(Protocol):
    """A contribution to body movement during each tick."""

    def initialize(self, bodies: Sequence[Body], random: Random) -> None:
        """Bind the force to the bodies of a simulation."""
        ...

    def apply(self, alpha: float) -> None:
        """Apply one tick of the force."""
        ...


def jiggle(random: Random) -> float:
    """Tiny random offset used to separate coincident bodies."""
    return (random.random() - 0.5) * JIGGLE


class LinkForce:
    """Springs pulling linked bodies towards a target distance.

    Parallel links between the same pair each contribute a spring. A link's
    strength is the inverse of the smaller endpoint degree, so hubs are not
    dragged around by their many neighbours.
    """

    def __init__(self, links: Iterable[tuple[str, str]], distance: float = 30) -> None:
        """Create springs between bodies identified by id."""
        self.links = list(links)
        self.distance = distance
        self._springs: list[tuple[Body, Body, float, float]] = []
        self._random = Random()

    def initialize(self, bodies: Sequence[Body], random: Random) -> None:
        """Resolve link endpoints, dropping links to unknown or identical bodies."""
        self._random = random
        by_id = {body.id: body for body in bodies}
        resolved: list[tuple[Body, Body]] = []
        for source_id, target_id in self.links:
            source = by_id.get(source_id)
            target = by_id.get(target_id)
            if source is None or target is None:
                logger.debug("Dropping link %s -> %s: no such body", source_id, target_id)
                continue
            if source is target:
                continue
            resolved.append((source, target))

        degree = Counter(body.id for pair in resolved for body in pair)
        self._springs = [
            (
                source,
                target,
                1 / min(degree[source.id], degree[target.id]),
                degree[source.id] / (degree[source.id] + degree[target.id]),
            )
            for source, target in resolved
        ]

    def apply(self, alpha: float) -> None:
        """Move each linked pair towards the target distance."""
        for source, target, strength, bias in self._springs:
            x = target.x + target.vx - source.x - source.vx or jiggle(self._random)
            y = target.y + target.vy - source.y - source.vy or jiggle(self._random)
            length = sqrt(x * x + y * y)
            length = (length - self.distance) / length * alpha * strength
            x *= length
            y *= length
            target.vx -= x * bias
            target.vy -= y * bias
            source.vx += x * (1 - bias)
            source.vy += y * (1 - bias)


class ManyBodyForce:
    """Pairwise inverse-distance force; negative strength repels."""

    def __init__(self, strength: float = -30, distance_min: float = 1) -> None:
        """Create a many-body force."""
        self.strength = strength
        self.distance_min2 = distance_min * distance_min
        self._bodies: Sequence[Body] = ()
        self._random = Random()

    def initialize(self, bodies: Sequence[Body], random: Random) -> None:
        """Bind to bodies."""
        self._bodies = bodies
        self._random = random

    def apply(self, alpha: float) -> None:
        """Accumulate the contribution of every other body."""
        for i, body in enumerate(self._bodies):
            for j, other in enumerate(self._bodies):
                if i == j:
                    continue
                x = other.x - body.x or jiggle(self._random)
                y = other.y - body.y or jiggle(self._random)
                distance2 = x * x + y * y
                if distance2 < self.distance_min2:
                    distance2 = sqrt(self.distance_min2 * distance2)
                body.vx += x * self.strength * alpha / distance2
                body.vy += y * self.strength * alpha / distance2


class CenterForce:
    """Translates the system so its mean position sits on a fixed point."""

    def __init__(self, x: float = 0, y: float = 0, strength: float = 1) -> None:
        """Create a centring force around ``(x, y)``."""
        self.x = x
        self.y = y
        self.strength = strength
        self._bodies: Sequence[Body] = ()

    def initialize(self, bodies: Sequence[Body], random: Random) -> None:  # noqa: ARG002
        """Bind to bodies."""
        self._bodies = bodies

    def apply(self, alpha: float) -> None:  # noqa: ARG002
        """Shift every body by the offset of the centroid."""
        if not self._bodies:
            return
        count = len(self._bodies)
        shift_x = (sum(b.x for b in self._bodies) / count - self.x) * self.strength
        shift_y = (sum(b.y for b in self._bodies) / count - self.y) * self.strength
        for body in self._bodies:
            body.x -= shift_x
            body.y -= shift_y


class CollisionForce:
    """Pushes apart bodies whose collision circles overlap."""

    def __init__(self, radius: Radius, strength: float = 1, iterations: int = 1) -> None:
        """Create a collision force with a per-body radius."""
        self.radius = radius
        self.strength = strength
        self.iterations = iterations
        self._bodies: Sequence[Body] = ()
        self._radii: list[float] = []
        self._random = Random()

    def initialize(self, bodies: Sequence[Body], random: Random) -> None:
        """Compute the radius of every body."""
        self._bodies = bodies
        self._radii = [self.radius(body) for body in bodies]
        self._random = random

    def apply(self, alpha: float) -> None:  # noqa: ARG002
        """Resolve overlaps by splitting the correction by squared radius."""
        bodies = self._bodies
        for _ in range(self.iterations):
            for i, body in enumerate(bodies):
                ri = self._radii[i]
                ri2 = ri * ri
                xi = body.x + body.vx
                yi = body.y + body.vy
                for j in range(i + 1, len(bodies)):
                    other = bodies[j]
                    rj = self._radii[j]
                    reach = ri + rj
                    x = xi - other.x - other.vx
                    y = yi - other.y - other.vy
                    distance2 = x * x + y * y
                    if distance2 >= reach * reach:
                        continue
                    x = x or jiggle(self._random)
                    y = y or jiggle(self._random)
                    distance = sqrt(x * x + y * y)
                    overlap = (reach - distance) / distance * self.strength
                    x *= overlap
                    y *= overlap
                    share = rj * rj / (ri2 + rj * rj)
                    body.vx += x * share
                    body.vy += y * share
                    other.vx -= x * (1 - share)
                    other.vy -= y * (1 - share)


def collision_radius(padding: float) -> Radius:
    """Radius covering half the longer side of a body plus ``padding``."""

    def radius(body: Body) -> float:
        return max(body.width, body.height) / 2 + padding

    return radius
