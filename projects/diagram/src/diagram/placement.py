"""Grid snapping for manually placed tables."""

from math import floor, isfinite

GRID_SIZE = 20


def check_grid_size(grid_size: float) -> None:
    """Reject grid pitches that cannot be snapped to."""
    if not (isfinite(grid_size) and grid_size > 0):
        msg = f"Grid size must be a positive number, got {grid_size}"
        raise ValueError(msg)


def snap(value: float, grid_size: float = GRID_SIZE) -> float:
    """Round to the nearest multiple of ``grid_size``; halves round up.

    Infinite and NaN coordinates have no nearest grid line and are returned
    unchanged.
    """
    if not isfinite(value):
        return value
    return floor(value / grid_size + 0.5) * grid_size


def snap_to_grid(x: float, y: float, grid_size: float = GRID_SIZE) -> tuple[float, float]:
    """Snap a drop position to the grid."""
    check_grid_size(grid_size)
    return snap(x, grid_size), snap(y, grid_size)
