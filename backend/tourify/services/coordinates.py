"""
Tourify Backend — Annotation Coordinate Model
==============================================

What:  Conversion between pointer pixels and resolution-independent
       percentage positions.
How:   Annotations are stored as (x, y) percentages of the media's bounding
       box. The editor normalizes a drop position against the container it
       was drawn in; a viewer denormalizes against whatever size it renders
       at, so relative placement is identical on every screen.

Example:
    >>> normalize(300, 50, 600, 400)
    Position(x=50.0, y=12.5)
    >>> denormalize(50.0, 12.5, 1200, 800)
    Position(x=600.0, y=100.0)
"""

from typing import NamedTuple

MIN_PERCENT = 0.0
MAX_PERCENT = 100.0


class Position(NamedTuple):
    x: float
    y: float


ORIGIN = Position(MIN_PERCENT, MIN_PERCENT)


def clamp_percentage(value: float) -> float:
    """Clamp a coordinate into [0, 100]."""
    return max(MIN_PERCENT, min(MAX_PERCENT, float(value)))


def normalize(
    pixel_x: float,
    pixel_y: float,
    container_width: float,
    container_height: float,
    fallback: Position = ORIGIN,
) -> Position:
    """
    Convert a pixel offset inside a container into clamped percentages.

    Args:
        pixel_x, pixel_y: Offset from the container's top-left corner.
        container_width, container_height: Rendered size of the media box.
        fallback: Last-known position, returned unchanged when the container
            has no area (collapsed or not yet laid out).

    Returns:
        Position with both coordinates in [0, 100].
    """
    if container_width <= 0 or container_height <= 0:
        return fallback
    return Position(
        clamp_percentage(pixel_x / container_width * MAX_PERCENT),
        clamp_percentage(pixel_y / container_height * MAX_PERCENT),
    )


def denormalize(
    x: float,
    y: float,
    container_width: float,
    container_height: float,
) -> Position:
    """Convert stored percentages into pixels for a container of the given size."""
    return Position(
        clamp_percentage(x) / MAX_PERCENT * max(container_width, 0.0),
        clamp_percentage(y) / MAX_PERCENT * max(container_height, 0.0),
    )
