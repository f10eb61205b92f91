"""
Geometry helper utilities shared across solver modules.

Dimensions are centimetres (cm), volumes cubic centimetres (cm^3).
"""

from __future__ import annotations

from typing import Iterable, Optional, Sequence, Tuple


Dimensions = Tuple[float, float, float]

# Absorbs float noise from summing weights/volumes (0.1 + 0.2 > 0.3).
TOLERANCE = 1e-9


def sort_dimensions(dimensions: Sequence[float]) -> Dimensions:
    """
    Return the three dimensions sorted ascending.

    Comparing sorted triples is equivalent to trying every axis-aligned
    orientation of the item, so callers never need to enumerate rotations.
    """
    small, medium, large = sorted(float(value) for value in dimensions)
    return small, medium, large


def fits_within(item_dims: Sequence[float], container_dims: Sequence[float]) -> bool:
    """Check whether an item fits inside a container in some axis-aligned orientation."""
    item_sorted = sort_dimensions(item_dims)
    container_sorted = sort_dimensions(container_dims)
    return all(
        item_value <= container_value + TOLERANCE
        for item_value, container_value in zip(item_sorted, container_sorted)
    )


def cuboid_volume(dimensions: Optional[Sequence[float]]) -> float:
    if dimensions is None:
        return 0.0
    length, width, height = dimensions
    return float(length) * float(width) * float(height)


def dimension_envelope(dimensions: Iterable[Optional[Sequence[float]]]) -> Optional[Dimensions]:
    """
    Component-wise maximum of length, width and height.

    Entries without dimensions are skipped rather than treated as zero; the
    result is None when nothing declared dimensions.
    """
    envelope: Optional[Dimensions] = None
    for dims in dimensions:
        if dims is None:
            continue
        length, width, height = (float(value) for value in dims)
        if envelope is None:
            envelope = (length, width, height)
        else:
            envelope = (
                max(envelope[0], length),
                max(envelope[1], width),
                max(envelope[2], height),
            )
    return envelope


def volume_utilization(used_volume: float, container_volume: float) -> float:
    """
    Simple volume utilisation metric expressed as a percentage (0.0 - 100.0).
    """
    if container_volume <= 0:
        return 0.0
    return float(used_volume) / float(container_volume) * 100.0
