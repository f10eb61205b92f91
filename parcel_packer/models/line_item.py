"""
Purchased line items and the physical units the packer works with.

Line items arrive from the order/cart domain in several shapes (workflow
items carry ``variant`` directly, provider items nest it under
``line_item``). The packer only needs three facts about an item, exposed by
the narrow :class:`LineItem` interface; :class:`MappingLineItem` adapts raw
records by walking ordered accessor chains and keeping the first usable
value.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from numbers import Real
from typing import (
    Any,
    Callable,
    Iterable,
    List,
    Mapping,
    Optional,
    Protocol,
    Sequence,
    Tuple,
    runtime_checkable,
)

from parcel_packer.core.utils_geometry import Dimensions, cuboid_volume


Accessor = Callable[[Any], Any]


def field_path(*keys: str) -> Accessor:
    """
    Build an accessor reading ``keys`` one level at a time.

    Mappings are read with ``get`` and other objects with ``getattr``; a
    missing level yields None.
    """

    def accessor(record: Any) -> Any:
        current = record
        for key in keys:
            if current is None:
                return None
            if isinstance(current, Mapping):
                current = current.get(key)
            else:
                current = getattr(current, key, None)
        return current

    accessor.__name__ = "field_path_" + "_".join(keys)
    return accessor


# Precedence is the tuple order.
WEIGHT_ACCESSORS: Tuple[Accessor, ...] = (
    field_path("variant", "weight"),
    field_path("product", "weight"),
    field_path("line_item", "variant", "weight"),
    field_path("line_item", "product", "weight"),
)

DIMENSION_SOURCES: Tuple[Accessor, ...] = (
    field_path("variant"),
    field_path("product"),
    field_path("line_item", "variant"),
    field_path("line_item", "product"),
)

QUANTITY_ACCESSORS: Tuple[Accessor, ...] = (
    field_path("quantity"),
    field_path("line_item", "quantity"),
)


def _is_number(value: Any) -> bool:
    return isinstance(value, Real) and not isinstance(value, bool) and math.isfinite(value)


def first_number(record: Any, accessors: Sequence[Accessor]) -> Optional[float]:
    """Return the first numeric value produced by ``accessors``, in order."""
    for accessor in accessors:
        value = accessor(record)
        if _is_number(value):
            return float(value)
    return None


def first_dimensions(record: Any, sources: Sequence[Accessor]) -> Optional[Dimensions]:
    """Return (length, width, height) from the first source declaring all three."""
    for source in sources:
        candidate = source(record)
        if candidate is None:
            continue
        values = [field_path(axis)(candidate) for axis in ("length", "width", "height")]
        if all(_is_number(value) for value in values):
            return float(values[0]), float(values[1]), float(values[2])
    return None


@runtime_checkable
class LineItem(Protocol):
    """Read-only view of a purchased line item."""

    def quantity(self) -> int:
        ...

    def weight_grams(self) -> float:
        ...

    def dimensions_cm(self) -> Optional[Dimensions]:
        ...


class MappingLineItem:
    """Adapter exposing an opaque order/cart record as a :class:`LineItem`."""

    def __init__(self, record: Any) -> None:
        self._record = record

    def quantity(self) -> int:
        """Whole number of units; fractional quantities are truncated."""
        value = first_number(self._record, QUANTITY_ACCESSORS)
        return 1 if value is None else int(value)

    def weight_grams(self) -> float:
        value = first_number(self._record, WEIGHT_ACCESSORS)
        return 0.0 if value is None else value

    def dimensions_cm(self) -> Optional[Dimensions]:
        return first_dimensions(self._record, DIMENSION_SOURCES)

    def __repr__(self) -> str:
        return f"MappingLineItem({self._record!r})"


def as_line_item(item: Any) -> LineItem:
    """Pass adapters through untouched and wrap anything else."""
    if isinstance(item, LineItem) and not isinstance(item, Mapping):
        return item
    return MappingLineItem(item)


@dataclass(frozen=True)
class PurchasableUnit:
    """One physical instance of a purchased item after quantity expansion."""

    weight_kg: float
    dimensions: Optional[Dimensions] = field(default=None)
    source_index: int = field(default=0)

    @property
    def has_dimensions(self) -> bool:
        return self.dimensions is not None

    @property
    def volume(self) -> float:
        """Return the unit volume in cm^3, 0 when dimensions are unknown."""
        return cuboid_volume(self.dimensions)

    def to_dict(self) -> dict:
        return {
            "weight_kg": self.weight_kg,
            "dimensions_cm": list(self.dimensions) if self.dimensions else None,
            "source_index": self.source_index,
        }


def unit_count(item: LineItem) -> int:
    """Number of physical units an item expands to, never negative."""
    return max(int(item.quantity()), 0)


def total_weight_kg(items: Iterable[LineItem]) -> float:
    """Sum of unit weight (g -> kg) times unit count over all items."""
    return sum(item.weight_grams() / 1000.0 * unit_count(item) for item in items)


def expand_units(items: Iterable[LineItem]) -> List[PurchasableUnit]:
    """
    Expand each line item into ``quantity`` identical units.

    Uses the same count as :func:`total_weight_kg`, so fractional quantities
    are truncated and non-positive quantities yield no units.
    """
    units: List[PurchasableUnit] = []
    for index, item in enumerate(items):
        count = unit_count(item)
        if count == 0:
            continue
        unit = PurchasableUnit(
            weight_kg=item.weight_grams() / 1000.0,
            dimensions=item.dimensions_cm(),
            source_index=index,
        )
        units.extend([unit] * count)
    return units
