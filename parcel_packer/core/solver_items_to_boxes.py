"""
Greedy packing of purchased line items into configured shipping boxes.

Units are placed First-Fit-Decreasing: largest volume first, into the first
open package that still has room, otherwise into the smallest box that can
hold the unit on its own. Nothing here raises for incomplete data; every gap
degrades to a fallback that is reported through :class:`PackingDiagnostics`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Sequence

from parcel_packer.core.utils_geometry import (
    TOLERANCE,
    dimension_envelope,
    fits_within,
)
from parcel_packer.models.box import BoxTemplate
from parcel_packer.models.line_item import (
    LineItem,
    PurchasableUnit,
    as_line_item,
    expand_units,
    total_weight_kg,
    unit_count,
)
from parcel_packer.models.package import Package


logger = logging.getLogger(__name__)


@dataclass
class PackingDiagnostics:
    has_item_dimensions: bool = False
    used_fallback_largest: bool = False
    unplaced_units: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "has_item_dimensions": self.has_item_dimensions,
            "used_fallback_largest": self.used_fallback_largest,
            "unplaced_units": self.unplaced_units,
        }


@dataclass
class PackResult:
    packages: List[Package]
    total_weight_kg: float
    diagnostics: PackingDiagnostics

    @property
    def packed_weight_kg(self) -> float:
        return sum(package.weight_kg for package in self.packages)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "packages": [package.to_dict() for package in self.packages],
            "total_weight_kg": self.total_weight_kg,
            "diagnostics": self.diagnostics.to_dict(),
        }


@dataclass
class BoxSelectionResult:
    selected_box: Optional[BoxTemplate]
    total_weight_kg: float
    has_item_dimensions: bool
    used_fallback_largest: bool

    def to_dict(self) -> Dict[str, Any]:
        return {
            "selected_box": self.selected_box.to_dict() if self.selected_box else None,
            "total_weight_kg": self.total_weight_kg,
            "has_item_dimensions": self.has_item_dimensions,
            "used_fallback_largest": self.used_fallback_largest,
        }


@dataclass
class BoxUsage:
    box: BoxTemplate
    quantity: int = field(default=0)
    weight_kg: float = field(default=0.0)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "box_id": self.box.id,
            "box_name": self.box.name,
            "quantity": self.quantity,
            "weight_kg": self.weight_kg,
        }


def sort_boxes_by_volume(boxes: Iterable[BoxTemplate]) -> List[BoxTemplate]:
    """Smallest interior volume first; ties keep configuration order."""
    return sorted(boxes, key=lambda box: box.inner_volume)


def pack_items_into_boxes(
    items: Sequence[Any],
    boxes: Sequence[BoxTemplate],
) -> PackResult:
    """
    Split purchased items into physical packages using the configured boxes.
    """
    line_items: List[LineItem] = [as_line_item(item) for item in items]
    total_weight = total_weight_kg(line_items)

    units = expand_units(line_items)
    has_item_dimensions = any(unit.has_dimensions for unit in units)
    units.sort(key=lambda unit: unit.volume, reverse=True)

    diagnostics = PackingDiagnostics(has_item_dimensions=has_item_dimensions)
    candidates = sort_boxes_by_volume(boxes)

    if not candidates:
        diagnostics.used_fallback_largest = True
        diagnostics.unplaced_units = len(units)
        if units:
            logger.warning(f"No boxes configured; {len(units)} unit(s) left unpacked")
        return PackResult(packages=[], total_weight_kg=total_weight, diagnostics=diagnostics)

    packages: List[Package] = []
    for unit in units:
        target = _first_open_package(packages, unit, has_item_dimensions)
        if target is None:
            box = _smallest_box_for_unit(candidates, unit)
            if box is None:
                box = candidates[-1]
                diagnostics.used_fallback_largest = True
                logger.warning(
                    f"Unit {unit.weight_kg:.3f} kg {unit.dimensions} exceeds every box; "
                    f"using largest box {box.id!r}"
                )
            target = Package(box=box)
            packages.append(target)
        target.add(unit)

    if has_item_dimensions and any(not unit.has_dimensions for unit in units):
        diagnostics.used_fallback_largest = True
        logger.warning("Some units have no dimensions; package fit is only partially verified")

    logger.debug(
        f"Packed {len(units)} unit(s) into {len(packages)} package(s), "
        f"total weight {total_weight:.3f} kg"
    )
    return PackResult(packages=packages, total_weight_kg=total_weight, diagnostics=diagnostics)


def _first_open_package(
    packages: Sequence[Package],
    unit: PurchasableUnit,
    check_dimensions: bool,
) -> Optional[Package]:
    for package in packages:
        if package.can_accept(unit, check_dimensions=check_dimensions):
            return package
    return None


def _smallest_box_for_unit(
    candidates: Sequence[BoxTemplate],
    unit: PurchasableUnit,
) -> Optional[BoxTemplate]:
    for box in candidates:
        if Package(box=box).can_accept(unit, check_dimensions=True):
            return box
    return None


def select_box_for_items(
    items: Sequence[Any],
    boxes: Sequence[BoxTemplate],
) -> BoxSelectionResult:
    """
    Pick a single box for the whole order from aggregate weight and volume.

    Used for display and diagnostics; multi-package splitting is done by
    :func:`pack_items_into_boxes`.
    """
    line_items: List[LineItem] = [as_line_item(item) for item in items]
    total_weight = total_weight_kg(line_items)

    dims_with_count = [
        (item.dimensions_cm(), unit_count(item))
        for item in line_items
        if unit_count(item) > 0
    ]
    envelope = dimension_envelope(dims for dims, _ in dims_with_count)
    has_item_dimensions = envelope is not None
    total_volume = sum(
        dims[0] * dims[1] * dims[2] * count
        for dims, count in dims_with_count
        if dims is not None
    )

    def fits(box: BoxTemplate) -> bool:
        if box.max_weight_kg is not None and total_weight > box.max_weight_kg + TOLERANCE:
            return False
        if envelope is not None:
            if not fits_within(envelope, box.dimensions):
                return False
            if total_volume > box.inner_volume + TOLERANCE:
                return False
        return True

    candidates = sort_boxes_by_volume(boxes)
    selected = next((box for box in candidates if fits(box)), None)
    if selected is not None:
        return BoxSelectionResult(
            selected_box=selected,
            total_weight_kg=total_weight,
            has_item_dimensions=has_item_dimensions,
            used_fallback_largest=False,
        )

    largest = candidates[-1] if candidates else None
    logger.warning(
        f"No single box fits {total_weight:.3f} kg / {total_volume:.0f} cm3; "
        f"falling back to {largest.id if largest else 'no box'}"
    )
    return BoxSelectionResult(
        selected_box=largest,
        total_weight_kg=total_weight,
        has_item_dimensions=has_item_dimensions,
        used_fallback_largest=True,
    )


def summarize_packages(packages: Iterable[Package]) -> List[BoxUsage]:
    """Group packages by box id in first-seen order."""
    usage: Dict[str, BoxUsage] = {}
    for package in packages:
        entry = usage.get(package.box.id)
        if entry is None:
            entry = usage[package.box.id] = BoxUsage(box=package.box)
        entry.quantity += 1
        entry.weight_kg += package.weight_kg
    return list(usage.values())
