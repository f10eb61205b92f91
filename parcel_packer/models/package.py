"""
Data model representing a physical package (bin) produced by the packer.

A package is a box template plus the running totals of the units assigned
to it. Weights are kilograms (kg), dimensions centimetres (cm) and volumes
cubic centimetres (cm^3).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from parcel_packer.core.utils_geometry import (
    TOLERANCE,
    Dimensions,
    fits_within,
    volume_utilization,
)
from parcel_packer.models.box import BoxTemplate
from parcel_packer.models.line_item import PurchasableUnit


@dataclass
class Package:
    """Mutable accumulator updated in place during a single packing pass."""

    box: BoxTemplate
    weight_kg: float = field(default=0.0)
    volume_cm3: float = field(default=0.0)
    unit_count: int = field(default=0)
    units: List[PurchasableUnit] = field(default_factory=list)

    def can_accept(self, unit: PurchasableUnit, check_dimensions: bool = True) -> bool:
        """
        Return True when ``unit`` can join this package.

        The weight ceiling always applies. Volume and rotation-aware fit only
        apply when ``check_dimensions`` is set and the unit declares
        dimensions; dimension-less units are tolerated.
        """
        max_weight = self.box.max_weight_kg
        if max_weight is not None and self.weight_kg + unit.weight_kg > max_weight + TOLERANCE:
            return False

        if not check_dimensions or unit.dimensions is None:
            return True

        if self.volume_cm3 + unit.volume > self.box.inner_volume + TOLERANCE:
            return False
        return fits_within(unit.dimensions, self.box.dimensions)

    def add(self, unit: PurchasableUnit) -> None:
        self.units.append(unit)
        self.weight_kg += unit.weight_kg
        self.volume_cm3 += unit.volume
        self.unit_count += 1

    @property
    def volume_utilisation_pct(self) -> float:
        return volume_utilization(self.volume_cm3, self.box.inner_volume)

    @property
    def weight_utilisation_pct(self) -> Optional[float]:
        if self.box.max_weight_kg is None:
            return None
        return volume_utilization(self.weight_kg, self.box.max_weight_kg)

    def as_constraint(self) -> "PackageConstraint":
        """Describe this package for parcel-type selection (box interior dims)."""
        return PackageConstraint(weight_kg=self.weight_kg, dimensions=self.box.dimensions)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize the package for reporting."""
        return {
            "box": self.box.to_dict(),
            "weight_kg": self.weight_kg,
            "volume_cm3": self.volume_cm3,
            "unit_count": self.unit_count,
            "volume_utilization": self.volume_utilisation_pct,
            "weight_utilization": self.weight_utilisation_pct,
        }


@dataclass(frozen=True)
class PackageConstraint:
    """Weight and optional outer dimensions of one physical piece."""

    weight_kg: float
    dimensions: Optional[Dimensions] = field(default=None)

    def __post_init__(self) -> None:
        object.__setattr__(self, "weight_kg", float(self.weight_kg))
        if self.dimensions is not None:
            length, width, height = self.dimensions
            object.__setattr__(self, "dimensions", (float(length), float(width), float(height)))

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "PackageConstraint":
        dims = payload.get("dimensions_cm") or payload.get("dimensions")
        dimensions: Optional[Dimensions] = None
        if isinstance(dims, Mapping):
            values = [dims.get(axis) for axis in ("length", "width", "height")]
            if all(value is not None for value in values):
                dimensions = (float(values[0]), float(values[1]), float(values[2]))
        elif dims:
            length, width, height = dims
            dimensions = (float(length), float(width), float(height))
        return cls(weight_kg=float(payload.get("weight_kg") or 0.0), dimensions=dimensions)

    @classmethod
    def coerce(cls, value: Any) -> "PackageConstraint":
        if isinstance(value, PackageConstraint):
            return value
        if isinstance(value, Package):
            return value.as_constraint()
        return cls.from_dict(value)

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"weight_kg": self.weight_kg}
        if self.dimensions is not None:
            length, width, height = self.dimensions
            payload["dimensions_cm"] = {"length": length, "width": width, "height": height}
        return payload
