"""
Data model representing a configured shipping box template.

Dimensions are internal dimensions in centimetres (cm) and max weight is in
kilograms (kg). All checks are performed eagerly to surface invalid
configurations before invoking the solver.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Tuple

from parcel_packer.core.utils_geometry import sort_dimensions


def _require_positive(name: str, value: Any) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValueError(f"{name} must be a number, got {value!r}") from None
    if number <= 0:
        raise ValueError(f"{name} must be positive, got {value!r}")
    return number


def _require_text(name: str, value: Any) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"{name} must be a non-empty string, got {value!r}")
    return value


@dataclass(frozen=True)
class BoxTemplate:
    """Immutable packaging option used as the bin for purchased units."""

    length: float
    width: float
    height: float
    max_weight_kg: Optional[float] = field(default=None)
    id: str = field(default="box")
    name: str = field(default="Box")
    parcel_type: Optional[str] = field(default=None)

    def __post_init__(self) -> None:
        object.__setattr__(self, "length", _require_positive("length", self.length))
        object.__setattr__(self, "width", _require_positive("width", self.width))
        object.__setattr__(self, "height", _require_positive("height", self.height))
        if self.max_weight_kg is not None:
            object.__setattr__(
                self, "max_weight_kg", _require_positive("max_weight_kg", self.max_weight_kg)
            )
        _require_text("id", self.id)
        _require_text("name", self.name)

    @property
    def inner_volume(self) -> float:
        """Return usable internal volume in cm^3."""
        return self.length * self.width * self.height

    @property
    def dimensions(self) -> Tuple[float, float, float]:
        """Return inner dimensions (length, width, height)."""
        return self.length, self.width, self.height

    @property
    def sorted_dimensions(self) -> Tuple[float, float, float]:
        return sort_dimensions(self.dimensions)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "inner_cm": {
                "length": self.length,
                "width": self.width,
                "height": self.height,
            },
            "max_weight_kg": self.max_weight_kg,
            "parcel_type": self.parcel_type,
            "inner_volume": self.inner_volume,
        }

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "BoxTemplate":
        """
        Instantiate from a settings entry.

        Both the nested ``inner_cm`` shape stored by the settings page and a
        flat ``length``/``width``/``height`` shape are accepted.
        """
        inner = payload.get("inner_cm")
        if not isinstance(inner, Mapping):
            inner = payload
        missing = [key for key in ("length", "width", "height") if inner.get(key) is None]
        if missing:
            raise ValueError(f"box {payload.get('id', '?')!r} is missing dimensions: {', '.join(missing)}")

        parcel_type = payload.get("parcel_type", payload.get("dhl_parcel_type"))
        return cls(
            id=str(payload.get("id", "box")),
            name=str(payload.get("name", "Box")),
            length=inner["length"],
            width=inner["width"],
            height=inner["height"],
            max_weight_kg=payload.get("max_weight_kg"),
            parcel_type=str(parcel_type) if parcel_type else None,
        )
