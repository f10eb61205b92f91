"""
Carrier parcel-type catalog models.

A capability entry describes one (product, parcel type) pair offered by the
carrier for a route. The catalog is fetched and cached outside this package;
these classes only give the payload a typed, read-only shape.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from parcel_packer.core.utils_geometry import Dimensions


def _optional_float(value: Any) -> Optional[float]:
    if value is None:
        return None
    return float(value)


@dataclass(frozen=True)
class TierPrice:
    with_tax: Optional[float] = None
    without_tax: Optional[float] = None
    vat_rate: Optional[float] = None
    currency: Optional[str] = None

    @classmethod
    def from_dict(cls, payload: Optional[Mapping[str, Any]]) -> Optional["TierPrice"]:
        if not payload:
            return None
        return cls(
            with_tax=_optional_float(payload.get("withTax", payload.get("with_tax"))),
            without_tax=_optional_float(payload.get("withoutTax", payload.get("without_tax"))),
            vat_rate=_optional_float(payload.get("vatRate", payload.get("vat_rate"))),
            currency=payload.get("currency"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "with_tax": self.with_tax,
            "without_tax": self.without_tax,
            "vat_rate": self.vat_rate,
            "currency": self.currency,
        }


@dataclass(frozen=True)
class ParcelTypeTier:
    """Weight bracket, optional dimension ceiling and price of a parcel type."""

    key: str
    min_weight_kg: float
    max_weight_kg: float
    max_dimensions: Optional[Dimensions] = field(default=None)
    price: Optional[TierPrice] = field(default=None)

    def __post_init__(self) -> None:
        object.__setattr__(self, "min_weight_kg", float(self.min_weight_kg))
        object.__setattr__(self, "max_weight_kg", float(self.max_weight_kg))

    def accepts_weight(self, weight_kg: float) -> bool:
        return self.min_weight_kg <= weight_kg <= self.max_weight_kg

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "ParcelTypeTier":
        """
        Accept the carrier's camelCase ``parcelType`` object or the flat
        ``key``/``min_weight_kg``/``max_weight_kg`` configuration shape.
        """
        dims = payload.get("dimensions")
        max_dimensions: Optional[Dimensions] = None
        if isinstance(dims, Mapping):
            values = [
                dims.get("maxLengthCm", dims.get("max_length_cm")),
                dims.get("maxWidthCm", dims.get("max_width_cm")),
                dims.get("maxHeightCm", dims.get("max_height_cm")),
            ]
            if all(value is not None for value in values):
                max_dimensions = (float(values[0]), float(values[1]), float(values[2]))
        elif payload.get("max_dimensions"):
            length, width, height = payload["max_dimensions"]
            max_dimensions = (float(length), float(width), float(height))

        key = payload.get("key")
        max_weight = payload.get("maxWeightKg", payload.get("max_weight_kg"))
        if not key or max_weight is None:
            raise ValueError(f"parcel type needs a key and a max weight: {dict(payload)!r}")
        return cls(
            key=str(key),
            min_weight_kg=payload.get("minWeightKg", payload.get("min_weight_kg", 0)),
            max_weight_kg=max_weight,
            max_dimensions=max_dimensions,
            price=TierPrice.from_dict(payload.get("price")),
        )

    @classmethod
    def coerce(cls, value: Any) -> "ParcelTypeTier":
        if isinstance(value, ParcelTypeTier):
            return value
        return cls.from_dict(value)


@dataclass(frozen=True)
class CapabilityOption:
    key: str
    description: str = ""
    input_type: Optional[str] = None
    price: Optional[TierPrice] = None

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "CapabilityOption":
        return cls(
            key=str(payload.get("key", "")),
            description=str(payload.get("description", "")),
            input_type=payload.get("inputType", payload.get("input_type")),
            price=TierPrice.from_dict(payload.get("price")),
        )


@dataclass(frozen=True)
class CapabilityEntry:
    """One (product, parcel type) tuple from the carrier's capability catalog."""

    product_key: str
    parcel_type: ParcelTypeTier
    product_label: str = ""
    product_code: str = ""
    from_country: Optional[str] = None
    to_country: Optional[str] = None
    options: Tuple[CapabilityOption, ...] = field(default=())

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "CapabilityEntry":
        product = payload.get("product") or {}
        parcel = payload.get("parcelType", payload.get("parcel_type"))
        if not isinstance(parcel, Mapping):
            raise ValueError(f"capability entry has no parcel type: {dict(payload)!r}")
        return cls(
            product_key=str(product.get("key", payload.get("product_key", ""))),
            product_label=str(product.get("label", "")),
            product_code=str(product.get("code", "")),
            parcel_type=ParcelTypeTier.from_dict(parcel),
            from_country=payload.get("fromCountryCode"),
            to_country=payload.get("toCountryCode"),
            options=tuple(CapabilityOption.from_dict(option) for option in payload.get("options") or ()),
        )

    @classmethod
    def coerce(cls, value: Any) -> "CapabilityEntry":
        if isinstance(value, CapabilityEntry):
            return value
        return cls.from_dict(value)


def parse_capabilities(payload: Iterable[Any]) -> List[CapabilityEntry]:
    return [CapabilityEntry.coerce(entry) for entry in payload]


@dataclass
class FulfillmentOption:
    """Shipping option offered at checkout, one per product and parcel type."""

    id: str
    name: str
    product_key: str
    product_code: str
    parcel_type: str
    min_weight_kg: float
    max_weight_kg: float
    price: Optional[TierPrice] = None
    supported_countries: List[str] = field(default_factory=list)
    options: List[CapabilityOption] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "product_key": self.product_key,
            "product_code": self.product_code,
            "parcel_type": self.parcel_type,
            "min_weight_kg": self.min_weight_kg,
            "max_weight_kg": self.max_weight_kg,
            "price": self.price.to_dict() if self.price else None,
            "supported_countries": list(self.supported_countries),
            "options": [
                {
                    "key": option.key,
                    "description": option.description,
                    "input_type": option.input_type,
                    "price": option.price.to_dict() if option.price else None,
                }
                for option in self.options
            ],
        }


def fulfillment_options_from_capabilities(
    capabilities: Iterable[Any],
    supported_countries: Sequence[str] = (),
) -> List[FulfillmentOption]:
    result: List[FulfillmentOption] = []
    for entry in parse_capabilities(capabilities):
        tier = entry.parcel_type
        result.append(
            FulfillmentOption(
                id=f"{entry.product_key}__{tier.key}",
                name=f"{entry.product_label} ({tier.key})",
                product_key=entry.product_key,
                product_code=entry.product_code,
                parcel_type=tier.key,
                min_weight_kg=tier.min_weight_kg,
                max_weight_kg=tier.max_weight_kg,
                price=tier.price,
                supported_countries=list(supported_countries),
                options=list(entry.options),
            )
        )
    return result


def merge_fulfillment_options(
    capabilities_by_country: Mapping[str, Iterable[Any]],
) -> List[FulfillmentOption]:
    """
    Build options for several destination countries, deduplicating by id.

    An option offered to more than one country keeps the first-seen details
    and accumulates the countries in first-seen order.
    """
    merged: Dict[str, FulfillmentOption] = {}
    for country, capabilities in capabilities_by_country.items():
        for option in fulfillment_options_from_capabilities(capabilities, [country]):
            existing = merged.get(option.id)
            if existing is None:
                merged[option.id] = option
            elif country not in existing.supported_countries:
                existing.supported_countries.append(country)
    return list(merged.values())
