"""
Turns an order into label-ready pieces: pack, then pick a parcel type.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from parcel_packer.core.solver_items_to_boxes import PackResult, pack_items_into_boxes
from parcel_packer.core.solver_parcel_type import default_strategies, resolve_parcel_type
from parcel_packer.core.utils_geometry import Dimensions
from parcel_packer.models.box import BoxTemplate
from parcel_packer.models.package import PackageConstraint
from parcel_packer.models.settings import DEFAULT_PARCEL_TYPE


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ShipmentPiece:
    parcel_type: str
    quantity: int = field(default=1)
    weight_kg: Optional[float] = field(default=None)
    dimensions: Optional[Dimensions] = field(default=None)

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"parcel_type": self.parcel_type, "quantity": self.quantity}
        if self.weight_kg is not None:
            payload["weight_kg"] = self.weight_kg
        if self.dimensions is not None:
            length, width, height = self.dimensions
            payload["dimensions_cm"] = {"length": length, "width": width, "height": height}
        return payload


@dataclass
class ShipmentPlan:
    parcel_type: str
    pieces: List[ShipmentPiece]
    packing: PackResult
    product_key: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "product_key": self.product_key,
            "parcel_type": self.parcel_type,
            "pieces": [piece.to_dict() for piece in self.pieces],
            "packing": self.packing.to_dict(),
        }


def plan_shipment(
    items: Sequence[Any],
    boxes: Sequence[BoxTemplate],
    capabilities: Sequence[Any],
    product_key: Optional[str] = None,
    default_parcel_type: str = DEFAULT_PARCEL_TYPE,
) -> ShipmentPlan:
    """
    Pack ``items`` and resolve a single parcel type for every piece.

    One piece per package; without packages the whole order ships as a
    single piece carrying the total weight.
    """
    packing = pack_items_into_boxes(items, boxes)

    constraints: List[PackageConstraint]
    if packing.packages:
        constraints = [package.as_constraint() for package in packing.packages]
    else:
        constraints = [PackageConstraint(weight_kg=packing.total_weight_kg)]

    parcel_type = resolve_parcel_type(
        default_strategies(capabilities, product_key, constraints, packing.total_weight_kg),
        default=default_parcel_type,
    )

    if packing.packages:
        pieces = [
            ShipmentPiece(
                parcel_type=parcel_type,
                weight_kg=package.weight_kg,
                dimensions=package.box.dimensions,
            )
            for package in packing.packages
        ]
    else:
        pieces = [
            ShipmentPiece(
                parcel_type=parcel_type,
                weight_kg=packing.total_weight_kg or None,
            )
        ]

    logger.info(
        f"Shipment plan: {len(pieces)} piece(s) as {parcel_type!r}"
        + (f" for product {product_key!r}" if product_key else "")
    )
    return ShipmentPlan(
        parcel_type=parcel_type,
        pieces=pieces,
        packing=packing,
        product_key=product_key,
    )
