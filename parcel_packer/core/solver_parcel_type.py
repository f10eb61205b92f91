"""
Selection of a carrier parcel type for one or more packages.

Carriers price by tier, so the cheapest sufficient tier is the one with the
smallest maximum weight. Tiers are validated per physical piece: the
heaviest package decides, never the shipment total.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Iterable, List, Optional, Sequence

from parcel_packer.core.utils_geometry import dimension_envelope, fits_within
from parcel_packer.models.package import PackageConstraint
from parcel_packer.models.parcel_type import CapabilityEntry, ParcelTypeTier
from parcel_packer.models.settings import DEFAULT_PARCEL_TYPE


logger = logging.getLogger(__name__)


ParcelTypeStrategy = Callable[[], Optional[str]]


def _by_max_weight(tiers: Iterable[ParcelTypeTier]) -> List[ParcelTypeTier]:
    return sorted(tiers, key=lambda tier: tier.max_weight_kg)


def _first_tier_for_weight(
    tiers: Sequence[ParcelTypeTier],
    weight_kg: float,
    extra_check: Callable[[ParcelTypeTier], bool] = lambda tier: True,
) -> Optional[ParcelTypeTier]:
    """
    First tier, in the given order, whose weight range holds ``weight_kg``.

    Ranges are inclusive on both ends. A tier that only holds the weight at
    its upper bound yields to another holding tier that starts exactly
    there, so a weight on a boundary shared by two tiers goes to the upper
    one.
    """
    candidates = [
        tier for tier in tiers if tier.accepts_weight(weight_kg) and extra_check(tier)
    ]
    for tier in candidates:
        ends_here = weight_kg == tier.max_weight_kg
        if ends_here and any(
            other is not tier and other.min_weight_kg == weight_kg for other in candidates
        ):
            continue
        return tier
    return candidates[0] if candidates else None



def select_optimal_parcel_type(tiers: Sequence[Any], weight_kg: float) -> Optional[str]:
    """
    Return the key of the smallest tier whose weight range holds ``weight_kg``.
    """
    tier = _first_tier_for_weight(
        _by_max_weight(ParcelTypeTier.coerce(tier) for tier in tiers), weight_kg
    )
    return tier.key if tier else None


def _entries_for_product(
    capabilities: Iterable[Any],
    product_key: Optional[str],
) -> List[CapabilityEntry]:
    entries = [CapabilityEntry.coerce(entry) for entry in capabilities]
    if not product_key:
        return entries
    return [entry for entry in entries if entry.product_key == product_key]


def parcel_types_for_product(
    capabilities: Iterable[Any],
    product_key: Optional[str],
) -> List[ParcelTypeTier]:
    return [entry.parcel_type for entry in _entries_for_product(capabilities, product_key)]


def first_parcel_type_for_product(
    capabilities: Iterable[Any],
    product_key: Optional[str],
) -> Optional[str]:
    """Catalog order, not weight order."""
    tiers = parcel_types_for_product(capabilities, product_key)
    return tiers[0].key if tiers else None


def select_parcel_type_for_packages_from_capabilities(
    capabilities: Sequence[Any],
    product_key: Optional[str],
    packages: Sequence[Any],
) -> Optional[str]:
    """
    Pick the smallest tier that can carry every package of a shipment.

    The heaviest single package must fall inside the tier's weight range and
    the component-wise largest package dimensions must fit the tier's
    dimension ceiling. Packages without dimensions do not contribute to the
    dimension envelope; a tier without a ceiling, or a shipment without any
    dimensions, skips the dimension check.
    """
    constraints = [PackageConstraint.coerce(package) for package in packages]
    if not constraints:
        return None

    max_weight_kg = max(constraint.weight_kg for constraint in constraints)
    max_dims = dimension_envelope(constraint.dimensions for constraint in constraints)

    def dimensions_fit(tier: ParcelTypeTier) -> bool:
        if tier.max_dimensions is None or max_dims is None:
            return True
        return fits_within(max_dims, tier.max_dimensions)

    tiers = _by_max_weight(parcel_types_for_product(capabilities, product_key))
    tier = _first_tier_for_weight(tiers, max_weight_kg, extra_check=dimensions_fit)
    return tier.key if tier else None


def default_strategies(
    capabilities: Sequence[Any],
    product_key: Optional[str],
    packages: Sequence[Any],
    total_weight_kg: float,
) -> List[ParcelTypeStrategy]:
    """
    Fallback chain used when building a label request.

    Constraint-based selection first, then weight-only selection on the
    shipment total, then the first tier listed for the product and finally
    the first tier of the whole catalog.
    """
    return [
        lambda: select_parcel_type_for_packages_from_capabilities(capabilities, product_key, packages),
        lambda: select_optimal_parcel_type(
            parcel_types_for_product(capabilities, product_key), total_weight_kg
        ),
        lambda: first_parcel_type_for_product(capabilities, product_key),
        lambda: first_parcel_type_for_product(capabilities, None),
    ]


def resolve_parcel_type(
    strategies: Iterable[ParcelTypeStrategy],
    default: str = DEFAULT_PARCEL_TYPE,
) -> str:
    """
    Evaluate ``strategies`` in order and return the first non-empty key.

    ``default`` terminates the chain, so the result is never empty.
    """
    if not default:
        raise ValueError("a non-empty default parcel type is required")

    for position, strategy in enumerate(strategies):
        key = strategy()
        if key:
            if position > 0:
                logger.info(f"Parcel type {key!r} resolved by fallback strategy #{position + 1}")
            return key

    logger.warning(f"No parcel type matched the catalog; using default {default!r}")
    return default
