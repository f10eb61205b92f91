"""
Tests for parcel-type selection and the fallback chain.
"""
import pytest

from conftest import make_capability
from parcel_packer.core.solver_parcel_type import (
    default_strategies,
    first_parcel_type_for_product,
    parcel_types_for_product,
    resolve_parcel_type,
    select_optimal_parcel_type,
    select_parcel_type_for_packages_from_capabilities,
)
from parcel_packer.models.package import PackageConstraint
from parcel_packer.models.parcel_type import ParcelTypeTier


TIERS = [
    {"key": "LARGE", "min_weight_kg": 10, "max_weight_kg": 30},
    {"key": "SMALL", "min_weight_kg": 0, "max_weight_kg": 2},
    {"key": "MEDIUM", "min_weight_kg": 2, "max_weight_kg": 10},
]


TIER_SETS = [
    [
        {"key": "A", "min_weight_kg": 0, "max_weight_kg": 2},
        {"key": "B", "min_weight_kg": 0, "max_weight_kg": 30},
    ],
    [
        {"key": "XL", "min_weight_kg": 0, "max_weight_kg": 30},
        {"key": "M", "min_weight_kg": 1, "max_weight_kg": 10},
        {"key": "L", "min_weight_kg": 0, "max_weight_kg": 20},
        {"key": "S", "min_weight_kg": 0.5, "max_weight_kg": 2.5},
    ],
    [
        {"key": "S", "min_weight_kg": 0, "max_weight_kg": 2},
        {"key": "BRIDGE", "min_weight_kg": 1, "max_weight_kg": 5},
        {"key": "M", "min_weight_kg": 2, "max_weight_kg": 10},
        {"key": "L", "min_weight_kg": 10, "max_weight_kg": 25},
    ],
]


def _cheapest_containing(tiers, weight):
    """Smallest max weight among tiers holding ``weight``.

    Tiers that end at ``weight`` are passed over when another holding tier
    starts there.
    """
    holding = [t for t in tiers if t["min_weight_kg"] <= weight <= t["max_weight_kg"]]
    if any(t["min_weight_kg"] == weight for t in holding):
        holding = [
            t for t in holding
            if t["max_weight_kg"] != weight or t["min_weight_kg"] == weight
        ]
    if not holding:
        return None
    return min(holding, key=lambda t: t["max_weight_kg"])["key"]


class TestSelectOptimalParcelType:
    """Weight-only selection."""

    def test_shared_boundary_goes_to_tier_starting_there(self):
        """2 kg is both SMALL's max and MEDIUM's min; the inclusive lower bound wins."""
        assert select_optimal_parcel_type(TIERS, 2) == "MEDIUM"

    def test_weights_inside_ranges(self):
        tiers = [
            ParcelTypeTier(key="SMALL", min_weight_kg=0, max_weight_kg=2),
            ParcelTypeTier(key="MEDIUM", min_weight_kg=2, max_weight_kg=10),
            ParcelTypeTier(key="LARGE", min_weight_kg=10, max_weight_kg=30),
        ]
        assert select_optimal_parcel_type(tiers, 0) == "SMALL"
        assert select_optimal_parcel_type(tiers, 1.5) == "SMALL"
        assert select_optimal_parcel_type(tiers, 2.5) == "MEDIUM"
        assert select_optimal_parcel_type(tiers, 10) == "LARGE"
        assert select_optimal_parcel_type(tiers, 10.5) == "LARGE"

    def test_top_of_last_range_is_inclusive(self):
        assert select_optimal_parcel_type(TIERS, 30) == "LARGE"

    def test_no_tier_matches(self):
        assert select_optimal_parcel_type(TIERS, 31) is None
        assert select_optimal_parcel_type([], 1) is None

    def test_result_has_smallest_max_weight_among_matches(self):
        overlapping = [
            {"key": "XL", "min_weight_kg": 0, "max_weight_kg": 50},
            {"key": "M", "min_weight_kg": 1, "max_weight_kg": 10},
            {"key": "L", "min_weight_kg": 0, "max_weight_kg": 20},
        ]
        for weight in (1, 5, 9.99):
            assert select_optimal_parcel_type(overlapping, weight) == "M"
        assert select_optimal_parcel_type(overlapping, 0.5) == "L"
        assert select_optimal_parcel_type(overlapping, 10) == "M"
        assert select_optimal_parcel_type(overlapping, 25) == "XL"

    def test_upper_bound_stays_with_smaller_tier_when_nothing_starts_there(self):
        tiers = [
            {"key": "LARGE", "min_weight_kg": 0, "max_weight_kg": 30},
            {"key": "SMALL", "min_weight_kg": 0, "max_weight_kg": 2},
        ]

        assert select_optimal_parcel_type(tiers, 2) == "SMALL"

    @pytest.mark.parametrize("tiers", TIER_SETS)
    def test_minimum_max_weight_among_containing_tiers(self, tiers):
        for step in range(0, 65):
            weight = step * 0.5
            selected = select_optimal_parcel_type(tiers, weight)
            assert selected == _cheapest_containing(tiers, weight), weight


class TestSelectFromCapabilities:
    """Multi-package selection with dimension ceilings."""

    def test_heaviest_package_decides(self):
        capabilities = [make_capability("X", "S", 0, 5), make_capability("X", "L", 5, 10)]
        packages = [PackageConstraint(weight_kg=3), PackageConstraint(weight_kg=7)]

        assert select_parcel_type_for_packages_from_capabilities(capabilities, "X", packages) == "L"

    def test_shared_boundary_prefers_tier_starting_there(self):
        capabilities = [make_capability("X", "S", 0, 5), make_capability("X", "L", 5, 10)]

        assert select_parcel_type_for_packages_from_capabilities(
            capabilities, "X", [PackageConstraint(weight_kg=5)]
        ) == "L"
        assert select_parcel_type_for_packages_from_capabilities(
            capabilities, "X", [PackageConstraint(weight_kg=10)]
        ) == "L"

    def test_upper_bound_stays_with_smaller_tier_when_nothing_starts_there(self):
        capabilities = [make_capability("X", "SMALL", 0, 2), make_capability("X", "LARGE", 0, 30)]

        assert select_parcel_type_for_packages_from_capabilities(
            capabilities, "X", [PackageConstraint(weight_kg=2)]
        ) == "SMALL"

    def test_boundary_tier_must_also_fit_dimensions(self):
        """A tier starting at the weight only takes over when it fits the package."""
        capabilities = [
            make_capability("X", "S", 0, 5, dims=(60, 40, 40)),
            make_capability("X", "M", 5, 10, dims=(30, 20, 10)),
        ]

        assert select_parcel_type_for_packages_from_capabilities(
            capabilities, "X", [PackageConstraint(weight_kg=5, dimensions=(50, 30, 30))]
        ) == "S"

    def test_filters_by_product(self):
        capabilities = [make_capability("Y", "TINY", 0, 50), make_capability("X", "S", 0, 5)]
        packages = [{"weight_kg": 1}]

        assert select_parcel_type_for_packages_from_capabilities(capabilities, "X", packages) == "S"
        assert select_parcel_type_for_packages_from_capabilities(capabilities, None, packages) == "S"

    def test_dimension_ceiling_rejects_small_tier(self):
        capabilities = [
            make_capability("X", "S", 0, 5, dims=(30, 20, 10)),
            make_capability("X", "M", 0, 10, dims=(60, 40, 40)),
        ]
        packages = [PackageConstraint(weight_kg=1, dimensions=(35, 20, 10))]

        assert select_parcel_type_for_packages_from_capabilities(capabilities, "X", packages) == "M"

    def test_dimension_ceiling_allows_rotation(self):
        capabilities = [make_capability("X", "S", 0, 5, dims=(30, 20, 10))]
        packages = [PackageConstraint(weight_kg=1, dimensions=(10, 30, 20))]

        assert select_parcel_type_for_packages_from_capabilities(capabilities, "X", packages) == "S"

    def test_envelope_combines_packages(self):
        """Each package fits alone but the component-wise maximum does not."""
        capabilities = [
            make_capability("X", "S", 0, 5, dims=(30, 30, 10)),
            make_capability("X", "M", 0, 10),
        ]
        packages = [
            PackageConstraint(weight_kg=1, dimensions=(30, 10, 10)),
            PackageConstraint(weight_kg=1, dimensions=(10, 30, 30)),
        ]

        assert select_parcel_type_for_packages_from_capabilities(capabilities, "X", packages) == "M"

    def test_packages_without_dimensions_skip_dimension_check(self):
        capabilities = [make_capability("X", "S", 0, 5, dims=(1, 1, 1))]

        assert select_parcel_type_for_packages_from_capabilities(
            capabilities, "X", [PackageConstraint(weight_kg=1)]
        ) == "S"

    def test_dimensionless_package_does_not_loosen_envelope(self):
        capabilities = [
            make_capability("X", "S", 0, 5, dims=(20, 20, 20)),
            make_capability("X", "M", 0, 10),
        ]
        packages = [
            PackageConstraint(weight_kg=1),
            PackageConstraint(weight_kg=1, dimensions=(25, 10, 10)),
        ]

        assert select_parcel_type_for_packages_from_capabilities(capabilities, "X", packages) == "M"

    def test_nothing_matches(self):
        capabilities = [make_capability("X", "S", 0, 5)]

        assert select_parcel_type_for_packages_from_capabilities(
            capabilities, "X", [PackageConstraint(weight_kg=6)]
        ) is None
        assert select_parcel_type_for_packages_from_capabilities(capabilities, "X", []) is None


class TestFallbackChain:
    def test_first_non_empty_strategy_wins(self):
        calls = []

        def strategy(value):
            def run():
                calls.append(value)
                return value

            return run

        assert resolve_parcel_type([strategy(None), strategy("M"), strategy("L")]) == "M"
        assert calls == [None, "M"]

    def test_default_terminates_chain(self):
        assert resolve_parcel_type([lambda: None, lambda: ""], default="SMALL") == "SMALL"
        assert resolve_parcel_type([]) == "SMALL"

    def test_empty_default_rejected(self):
        with pytest.raises(ValueError):
            resolve_parcel_type([lambda: "S"], default="")

    def test_default_strategies_order(self):
        """Constraints fail on weight, so weight-only selection on the total decides."""
        capabilities = [make_capability("X", "S", 0, 5), make_capability("X", "M", 5, 10)]
        packages = [PackageConstraint(weight_kg=12)]

        strategies = default_strategies(capabilities, "X", packages, total_weight_kg=7)

        assert [strategy() for strategy in strategies] == [None, "M", "S", "S"]
        assert resolve_parcel_type(strategies) == "M"

    def test_catalog_order_fallbacks(self):
        capabilities = [make_capability("Y", "PALLET", 100, 500), make_capability("X", "BIG", 50, 100)]

        assert first_parcel_type_for_product(capabilities, "X") == "BIG"
        assert first_parcel_type_for_product(capabilities, None) == "PALLET"
        assert first_parcel_type_for_product([], "X") is None
        assert [tier.key for tier in parcel_types_for_product(capabilities, "Y")] == ["PALLET"]

    def test_chain_reaches_first_product_tier(self):
        capabilities = [make_capability("X", "BIG", 50, 100)]

        strategies = default_strategies(capabilities, "X", [PackageConstraint(weight_kg=1)], 1)

        assert resolve_parcel_type(strategies) == "BIG"

    def test_empty_catalog_uses_default(self):
        strategies = default_strategies([], "X", [PackageConstraint(weight_kg=1)], 1)

        assert resolve_parcel_type(strategies, default="SMALL") == "SMALL"
