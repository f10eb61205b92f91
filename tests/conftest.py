"""
Shared fixtures for packing and parcel-type tests.
"""
import pytest

from parcel_packer.models.box import BoxTemplate


def make_item(weight_g, quantity=1, dims=None, shape="variant"):
    """Build an order line item record in one of the supported shapes."""
    variant = {"weight": weight_g}
    if dims is not None:
        variant.update({"length": dims[0], "width": dims[1], "height": dims[2]})
    if shape == "line_item":
        return {"quantity": quantity, "line_item": {"variant": variant}}
    return {"quantity": quantity, "variant": variant}


def make_capability(product, key, min_kg, max_kg, dims=None):
    parcel = {"key": key, "minWeightKg": min_kg, "maxWeightKg": max_kg}
    if dims is not None:
        parcel["dimensions"] = {
            "maxLengthCm": dims[0],
            "maxWidthCm": dims[1],
            "maxHeightCm": dims[2],
        }
    return {"product": {"key": product, "label": product, "code": product}, "parcelType": parcel, "options": []}


@pytest.fixture
def small_box():
    return BoxTemplate(id="small", name="Small", length=20, width=20, height=20, max_weight_kg=5)


@pytest.fixture
def large_box():
    return BoxTemplate(id="large", name="Large", length=40, width=40, height=40, max_weight_kg=5)


@pytest.fixture
def boxes(large_box, small_box):
    """Deliberately listed largest first to exercise the volume sort."""
    return [large_box, small_box]
