"""
Packing settings loaded from JSON configuration.

Mirrors what the carrier settings page stores: an enable switch, verbose
logging, and the list of configured boxes. Credentials are not part of this
model.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple

from parcel_packer.models.box import BoxTemplate


DEFAULT_PARCEL_TYPE = "SMALL"


def load_json_config(path: str | Path) -> Any:
    with open(path, "r", encoding="utf-8") as file:
        return json.load(file)


@dataclass(frozen=True)
class PackingSettings:
    """Immutable view of the packing configuration."""

    boxes: Tuple[BoxTemplate, ...] = field(default=())
    is_enabled: bool = field(default=True)
    enable_logs: bool = field(default=False)
    default_parcel_type: str = field(default=DEFAULT_PARCEL_TYPE)
    product_key: Optional[str] = field(default=None)

    def __post_init__(self) -> None:
        object.__setattr__(self, "boxes", tuple(self.boxes))
        if not isinstance(self.default_parcel_type, str) or not self.default_parcel_type.strip():
            raise ValueError("default_parcel_type must be a non-empty string")
        seen = set()
        for box in self.boxes:
            if box.id in seen:
                raise ValueError(f"duplicate box id {box.id!r}")
            seen.add(box.id)

    def box_by_id(self, box_id: str) -> Optional[BoxTemplate]:
        for box in self.boxes:
            if box.id == box_id:
                return box
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "is_enabled": self.is_enabled,
            "enable_logs": self.enable_logs,
            "default_parcel_type": self.default_parcel_type,
            "product_key": self.product_key,
            "boxes": [box.to_dict() for box in self.boxes],
        }

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "PackingSettings":
        raw_boxes = payload.get("boxes") or []
        if not isinstance(raw_boxes, list):
            raise ValueError("boxes must be a list")
        return cls(
            boxes=tuple(BoxTemplate.from_dict(entry) for entry in raw_boxes),
            is_enabled=bool(payload.get("is_enabled", True)),
            enable_logs=bool(payload.get("enable_logs", False)),
            default_parcel_type=payload.get("default_parcel_type") or DEFAULT_PARCEL_TYPE,
            product_key=payload.get("product_key"),
        )


def load_settings(path: str | Path) -> PackingSettings:
    payload = load_json_config(path)
    if not isinstance(payload, Mapping):
        raise ValueError(f"{path}: settings must be a JSON object")
    return PackingSettings.from_dict(payload)
