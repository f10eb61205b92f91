"""
Simple CLI script to run the packing and parcel-type pipeline end-to-end.

Usage: python -m parcel_packer.main [--config-dir DIR] [--output-dir DIR] [--no-report]
"""

from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
from typing import List, Optional, Sequence

from parcel_packer.core.shipment_plan import plan_shipment
from parcel_packer.models.parcel_type import parse_capabilities
from parcel_packer.models.settings import load_json_config, load_settings
from parcel_packer.report.pdf_generator import generate_pdf_report
from parcel_packer.visualization import layout_plot

BASE_DIR = Path(__file__).resolve().parent
CONFIG_DIR = BASE_DIR / "config"

logger = logging.getLogger("parcel_packer")


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Pack an order and pick a carrier parcel type.")
    parser.add_argument("--config-dir", type=Path, default=CONFIG_DIR)
    parser.add_argument("--output-dir", type=Path, default=BASE_DIR / "artifacts")
    parser.add_argument("--no-report", action="store_true", help="skip the PNG and PDF artifacts")
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    config_dir: Path = args.config_dir
    try:
        settings = load_settings(config_dir / "settings.json")
        order = load_json_config(config_dir / "order.json")
        capabilities = parse_capabilities(load_json_config(config_dir / "capabilities.json"))
    except (OSError, ValueError) as exc:
        logger.error(f"Could not load configuration from {config_dir}: {exc}")
        return 1

    if settings.enable_logs:
        logging.getLogger("parcel_packer").setLevel(logging.DEBUG)
    if not settings.is_enabled:
        logger.warning("Packing is disabled in settings; nothing to do")
        return 0

    items: List[dict] = order.get("items", []) if isinstance(order, dict) else list(order)
    plan = plan_shipment(
        items,
        settings.boxes,
        capabilities,
        product_key=settings.product_key,
        default_parcel_type=settings.default_parcel_type,
    )

    diagnostics = plan.packing.diagnostics
    print("=== Shipment Packing Summary ===")
    print(f"Packages: {len(plan.packing.packages)}")
    print(f"Total Weight: {plan.packing.total_weight_kg:.3f} kg")
    print(f"Parcel Type: {plan.parcel_type}")
    print(f"Item Dimensions Known: {diagnostics.has_item_dimensions}")
    print(f"Largest-Box Fallback: {diagnostics.used_fallback_largest}")
    print(f"Unplaced Units: {diagnostics.unplaced_units}")
    print(json.dumps([piece.to_dict() for piece in plan.pieces], indent=2))

    if args.no_report:
        return 0

    output_dir: Path = args.output_dir
    output_dir.mkdir(parents=True, exist_ok=True)
    images = []
    if plan.packing.packages:
        figure = layout_plot.packages_figure(plan.packing)
        image_path = output_dir / "package_layout.png"
        layout_plot.save_figure_image(figure, image_path)
        images.append(image_path)

    pdf_path = generate_pdf_report(output_dir / "packing_report.pdf", plan, settings, images)
    print(f"Artifacts saved to: {output_dir} ({pdf_path.name})")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
