"""
PDF packing report generator using ReportLab.
"""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, Sequence

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4, landscape
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.platypus import (
    Image,
    Paragraph,
    SimpleDocTemplate,
    Spacer,
    Table,
    TableStyle,
)

from parcel_packer.core.shipment_plan import ShipmentPlan
from parcel_packer.core.solver_items_to_boxes import summarize_packages
from parcel_packer.models.settings import PackingSettings


def _build_table(data: Sequence[Sequence[str]], column_widths: Sequence[float]) -> Table:
    table = Table(data, colWidths=column_widths)
    table.setStyle(
        TableStyle(
            [
                ("BACKGROUND", (0, 0), (-1, 0), colors.HexColor("#F1F1F1")),
                ("TEXTCOLOR", (0, 0), (-1, 0), colors.HexColor("#333333")),
                ("ALIGN", (0, 0), (-1, -1), "LEFT"),
                ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
                ("FONTSIZE", (0, 0), (-1, -1), 10),
                ("BOTTOMPADDING", (0, 0), (-1, 0), 6),
                ("GRID", (0, 0), (-1, -1), 0.25, colors.HexColor("#DDDDDD")),
            ]
        )
    )
    return table


def _format_dims(dims) -> str:
    if not dims:
        return "-"
    return " x ".join(f"{value:g}" for value in dims)


def _input_table(plan: ShipmentPlan, settings: PackingSettings) -> Table:
    headers = ["Parameter", "Value"]
    rows = [
        ("Carrier Product", plan.product_key or "Any"),
        ("Configured Boxes", str(len(settings.boxes))),
        ("Default Parcel Type", settings.default_parcel_type),
        ("Total Order Weight (kg)", f"{plan.packing.total_weight_kg:.3f}"),
    ]
    for box in settings.boxes:
        limit = f"{box.max_weight_kg:g} kg" if box.max_weight_kg is not None else "no limit"
        rows.append((f"Box {box.name}", f"{_format_dims(box.dimensions)} cm, {limit}"))
    data = [headers] + [[left, right] for left, right in rows]
    return _build_table(data, column_widths=[70 * mm, 110 * mm])


def _packages_table(plan: ShipmentPlan) -> Table:
    headers = ["#", "Box", "Units", "Weight (kg)", "Volume Used (%)", "Weight Used (%)"]
    data = [headers]
    for index, package in enumerate(plan.packing.packages, start=1):
        weight_pct = package.weight_utilisation_pct
        data.append(
            [
                str(index),
                package.box.name,
                str(package.unit_count),
                f"{package.weight_kg:.3f}",
                f"{package.volume_utilisation_pct:.2f}",
                f"{weight_pct:.2f}" if weight_pct is not None else "-",
            ]
        )
    return _build_table(data, column_widths=[12 * mm, 60 * mm, 20 * mm, 30 * mm, 32 * mm, 32 * mm])


def _metrics_table(plan: ShipmentPlan) -> Table:
    diagnostics = plan.packing.diagnostics
    headers = ["Metric", "Value"]
    rows = [
        ("Selected Parcel Type", plan.parcel_type),
        ("Pieces", len(plan.pieces)),
        ("Packed Weight (kg)", f"{plan.packing.packed_weight_kg:.3f}"),
        ("Item Dimensions Known", "Yes" if diagnostics.has_item_dimensions else "No"),
        ("Largest-Box Fallback Used", "Yes" if diagnostics.used_fallback_largest else "No"),
        ("Unplaced Units", diagnostics.unplaced_units),
    ]
    for usage in summarize_packages(plan.packing.packages):
        rows.append((f"{usage.box.name} Boxes", f"{usage.quantity} ({usage.weight_kg:.3f} kg)"))
    data = [headers] + [[str(left), str(right)] for left, right in rows]
    return _build_table(data, column_widths=[80 * mm, 100 * mm])


def generate_pdf_report(
    output_path: str | Path,
    plan: ShipmentPlan,
    settings: PackingSettings,
    layout_images: Iterable[str | Path] = (),
) -> Path:
    """
    Generate a packing PDF report and return the output path.
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    doc = SimpleDocTemplate(
        str(output_path),
        pagesize=landscape(A4),
        leftMargin=20 * mm,
        rightMargin=20 * mm,
        topMargin=15 * mm,
        bottomMargin=15 * mm,
        title="Shipment Packing Report",
    )

    styles = getSampleStyleSheet()
    title_style = styles["Title"]
    subtitle_style = ParagraphStyle(
        "Subtitle",
        parent=styles["Heading2"],
        textColor=colors.HexColor("#2D5B88"),
    )

    story: list = [
        Paragraph("Shipment Packing Report", title_style),
        Spacer(1, 8 * mm),
        Paragraph("Input Summary", subtitle_style),
        Spacer(1, 4 * mm),
        _input_table(plan, settings),
        Spacer(1, 6 * mm),
        Paragraph("Parcel Selection", subtitle_style),
        Spacer(1, 4 * mm),
        _metrics_table(plan),
    ]

    if plan.packing.packages:
        story.extend(
            [
                Spacer(1, 6 * mm),
                Paragraph("Packages", subtitle_style),
                Spacer(1, 4 * mm),
                _packages_table(plan),
            ]
        )

    for image_path in layout_images:
        image_path = Path(image_path)
        if image_path.exists():
            story.extend(
                [
                    Spacer(1, 6 * mm),
                    Paragraph(image_path.stem.replace("_", " ").title(), subtitle_style),
                    Spacer(1, 4 * mm),
                    Image(str(image_path), width=180 * mm, height=110 * mm),
                ]
            )

    doc.build(story)
    return output_path
