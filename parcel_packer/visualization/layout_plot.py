"""
Plotly-based 3D visualisation of packed shipments.

Each package is drawn as its box wireframe, laid out side by side along the
x axis, with a solid block showing how full the box is.
"""

from __future__ import annotations

from pathlib import Path
from typing import List, Tuple

import plotly.graph_objects as go
import plotly.io as pio
from plotly.colors import qualitative

from parcel_packer.core.solver_items_to_boxes import PackResult
from parcel_packer.models.package import Package

DEFAULT_COLOR_SEQUENCE = qualitative.Light24
PACKAGE_GAP_CM = 10.0

_EDGES = [
    (0, 1),
    (1, 2),
    (2, 3),
    (3, 0),
    (4, 5),
    (5, 6),
    (6, 7),
    (7, 4),
    (0, 4),
    (1, 5),
    (2, 6),
    (3, 7),
]


def _prism_vertices(
    x: float, y: float, z: float, dx: float, dy: float, dz: float
) -> Tuple[List[float], List[float], List[float]]:
    xs = [x, x + dx, x + dx, x, x, x + dx, x + dx, x]
    ys = [y, y, y + dy, y + dy, y, y, y + dy, y + dy]
    zs = [z, z, z, z, z + dz, z + dz, z + dz, z + dz]
    return xs, ys, zs


def _color_for_index(index: int) -> str:
    return DEFAULT_COLOR_SEQUENCE[index % len(DEFAULT_COLOR_SEQUENCE)]


def _wireframe(
    x: float,
    dx: float,
    dy: float,
    dz: float,
    name: str,
    color: str = "#2d3748",
) -> go.Scatter3d:
    xs, ys, zs = _prism_vertices(x, 0, 0, dx, dy, dz)
    x_coords: List[float | None] = []
    y_coords: List[float | None] = []
    z_coords: List[float | None] = []
    for start, end in _EDGES:
        x_coords.extend([xs[start], xs[end], None])
        y_coords.extend([ys[start], ys[end], None])
        z_coords.extend([zs[start], zs[end], None])

    return go.Scatter3d(
        x=x_coords,
        y=y_coords,
        z=z_coords,
        mode="lines",
        name=name,
        line=dict(color=color, width=4),
        showlegend=True,
        hoverinfo="skip",
    )


def _fill_block(
    x: float,
    dx: float,
    dy: float,
    dz: float,
    color: str,
    name: str,
    hover: str,
) -> go.Mesh3d:
    xs, ys, zs = _prism_vertices(x, 0, 0, dx, dy, dz)
    # Two triangles per face, vertex order from _prism_vertices.
    return go.Mesh3d(
        x=xs,
        y=ys,
        z=zs,
        i=[0, 0, 4, 4, 0, 0, 1, 1, 2, 2, 3, 3],
        j=[1, 2, 5, 6, 1, 5, 2, 6, 3, 7, 0, 4],
        k=[2, 3, 6, 7, 5, 4, 6, 5, 7, 6, 4, 7],
        color=color,
        opacity=0.75,
        name=name,
        flatshading=True,
        lighting=dict(ambient=0.7, diffuse=0.9, specular=0.1),
        hovertext=hover,
        hoverinfo="text",
        showscale=False,
    )


def fill_fraction(package: Package) -> float:
    """
    Share of the box to draw as filled (0.0 - 1.0).

    Volume utilisation when units carried dimensions, weight utilisation
    otherwise, and a full box when neither is known.
    """
    if package.volume_cm3 > 0:
        return min(package.volume_utilisation_pct / 100.0, 1.0)
    weight_pct = package.weight_utilisation_pct
    if weight_pct is not None:
        return min(weight_pct / 100.0, 1.0)
    return 1.0


def packages_figure(result: PackResult, title: str = "Packed Shipment") -> go.Figure:
    fig = go.Figure()
    offset = 0.0
    for index, package in enumerate(result.packages):
        box = package.box
        label = f"#{index + 1} {box.name}"
        fig.add_trace(_wireframe(offset, box.length, box.width, box.height, name=label))
        fraction = fill_fraction(package)
        if fraction > 0:
            fig.add_trace(
                _fill_block(
                    offset,
                    box.length,
                    box.width,
                    box.height * fraction,
                    color=_color_for_index(index),
                    name=label,
                    hover=(
                        f"{label}<br>{package.unit_count} unit(s)"
                        f"<br>{package.weight_kg:.2f} kg"
                        f"<br>{package.volume_utilisation_pct:.1f}% volume"
                    ),
                )
            )
        offset += box.length + PACKAGE_GAP_CM

    fig.update_layout(
        title=title,
        scene=dict(
            xaxis_title="Length (cm)",
            yaxis_title="Width (cm)",
            zaxis_title="Height (cm)",
            aspectmode="data",
            xaxis=dict(
                backgroundcolor="#f2f5fb",
                gridcolor="#cbd5e0",
                zerolinecolor="#a0aec0",
            ),
            yaxis=dict(
                backgroundcolor="#f2f5fb",
                gridcolor="#cbd5e0",
                zerolinecolor="#a0aec0",
            ),
            zaxis=dict(
                backgroundcolor="#f2f5fb",
                gridcolor="#cbd5e0",
                zerolinecolor="#a0aec0",
            ),
        ),
        paper_bgcolor="#f7f9fc",
        plot_bgcolor="#f7f9fc",
        legend=dict(
            bgcolor="rgba(255,255,255,0.8)",
            bordercolor="#cbd5e0",
            borderwidth=1,
        ),
        margin=dict(l=0, r=0, t=40, b=0),
    )
    return fig


def save_figure_image(fig: go.Figure, output_path: str | Path, width: int = 900, height: int = 650) -> None:
    """
    Persist a figure to disk as a static PNG using Kaleido.
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    pio.write_image(fig, str(output_path), format="png", width=width, height=height, scale=2)
