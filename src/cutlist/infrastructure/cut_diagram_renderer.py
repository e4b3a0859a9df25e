"""Cut diagram rendering for sheet layouts.

This module provides SVG and ASCII rendering of sheet layouts showing part
placements, dimensions, rotation and grain indicators, and waste areas, plus
a plain-text summary of a full result.
"""

from __future__ import annotations

import math
import re
from html import escape

from cutlist.domain.layout import LayoutResult, Placement, SheetLayout
from cutlist.domain.value_objects import Grain

# Fill colours handed out to part groups in first-seen order
PART_COLORS: tuple[str, ...] = (
    "#87CEEB",  # Sky blue
    "#90EE90",  # Light green
    "#DDA0DD",  # Plum
    "#F0E68C",  # Khaki
    "#FFB6C1",  # Light pink
    "#FFA07A",  # Light salmon
    "#FFD700",  # Gold
    "#DEB887",  # Burlywood
    "#E6E6FA",  # Lavender
    "#BC8F8F",  # Rosy brown
    "#D8BFD8",  # Thistle
    "#F5F5DC",  # Beige
)

_INSTANCE_SUFFIX = re.compile(r"\s*#\d+$")


def base_name(label: str) -> str:
    """Group key for a placement label, with any ``#n`` instance suffix removed."""
    return _INSTANCE_SUFFIX.sub("", label)


def _plural(count: int, word: str) -> str:
    return f"{count} {word}{'s' if count != 1 else ''}"


class CutDiagramRenderer:
    """Renders cut diagrams in SVG and ASCII.

    Attributes:
        scale: Pixels per millimetre for SVG rendering.
        piece_stroke: Stroke color for part outlines.
        waste_fill: Fill color for waste areas.
        text_color: Color for labels and dimensions.
        show_dimensions: Whether to show part dimensions.
        show_labels: Whether to show part labels.
        show_grain: Whether to show grain direction arrows.
        show_legend: Whether to add a legend of part groups.
    """

    def __init__(
        self,
        scale: float = 0.25,
        piece_stroke: str = "#000000",
        waste_fill: str = "#D3D3D3",
        text_color: str = "#000000",
        show_dimensions: bool = True,
        show_labels: bool = True,
        show_grain: bool = True,
        show_legend: bool = True,
    ) -> None:
        self.scale = scale
        self.piece_stroke = piece_stroke
        self.waste_fill = waste_fill
        self.text_color = text_color
        self.show_dimensions = show_dimensions
        self.show_labels = show_labels
        self.show_grain = show_grain
        self.show_legend = show_legend

    def color_map(self, layouts: tuple[SheetLayout, ...] | list[SheetLayout]) -> dict[str, str]:
        """Assign a stable fill colour to every part group across the given sheets."""
        colors: dict[str, str] = {}
        for layout in layouts:
            for placement in layout.placements:
                key = base_name(placement.label)
                if key not in colors:
                    colors[key] = PART_COLORS[len(colors) % len(PART_COLORS)]
        return colors

    def render_svg(
        self,
        layout: SheetLayout,
        index: int = 0,
        total_sheets: int = 1,
        colors: dict[str, str] | None = None,
    ) -> str:
        """Generate an SVG cut diagram for a single sheet.

        Args:
            layout: Sheet layout with placements.
            index: Zero-based position of the sheet in the result.
            total_sheets: Total number of sheets (for the header).
            colors: Group colours shared across sheets; computed if omitted.

        Returns:
            SVG document as a string.
        """
        colors = colors if colors is not None else self.color_map([layout])
        header_height = 30
        groups = list(dict.fromkeys(base_name(p.label) for p in layout.placements))
        legend_height = self._legend_height(len(groups))

        svg_width = layout.stock_width_mm * self.scale
        sheet_height = layout.stock_length_mm * self.scale
        svg_height = sheet_height + header_height + legend_height

        parts: list[str] = [
            f'<svg width="{svg_width}" height="{svg_height}" '
            f'xmlns="http://www.w3.org/2000/svg">',
            f'  <rect x="0" y="0" width="{svg_width}" height="{svg_height}" fill="white"/>',
            self._render_header(layout, index, total_sheets, svg_width, header_height),
            "  <!-- Sheet outline -->",
            f'  <rect x="0" y="{header_height}" width="{svg_width}" height="{sheet_height}" '
            f'fill="#f5deb3" stroke="{self.piece_stroke}" stroke-width="2"/>',
        ]

        waste_svg = self._render_waste_areas(layout, header_height)
        if waste_svg:
            parts.append("  <!-- Waste areas -->")
            parts.append(waste_svg)

        parts.append("  <!-- Placed parts -->")
        for placement in layout.placements:
            fill = colors.get(base_name(placement.label), PART_COLORS[0])
            parts.append(self._render_piece(placement, fill, header_height))

        if groups and self.show_legend:
            parts.append("  <!-- Legend -->")
            parts.append(
                self._render_legend(groups, colors, svg_width, header_height + sheet_height)
            )

        parts.append("</svg>")
        return "\n".join(parts)

    def render_all_svg(self, result: LayoutResult) -> list[str]:
        """Generate one SVG per sheet, with colours shared across sheets."""
        colors = self.color_map(result.sheets)
        total = len(result.sheets)
        return [
            self.render_svg(layout, i, total, colors) for i, layout in enumerate(result.sheets)
        ]

    def render_combined_svg(self, result: LayoutResult) -> str:
        """Generate a single SVG with all sheets stacked vertically."""
        if not result.sheets:
            return (
                '<svg width="200" height="50" xmlns="http://www.w3.org/2000/svg">'
                '<text x="10" y="30">No sheets to display</text></svg>'
            )

        spacing = 20
        sheet_svgs = self.render_all_svg(result)
        heights = [
            float(re.search(r'height="([\d.]+)"', svg).group(1)) for svg in sheet_svgs
        ]
        svg_width = max(layout.stock_width_mm for layout in result.sheets) * self.scale
        svg_height = sum(heights) + spacing * (len(heights) - 1)

        parts: list[str] = [
            f'<svg width="{svg_width}" height="{svg_height}" '
            f'xmlns="http://www.w3.org/2000/svg">',
        ]
        y_offset = 0.0
        for layout, svg, height in zip(result.sheets, sheet_svgs, heights):
            parts.append(f'  <g transform="translate(0, {y_offset})">')
            parts.append(f"    <!-- {escape(layout.sheet_id)} -->")
            inner = svg[svg.find(">") + 1 : svg.rfind("</svg>")]
            parts.extend(f"  {line}" for line in inner.strip().split("\n") if line.strip())
            parts.append("  </g>")
            y_offset += height + spacing
        parts.append("</svg>")
        return "\n".join(parts)

    def _render_header(
        self,
        layout: SheetLayout,
        index: int,
        total_sheets: int,
        svg_width: float,
        header_height: float,
    ) -> str:
        text = escape(self._header_text(layout, index, total_sheets))
        return (
            f'  <rect x="0" y="0" width="{svg_width}" height="{header_height}" fill="#E0E0E0"/>\n'
            f'  <text x="10" y="{header_height - 8}" font-family="Arial, sans-serif" '
            f'font-size="14" fill="{self.text_color}">{text}</text>'
        )

    def _header_text(self, layout: SheetLayout, index: int, total_sheets: int) -> str:
        efficiency = (
            layout.used_area_mm2 / layout.sheet_area_mm2 * 100 if layout.sheet_area_mm2 else 0.0
        )
        material = layout.material_label or layout.material_id or "unassigned"
        return (
            f"Sheet {index + 1} of {total_sheets} ({layout.sheet_id}) - "
            f"{layout.stock_length_mm:.0f}x{layout.stock_width_mm:.0f} {material} - "
            f"{efficiency:.1f}% used"
        )

    def _render_piece(self, placement: Placement, fill: str, header_height: float) -> str:
        x = placement.x * self.scale
        y = header_height + placement.y * self.scale
        w = placement.w * self.scale
        h = placement.h * self.scale

        rect = (
            f'    <rect x="{x}" y="{y}" width="{w}" height="{h}" '
            f'fill="{fill}" stroke="{self.piece_stroke}"/>'
        )
        font_size = min(12, min(w, h) / 6)
        svg_parts = ["  <g>", rect]

        if font_size >= 6:
            text_x = x + w / 2
            text_y = y + h / 2
            if self.show_labels:
                svg_parts.append(
                    f'    <text x="{text_x}" y="{text_y - font_size / 2}" text-anchor="middle" '
                    f'font-family="Arial, sans-serif" font-size="{font_size}" '
                    f'fill="{self.text_color}">{escape(placement.label)}</text>'
                )
            if self.show_dimensions:
                dims = f"{placement.original_length_mm:.0f} x {placement.original_width_mm:.0f}"
                if placement.rotated:
                    dims += " (R)"
                dims_y = text_y + font_size / 2 + 2 if self.show_labels else text_y
                svg_parts.append(
                    f'    <text x="{text_x}" y="{dims_y}" text-anchor="middle" '
                    f'font-family="Arial, sans-serif" font-size="{font_size * 0.8}" '
                    f'fill="{self.text_color}">{dims}</text>'
                )

        if self.show_grain:
            grain_svg = self._render_grain_indicator(placement, x, y, w, h, font_size)
            if grain_svg:
                svg_parts.append(grain_svg)

        svg_parts.append("  </g>")
        return "\n".join(svg_parts)

    def _render_grain_indicator(
        self,
        placement: Placement,
        x: float,
        y: float,
        w: float,
        h: float,
        font_size: float,
    ) -> str | None:
        """Draw an arrow along the part's length for grain-locked parts.

        The part's length runs along the sheet Y axis unless it is rotated.
        """
        if placement.grain == Grain.ANY:
            return None

        margin = max(5, font_size)
        length = min(20, min(w, h) / 4)
        if length <= 0:
            return None
        ax = x + w - margin - length
        ay = y + h - margin

        if placement.rotated:
            return self._render_arrow(ax, ay - length / 2, ax + length, ay - length / 2)
        return self._render_arrow(ax + length / 2, ay - length, ax + length / 2, ay)

    def _render_arrow(self, x1: float, y1: float, x2: float, y2: float) -> str:
        angle = math.atan2(y2 - y1, x2 - x1)
        head_length = 6
        head_angle = math.pi / 6

        lx = x2 - head_length * math.cos(angle - head_angle)
        ly = y2 - head_length * math.sin(angle - head_angle)
        rx = x2 - head_length * math.cos(angle + head_angle)
        ry = y2 - head_length * math.sin(angle + head_angle)

        return (
            f'    <line x1="{x1}" y1="{y1}" x2="{x2}" y2="{y2}" '
            f'stroke="{self.text_color}" stroke-width="1.5"/>\n'
            f'    <polygon points="{x2},{y2} {lx},{ly} {rx},{ry}" fill="{self.text_color}"/>'
        )

    def _legend_height(self, group_count: int) -> float:
        if not group_count or not self.show_legend:
            return 0.0
        rows = (group_count + 2) // 3
        return 20 + 10 + rows * 25 + 10

    def _render_legend(
        self,
        groups: list[str],
        colors: dict[str, str],
        svg_width: float,
        y_offset: float,
    ) -> str:
        """Legend of part groups (3 columns) with their fill colours."""
        parts: list[str] = [
            f'  <rect x="0" y="{y_offset}" width="{svg_width}" '
            f'height="{self._legend_height(len(groups))}" fill="#F5F5F5" stroke="#CCCCCC"/>',
            f'  <text x="10" y="{y_offset + 18}" font-family="Arial, sans-serif" '
            f'font-size="12" font-weight="bold" fill="{self.text_color}">Parts:</text>',
        ]
        column_width = svg_width / 3
        swatch = 15
        start_y = y_offset + 35

        for idx, group in enumerate(groups):
            x = (idx % 3) * column_width + 15
            y = start_y + (idx // 3) * 25
            parts.append(
                f'  <rect x="{x}" y="{y}" width="{swatch}" height="{swatch}" '
                f'fill="{colors.get(group, PART_COLORS[0])}" stroke="{self.piece_stroke}"/>'
            )
            parts.append(
                f'  <text x="{x + swatch + 5}" y="{y + swatch - 3}" '
                f'font-family="Arial, sans-serif" font-size="10" '
                f'fill="{self.text_color}">{escape(group)}</text>'
            )
        return "\n".join(parts)

    def _render_waste_areas(self, layout: SheetLayout, header_height: float) -> str:
        """Shade the strip below the last shelf and the strip right of the widest shelf."""
        if not layout.placements:
            return ""

        parts: list[str] = []
        max_y = max(p.bottom_edge for p in layout.placements)
        max_x = max(p.right_edge for p in layout.placements)

        waste_height = layout.stock_length_mm - max_y
        if waste_height > 1:
            parts.append(
                f'  <rect x="0" y="{header_height + max_y * self.scale}" '
                f'width="{layout.stock_width_mm * self.scale}" '
                f'height="{waste_height * self.scale}" fill="{self.waste_fill}" stroke="none"/>'
            )

        waste_width = layout.stock_width_mm - max_x
        if waste_width > 1:
            parts.append(
                f'  <rect x="{max_x * self.scale}" y="{header_height}" '
                f'width="{waste_width * self.scale}" height="{max_y * self.scale}" '
                f'fill="{self.waste_fill}" stroke="none"/>'
            )
        return "\n".join(parts)

    def render_ascii(
        self,
        layout: SheetLayout,
        width: int = 80,
        index: int = 0,
        total_sheets: int = 1,
    ) -> str:
        """Generate an ASCII cut diagram for a single sheet.

        Args:
            layout: Sheet layout with placements.
            width: Terminal width in characters.
            index: Zero-based position of the sheet in the result.
            total_sheets: Total number of sheets (for the header).

        Returns:
            ASCII representation of the layout.
        """
        usable_width = width - 2
        scale_x = usable_width / layout.stock_width_mm
        aspect_ratio = layout.stock_length_mm / layout.stock_width_mm
        # Terminal characters are roughly twice as tall as they are wide
        grid_height = max(int(usable_width * aspect_ratio * 0.5), 10)
        scale_y = grid_height / layout.stock_length_mm

        grid = [[" " for _ in range(usable_width)] for _ in range(grid_height)]
        for placement in layout.placements:
            self._draw_piece_ascii(grid, placement, scale_x, scale_y)

        lines = [self._header_text(layout, index, total_sheets)]
        lines.append("+" + "-" * usable_width + "+")
        lines.extend("|" + "".join(row) + "|" for row in grid)
        lines.append("+" + "-" * usable_width + "+")
        return "\n".join(lines)

    def _draw_piece_ascii(
        self,
        grid: list[list[str]],
        placement: Placement,
        scale_x: float,
        scale_y: float,
    ) -> None:
        grid_height = len(grid)
        grid_width = len(grid[0]) if grid else 0

        def clamp(value: int, upper: int) -> int:
            return max(0, min(value, upper - 1))

        x1 = clamp(int(placement.x * scale_x), grid_width)
        x2 = clamp(int(placement.right_edge * scale_x), grid_width)
        y1 = clamp(int(placement.y * scale_y), grid_height)
        y2 = clamp(int(placement.bottom_edge * scale_y), grid_height)

        for x in range(x1, x2 + 1):
            grid[y1][x] = "-"
            grid[y2][x] = "-"
        for y in range(y1, y2 + 1):
            grid[y][x1] = "|"
            grid[y][x2] = "|"
        for y, x in ((y1, x1), (y1, x2), (y2, x1), (y2, x2)):
            grid[y][x] = "+"

        dims = f"{placement.original_length_mm:.0f}x{placement.original_width_mm:.0f}"
        if placement.rotated:
            dims += "R"
        for row, text in ((y1 + 1, placement.label), (y1 + 2, dims)):
            if row >= y2:
                continue
            text = text[: max(0, x2 - x1 - 1)]
            for i, char in enumerate(text):
                grid[row][x1 + 1 + i] = char

    def render_all_ascii(self, result: LayoutResult, width: int = 80) -> str:
        """Generate ASCII diagrams for every sheet followed by the text summary."""
        if not result.sheets:
            return "No sheets to display."

        total = len(result.sheets)
        parts: list[str] = []
        for i, layout in enumerate(result.sheets):
            parts.append(self.render_ascii(layout, width, i, total))
            parts.append("")
        parts.append("=" * width)
        parts.append(self.render_summary(result))
        return "\n".join(parts)

    def render_summary(self, result: LayoutResult) -> str:
        """Generate a text summary of sheets, efficiency, banding and billing."""
        lines: list[str] = [
            "CUTLIST OPTIMIZATION SUMMARY",
            "=" * 40,
            f"Total Sheets: {result.total_sheets}",
            f"Parts Placed: {result.total_pieces_placed}",
            f"Overall Efficiency: {result.overall_efficiency * 100:.1f}%",
            f"Total Cut Length: {result.total_cut_length_mm / 1000:.2f} m",
            f"Billable Boards: {result.total_billable_sheets}",
            "",
            "Sheets by Material:",
        ]
        for material_id, count in result.sheets_by_material.items():
            lines.append(f"  {material_id or 'unassigned'}: {_plural(count, 'sheet')}")

        lines.append("")
        lines.append("Per-Sheet Details:")
        for layout in result.sheets:
            stats = result.sheet_stats.get(layout.sheet_id)
            efficiency = stats.efficiency_pct if stats else 0.0
            billed = result.billing.get(layout.sheet_id)
            billed_text = f", billed {billed}" if billed is not None else ""
            lines.append(
                f"  {layout.sheet_id}: {_plural(layout.piece_count, 'part')}, "
                f"{efficiency:.1f}% used{billed_text}"
            )

        if result.edge_banding:
            lines.append("")
            lines.append("Edge Banding:")
            for key, mm in result.edge_banding.items():
                lines.append(
                    f"  {key.material_id or 'unassigned'} {key.thickness_mm:g}mm: {mm / 1000:.2f} m"
                )

        if result.unplaced:
            lines.append("")
            lines.append(f"Unplaced Parts: {result.total_unplaced}")
            for unplaced in result.unplaced:
                lines.append(
                    f"  {unplaced.part.display_label}: {unplaced.count} "
                    f"({unplaced.reason.value})"
                )

        return "\n".join(lines)
