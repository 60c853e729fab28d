"""Output formatters and exporters for nesting results."""

from __future__ import annotations

import json
from typing import Any

from stocknest.domain.value_objects import LinearPart, Part

from .linear_packing import LinearNestingResult, StockLayout
from .sheet_packing import PlacedPart, SheetLayout, SheetNestingResult


class SheetNestingReportFormatter:
    """Formats sheet nesting results as a plain-text report.

    The report lists each sheet with its utilization, optionally followed by
    the placed parts, then totals and any unplaced parts.
    """

    def __init__(self, include_placements: bool = True) -> None:
        """Initialize formatter.

        Args:
            include_placements: Whether to list placed parts under each sheet.
        """
        self._include_placements = include_placements

    def format(self, result: SheetNestingResult) -> str:
        if not result.layouts and not result.unplaced_parts:
            return "No parts to nest."

        lines = [
            "SHEET NESTING",
            "=" * 78,
            f"{'Sheet':<7} {'Size':<22} {'Grade':<10} {'Parts':<7} "
            f"{'Waste %':<9} {'Used kg':<10} {'Waste kg'}",
            "-" * 78,
        ]
        for layout in result.layouts:
            lines.append(self._format_layout_row(layout))
            if self._include_placements:
                for placement in layout.placements:
                    lines.append(self._format_placement(placement))

        lines.append("-" * 78)
        lines.append(
            f"{'TOTAL':<7} {result.total_sheets:<22} {'':<10} "
            f"{result.total_parts_placed:<7} {result.total_waste_percentage:<9.1f} "
            f"{result.total_used_weight:<10.2f} {result.total_waste_weight:.2f}"
        )

        if result.sheets_used:
            lines.append("")
            lines.append("Sheets used:")
            for key, count in result.sheets_used.items():
                lines.append(f"  {key}: {count}")

        if result.unplaced_parts:
            lines.append("")
            lines.append("Unplaced parts:")
            for part in result.unplaced_parts:
                lines.append(self._format_unplaced(part))

        return "\n".join(lines)

    def _format_layout_row(self, layout: SheetLayout) -> str:
        sheet = layout.sheet
        size = f"{sheet.length:g} x {sheet.width:g} x {sheet.thickness:g}"
        return (
            f"{layout.sheet_index:<7} {size:<22} {sheet.grade:<10} "
            f"{layout.piece_count:<7} {layout.waste_percentage:<9.1f} "
            f"{layout.used_weight:<10.2f} {layout.waste_weight:.2f}"
        )

    def _format_placement(self, placement: PlacedPart) -> str:
        part = placement.part
        label = part.name or f"#{part.original_id}"
        note = " (rotated)" if placement.rotated else ""
        return (
            f"        {label:<20} {part.length:g} x {part.width:g} "
            f"at ({placement.x:g}, {placement.y:g}){note}"
        )

    def _format_unplaced(self, part: Part) -> str:
        label = part.name or f"#{part.original_id}"
        return (
            f"  {label:<20} {part.length:g} x {part.width:g} x {part.thickness:g} "
            f"{part.grade:<8} qty {part.quantity}"
        )


class LinearNestingReportFormatter:
    """Formats bar nesting results as a plain-text report."""

    def format(self, result: LinearNestingResult) -> str:
        if not result.layouts and not result.unplaced_parts:
            return "No parts to nest."

        lines = [
            "BAR NESTING",
            "=" * 78,
            f"{'Bar':<6} {'Material':<16} {'Stock':<10} {'Used':<10} "
            f"{'Waste':<10} {'Waste %':<8} {'Cuts'}",
            "-" * 78,
        ]
        for layout in result.layouts:
            lines.append(self._format_layout(layout))

        lines.append("-" * 78)
        lines.append(
            f"{'TOTAL':<6} {result.total_stock_used:<16} "
            f"{result.total_stock_length:<10g} {'':<10} "
            f"{result.total_waste:<10g} {result.total_waste_percentage:.1f}"
        )

        if result.unplaced_parts:
            lines.append("")
            lines.append("Unplaced parts:")
            for part in result.unplaced_parts:
                lines.append(self._format_unplaced(part))

        return "\n".join(lines)

    def _format_layout(self, layout: StockLayout) -> str:
        cuts = ", ".join(f"{cut.length:g}" for cut in layout.cuts)
        return (
            f"{layout.stock_index:<6} {layout.raw_material:<16} "
            f"{layout.stock_length:<10g} {layout.used_length:<10g} "
            f"{layout.waste_length:<10g} {layout.waste_percentage:<8.1f} {cuts}"
        )

    def _format_unplaced(self, part: LinearPart) -> str:
        return (
            f"  #{part.id:<6} {part.raw_material:<16} {part.length:g} "
            f"qty {part.quantity}"
        )


class NestingJsonExporter:
    """Exports nesting results as JSON."""

    def export_sheet(self, result: SheetNestingResult) -> str:
        """Export a sheet nesting result as a JSON string."""
        data = {
            "layouts": [self._sheet_layout(layout) for layout in result.layouts],
            "unplaced_parts": [
                self._part(part) for part in result.unplaced_parts
            ],
            "sheets_used": dict(result.sheets_used),
            "totals": {
                "sheets": result.total_sheets,
                "parts_placed": result.total_parts_placed,
                "sheet_area": result.total_sheet_area,
                "used_area": result.total_used_area,
                "waste_area": result.total_waste_area,
                "used_weight": result.total_used_weight,
                "waste_weight": result.total_waste_weight,
                "waste_percentage": result.total_waste_percentage,
            },
        }
        return json.dumps(data, indent=2)

    def export_linear(self, result: LinearNestingResult) -> str:
        """Export a bar nesting result as a JSON string."""
        data = {
            "layouts": [self._stock_layout(layout) for layout in result.layouts],
            "unplaced_parts": [
                {
                    "id": part.id,
                    "raw_material": part.raw_material,
                    "length": part.length,
                    "effective_length": part.effective_length,
                    "quantity": part.quantity,
                }
                for part in result.unplaced_parts
            ],
            "totals": {
                "stock_used": result.total_stock_used,
                "stock_length": result.total_stock_length,
                "waste": result.total_waste,
                "waste_percentage": result.total_waste_percentage,
            },
        }
        return json.dumps(data, indent=2)

    def _sheet_layout(self, layout: SheetLayout) -> dict[str, Any]:
        sheet = layout.sheet
        return {
            "sheet_index": layout.sheet_index,
            "sheet": {
                "id": sheet.id,
                "length": sheet.length,
                "width": sheet.width,
                "thickness": sheet.thickness,
                "grade": sheet.grade,
            },
            "placements": [
                {
                    "part_id": p.part.id,
                    "original_id": p.part.original_id,
                    "instance": str(p.part.instance_key) if p.part.instance_key else None,
                    "name": p.part.name,
                    "length": p.part.length,
                    "width": p.part.width,
                    "x": p.x,
                    "y": p.y,
                    "rotated": p.rotated,
                }
                for p in layout.placements
            ],
            "used_area": layout.used_area,
            "waste_area": layout.waste_area,
            "waste_percentage": layout.waste_percentage,
            "used_weight": layout.used_weight,
            "waste_weight": layout.waste_weight,
        }

    def _stock_layout(self, layout: StockLayout) -> dict[str, Any]:
        return {
            "stock_index": layout.stock_index,
            "stock_length": layout.stock_length,
            "raw_material": layout.raw_material,
            "cuts": [
                {
                    "id": cut.id,
                    "instance_id": str(cut.instance_id),
                    "length": cut.length,
                    "effective_length": cut.effective_length,
                }
                for cut in layout.cuts
            ],
            "used_length": layout.used_length,
            "waste_length": layout.waste_length,
            "waste_percentage": layout.waste_percentage,
        }

    def _part(self, part: Part) -> dict[str, Any]:
        return {
            "id": part.id,
            "original_id": part.original_id,
            "name": part.name,
            "length": part.length,
            "width": part.width,
            "thickness": part.thickness,
            "grade": part.grade,
            "quantity": part.quantity,
        }
