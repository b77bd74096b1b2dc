"""
simulation/excel_exporter.py

Export circuit analysis reports to Excel (.xlsx) format.
No Qt dependencies; the file dialog belongs to the view.
"""

from datetime import datetime

from openpyxl import Workbook
from openpyxl.styles import Alignment, Font, PatternFill

_SEVERITY_FILLS = {
    "error": "F8CBAD",
    "warning": "FFE699",
    "info": "DDEBF7",
}


def _add_metadata_sheet(wb, stats, circuit_name=""):
    """Add a Summary sheet with circuit metadata and headline stats."""
    ws = wb.active
    ws.title = "Summary"
    header_font = Font(bold=True)
    ws.append(["Circuit Analysis Summary"])
    ws["A1"].font = Font(bold=True, size=14)
    ws.append([])
    ws.append(["Date", datetime.now().strftime("%Y-%m-%d %H:%M:%S")])
    if circuit_name:
        ws.append(["Circuit", circuit_name])
    ws.append(["Complete", "Yes" if stats.is_complete else "No"])
    ws.append(["Paths", stats.path_count])
    ws.append(["Active Components", stats.active_components])
    ws.append(["Total Components", stats.total_components])
    ws.append(["Total Power (W)", round(stats.total_power, 3)])
    ws.append(["Running", "Yes" if stats.running else "No"])
    for row in ws.iter_rows(min_row=3, max_col=1):
        row[0].font = header_font
    ws.column_dimensions["A"].width = 20
    ws.column_dimensions["B"].width = 30
    return ws


def _style_header_row(ws, row_num=1):
    """Apply header styling to the first row of a worksheet."""
    header_fill = PatternFill(
        start_color="4472C4", end_color="4472C4", fill_type="solid"
    )
    header_font = Font(bold=True, color="FFFFFF")
    for cell in ws[row_num]:
        cell.font = header_font
        cell.fill = header_fill
        cell.alignment = Alignment(horizontal="center")


def export_to_excel(analysis, filepath, circuit_name="", components=None):
    """Export a circuit analysis to an Excel workbook.

    Args:
        analysis: CircuitAnalysis from CircuitSimulator.analyze_circuit()
        filepath: path to write the .xlsx file
        circuit_name: optional circuit filename for metadata
        components: optional iterable of ComponentData for a Readings sheet
    """
    wb = Workbook()
    _add_metadata_sheet(wb, analysis.stats, circuit_name)
    _export_paths(wb, analysis.paths)
    _export_problems(wb, analysis.problems)
    if components is not None:
        _export_readings(wb, components)
    wb.save(filepath)


def _export_paths(wb, paths):
    """One row per discovered path."""
    ws = wb.create_sheet("Paths")
    ws.append(["Path", "Components", "Component Types", "Resistance (Ohm)"])
    _style_header_row(ws)
    for path in paths:
        ws.append([
            path.index,
            path.component_count,
            " > ".join(path.component_types),
            round(path.total_resistance, 2),
        ])
    ws.column_dimensions["A"].width = 8
    ws.column_dimensions["B"].width = 12
    ws.column_dimensions["C"].width = 50
    ws.column_dimensions["D"].width = 18


def _export_problems(wb, problems):
    """Problem list, colour-coded by severity."""
    ws = wb.create_sheet("Problems")
    ws.append(["Severity", "Message", "Component"])
    _style_header_row(ws)
    if not problems:
        ws.append(["-", "No problems detected", ""])
    for problem in problems:
        severity = problem.severity.value
        ws.append([severity, problem.message, problem.component_id or ""])
        color = _SEVERITY_FILLS.get(severity)
        if color:
            ws.cell(row=ws.max_row, column=1).fill = PatternFill(
                start_color=color, end_color=color, fill_type="solid"
            )
    ws.column_dimensions["A"].width = 12
    ws.column_dimensions["B"].width = 60
    ws.column_dimensions["C"].width = 14


def _export_readings(wb, components):
    """Per-component current, voltage and damage."""
    ws = wb.create_sheet("Readings")
    ws.append(["Component", "Type", "Current (A)", "Voltage (V)", "Damaged"])
    _style_header_row(ws)
    for component in components:
        ws.append([
            component.component_id,
            component.component_type,
            component.current,
            component.voltage,
            "Yes" if component.damaged else "No",
        ])
    for col in "ABCDE":
        ws.column_dimensions[col].width = 15
