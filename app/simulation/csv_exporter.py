"""
simulation/csv_exporter.py

Export circuit analysis reports to CSV format.
No Qt dependencies; the file dialog belongs to the view.
"""

import csv
import io
from datetime import datetime


def _write_header(writer, title, circuit_name=""):
    writer.writerow(["# Report", title])
    writer.writerow(["# Date", datetime.now().strftime("%Y-%m-%d %H:%M:%S")])
    if circuit_name:
        writer.writerow(["# Circuit", circuit_name])
    writer.writerow([])


def export_analysis(analysis, circuit_name=""):
    """
    Export a CircuitAnalysis to CSV string.

    Three blocks separated by blank rows: summary stats, one row per
    path, and the problem list.

    Args:
        analysis: CircuitAnalysis from CircuitSimulator.analyze_circuit()
        circuit_name: optional circuit filename

    Returns:
        str: CSV content
    """
    output = io.StringIO()
    writer = csv.writer(output)
    _write_header(writer, "Circuit Analysis", circuit_name)

    stats = analysis.stats
    writer.writerow(["Statistic", "Value"])
    writer.writerow(["Complete", stats.is_complete])
    writer.writerow(["Paths", stats.path_count])
    writer.writerow(["Active Components", stats.active_components])
    writer.writerow(["Total Components", stats.total_components])
    writer.writerow(["Total Power (W)", f"{stats.total_power:.3f}"])
    writer.writerow(["Running", stats.running])
    writer.writerow([])

    writer.writerow(["Path", "Components", "Component Types", "Resistance (Ohm)"])
    for path in analysis.paths:
        writer.writerow([
            path.index,
            path.component_count,
            " > ".join(path.component_types),
            f"{path.total_resistance:.2f}",
        ])
    writer.writerow([])

    writer.writerow(["Severity", "Message", "Component"])
    for problem in analysis.problems:
        writer.writerow([problem.severity.value, problem.message, problem.component_id or ""])

    return output.getvalue()


def export_component_readings(components, circuit_name=""):
    """
    Export per-component electrical readings to CSV string.

    Args:
        components: iterable of ComponentData
        circuit_name: optional circuit filename

    Returns:
        str: CSV content
    """
    output = io.StringIO()
    writer = csv.writer(output)
    _write_header(writer, "Component Readings", circuit_name)

    writer.writerow(["Component", "Type", "Current (A)", "Voltage (V)", "Damaged"])
    for component in components:
        writer.writerow([
            component.component_id,
            component.component_type,
            f"{component.current:.6f}",
            f"{component.voltage:.4f}",
            component.damaged,
        ])

    return output.getvalue()


def write_csv(content, filepath):
    """Write CSV content string to a file."""
    with open(filepath, "w", newline="") as f:
        f.write(content)
