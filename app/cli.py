"""
Command-line interface for Circuit Sandbox batch operations.

Analyze circuits, check robot wiring, run a fixed number of simulation
ticks and export reports without the GUI.

Usage::

    python -m cli analyze circuit.json
    python -m cli analyze circuit.json --ticks 1
    python -m cli validate robot.json
    python -m cli simulate circuit.json --ticks 60 --format csv
    python -m cli export circuit.json --format xlsx --output report.xlsx
    python -m cli insights circuit.json --running
"""

import argparse
import json
import logging
import sys
from pathlib import Path

from controllers.circuit_controller import CircuitController
from controllers.file_controller import validate_circuit_data
from controllers.simulation_controller import SimulationController
from models.circuit import CircuitModel
from simulation.csv_exporter import export_analysis, export_component_readings
from simulation.excel_exporter import export_to_excel

DEFAULT_TICKS = 60


def try_load_circuit(filepath: str) -> tuple[CircuitModel | None, str]:
    """Load and validate a circuit JSON file without exiting.

    Args:
        filepath: Path to the circuit JSON file.

    Returns:
        (model, "") on success, or (None, error_message) on failure.
    """
    path = Path(filepath)
    if not path.exists():
        return None, f"file not found: {filepath}"

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        return None, f"invalid JSON in {filepath}: {e}"
    except (OSError, ValueError) as e:
        return None, f"could not read {filepath}: {e}"

    try:
        validate_circuit_data(data)
    except ValueError as e:
        return None, f"invalid circuit file: {e}"

    return CircuitModel.from_dict(data), ""


def load_circuit(filepath: str) -> CircuitModel:
    """Load and validate a circuit JSON file.

    Raises:
        SystemExit: On file read or validation errors.
    """
    model, error = try_load_circuit(filepath)
    if model is None:
        print(f"Error: {error}", file=sys.stderr)
        sys.exit(1)
    return model


def _build_controllers(model: CircuitModel) -> SimulationController:
    controller = CircuitController(model)
    return SimulationController(model, controller)


def _emit_output(text: str, output: str | None, label: str) -> None:
    if output:
        Path(output).write_text(text, encoding="utf-8")
        print(f"{label} written to {output}", file=sys.stderr)
    else:
        print(text)


def cmd_analyze(args: argparse.Namespace) -> int:
    """Print stats, problems and paths as JSON."""
    model = load_circuit(args.circuit)
    sim = _build_controllers(model)
    if args.ticks > 0:
        sim.run(args.ticks)

    analysis = sim.analyze()
    _emit_output(json.dumps(analysis.to_dict(), indent=2), args.output, "Analysis")
    return 0


def cmd_validate(args: argparse.Namespace) -> int:
    """Print the robot wiring checklist; non-zero unless the harness is complete."""
    model = load_circuit(args.circuit)
    sim = _build_controllers(model)
    validator = sim.validator

    if not validator.has_robotics_components():
        print(f"No robot components in {args.circuit}", file=sys.stderr)
        return 1

    checklist = sim.get_checklist()
    for item in checklist:
        mark = "x" if item.connected else " "
        print(f"  [{mark}] {item.label}")
    print(f"{validator.get_progress()}/{validator.get_total()} connections")

    if validator.is_complete():
        print(f"Robot wiring is complete: {args.circuit}")
        return 0
    print(f"Robot wiring is incomplete: {args.circuit}", file=sys.stderr)
    return 1


def _readings_to_json(model: CircuitModel, result) -> str:
    output = {
        "running": result.running,
        "paths": [path.component_ids() for path in result.paths],
        "components": [
            {
                "id": c.component_id,
                "type": c.component_type,
                "current": c.current,
                "voltage": c.voltage,
                "damaged": c.damaged,
                "is_on": c.is_on,
                "spinning": c.spinning,
            }
            for c in model.components.values()
        ],
        "effects": [
            {"component": e.component_id, "kinds": [k.value for k in e.kinds()]}
            for e in result.effects
        ],
    }
    return json.dumps(output, indent=2)


def cmd_simulate(args: argparse.Namespace) -> int:
    """Run the tick loop and report the final component readings."""
    model = load_circuit(args.circuit)
    sim = _build_controllers(model)
    result = sim.run(args.ticks)

    for effect in result.effects:
        print(f"Warning: {effect.component_type} {effect.component_id} was damaged", file=sys.stderr)

    if args.format == "csv":
        text = export_component_readings(model.components.values(), Path(args.circuit).stem)
    else:
        text = _readings_to_json(model, result)
    _emit_output(text, args.output, "Readings")
    return 0


def cmd_export(args: argparse.Namespace) -> int:
    """Export an analysis report as CSV or Excel."""
    model = load_circuit(args.circuit)
    sim = _build_controllers(model)
    if args.ticks > 0:
        sim.run(args.ticks)
    analysis = sim.analyze()
    name = Path(args.circuit).stem

    if args.format == "xlsx":
        if not args.output:
            print("Error: --output is required for xlsx export", file=sys.stderr)
            return 1
        try:
            export_to_excel(analysis, args.output, name, model.components.values())
        except OSError as e:
            print(f"Error writing {args.output}: {e}", file=sys.stderr)
            return 1
        print(f"Report written to {args.output}", file=sys.stderr)
        return 0

    _emit_output(export_analysis(analysis, name), args.output, "Report")
    return 0


def cmd_insights(args: argparse.Namespace) -> int:
    """Print learning tips for the circuit."""
    model = load_circuit(args.circuit)
    sim = _build_controllers(model)
    if args.running:
        sim.run(1)

    for insight in sim.insights():
        print(f"[{insight.level.value.upper()}] {insight.title}")
        if insight.text:
            print(f"    {insight.text}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    """Build the CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="circuit-sandbox",
        description="Circuit Sandbox batch operations: analyze, simulate and export circuits from the command line.",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Log debug output to stderr")
    subparsers = parser.add_subparsers(dest="command", required=True)

    # analyze
    analyze_parser = subparsers.add_parser("analyze", help="Print circuit stats, problems and paths as JSON")
    analyze_parser.add_argument("circuit", help="Path to circuit JSON file")
    analyze_parser.add_argument("--ticks", type=int, default=0, help="Simulation ticks to run first (default: 0)")
    analyze_parser.add_argument("--output", "-o", help="Write output to file instead of stdout")

    # validate
    val_parser = subparsers.add_parser("validate", help="Check robot harness wiring")
    val_parser.add_argument("circuit", help="Path to circuit JSON file")

    # simulate
    sim_parser = subparsers.add_parser("simulate", help="Run simulation ticks and output readings")
    sim_parser.add_argument("circuit", help="Path to circuit JSON file")
    sim_parser.add_argument(
        "--ticks", type=int, default=DEFAULT_TICKS, help=f"Number of ticks to run (default: {DEFAULT_TICKS})"
    )
    sim_parser.add_argument("--format", choices=["json", "csv"], default="json", help="Output format (default: json)")
    sim_parser.add_argument("--output", "-o", help="Write readings to file instead of stdout")

    # export
    exp_parser = subparsers.add_parser("export", help="Export an analysis report")
    exp_parser.add_argument("circuit", help="Path to circuit JSON file")
    exp_parser.add_argument(
        "--format", "-f", choices=["csv", "xlsx"], default="csv", help="Report format (default: csv)"
    )
    exp_parser.add_argument("--ticks", type=int, default=1, help="Simulation ticks to run first (default: 1)")
    exp_parser.add_argument("--output", "-o", help="Write report to file (required for xlsx)")

    # insights
    ins_parser = subparsers.add_parser("insights", help="Print learning tips for a circuit")
    ins_parser.add_argument("circuit", help="Path to circuit JSON file")
    ins_parser.add_argument("--running", action="store_true", help="Run one tick first and report live readings")

    return parser


def main(argv=None) -> int:
    """CLI entry point. Returns exit code."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    handlers = {
        "analyze": cmd_analyze,
        "validate": cmd_validate,
        "simulate": cmd_simulate,
        "export": cmd_export,
        "insights": cmd_insights,
    }

    handler = handlers.get(args.command)
    if handler is None:
        parser.print_help()
        return 1

    return handler(args)


if __name__ == "__main__":
    sys.exit(main())
