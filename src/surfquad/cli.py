"""
Command-line interface for surfquad.

Provides commands for quadrangulating a scene and writing a default config.
"""

import argparse
import sys

from surfquad.config import load_config, save_default_config
from surfquad.io.load_input import validate_input_path
from surfquad.tracer import configure_tracer, get_tracer


def main(argv=None):
    """Main entry point for the CLI."""
    parser = argparse.ArgumentParser(
        description="surfquad: quadrangulate a surface from its Morse-Smale complex",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Run command
    run_parser = subparsers.add_parser("run", help="Quadrangulate a scene")
    run_parser.add_argument(
        "--input", "-i",
        required=True,
        help="Scene file (.json or .npz)",
    )
    run_parser.add_argument(
        "--out", "-o",
        required=True,
        help="Output directory",
    )
    run_parser.add_argument(
        "--config", "-c",
        default=None,
        help="Path to YAML configuration file",
    )
    run_parser.add_argument(
        "--dual",
        action="store_true",
        default=None,
        help="Build dual quads on extrema only",
    )
    run_parser.add_argument(
        "--trace",
        action="store_true",
        help="Enable runtime tracing",
    )
    run_parser.add_argument(
        "--trace-level",
        default=None,
        choices=["ERROR", "WARN", "INFO", "DEBUG"],
        help="Trace log level",
    )
    run_parser.add_argument(
        "--trace-file",
        default=None,
        help="Path to write trace logs",
    )
    run_parser.add_argument(
        "--trace-json",
        action="store_true",
        help="Enable JSON trace output",
    )

    # Init config command
    init_parser = subparsers.add_parser("init-config", help="Create default config file")
    init_parser.add_argument(
        "--out", "-o",
        default="surfquad_config.yaml",
        help="Output path for config file",
    )

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    if args.command == "run":
        return handle_run(args)
    elif args.command == "init-config":
        return handle_init_config(args)

    return 0


def handle_run(args):
    """Handle the run command."""
    config = load_config(args.config)

    configure_tracer(
        enabled=args.trace or config.tracing.enabled,
        level=args.trace_level or config.tracing.level,
        file_path=args.trace_file or config.tracing.file_path,
        json_output=args.trace_json or config.tracing.json_output,
    )

    tracer = get_tracer()

    errors = validate_input_path(args.input)
    if errors:
        for error in errors:
            tracer.event(error, level="ERROR")
            print(f"Error: {error}", file=sys.stderr)
        return 1

    try:
        from surfquad.pipeline import run_pipeline

        with tracer.span("cli_run", module="cli"):
            result, report = run_pipeline(
                input_path=args.input,
                out_dir=args.out,
                config=config,
                dual=args.dual,
            )
    except ValueError as e:
        tracer.event(f"Quadrangulation failed: {str(e)}", level="ERROR")
        print(f"\nError: {str(e)}", file=sys.stderr)
        return 1

    summary = result.summary
    mode = "dual" if summary.dual else "direct"
    print(f"\nQuadrangulation completed ({mode}).")
    print(f"  Quads: {summary.quad_count} ({summary.degenerate_count} degenerated)")
    print(f"  Manifolds: {summary.manifold_count}")
    print(f"  Bad quads: {summary.bad_quad_count}")
    print(f"  Subdivision points: {summary.subdivision_point_count}")
    print(f"  Validation errors: {report.error_count}")
    print(f"  Validation warnings: {report.warning_count}")
    print(f"\nOutputs saved to: {args.out}/")

    if report.has_errors:
        print("\n[!] Validation errors detected. Review validation_report.json")
        return 1

    return 0


def handle_init_config(args):
    """Handle the init-config command."""
    save_default_config(args.out)
    print(f"Default configuration saved to: {args.out}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
