"""Command line interface for inspecting and running content workflows.

Workflows and payloads are read from JSON or YAML files. Only virtual runs
are available here: record-backed runs need the host's record store.
"""
from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from pydantic import ValidationError

from .config import WorkflowConfig, load_environment
from .orchestration.definitions import WorkflowDefinition
from .orchestration.registry import WorkflowRegistry
from .orchestration.runner import WorkflowRunner
from .ui.console import ConsoleManager
from .utils.logging_factory import LoggingFactory

__version__ = "1.0.0"

logger = logging.getLogger(__name__)


def create_parser() -> argparse.ArgumentParser:
    """Create and configure the argument parser.

    Returns:
        Configured ArgumentParser instance
    """
    parser = argparse.ArgumentParser(
        prog="content-workflows",
        description="Run content transformation workflows on translation payloads",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""Examples:
  # List registered steps
  content-workflows steps

  # Check a workflow definition
  content-workflows validate workflow.json --virtual

  # Run a workflow on a payload and write the result
  content-workflows run workflow.yaml payload.json --output result.json
        """,
    )

    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable verbose logging")
    parser.add_argument(
        "--json-output",
        action="store_true",
        help="Emit machine-readable JSON documents on stdout",
    )
    parser.add_argument("--env-file", type=Path, help="Load settings from this .env file")

    subparsers = parser.add_subparsers(dest="command", help="Available commands", required=True)

    steps_parser = subparsers.add_parser("steps", help="List registered workflow steps")
    steps_parser.add_argument(
        "--external-only",
        action="store_true",
        help="Only show steps that can run on payloads",
    )

    validate_parser = subparsers.add_parser("validate", help="Validate a workflow definition")
    validate_parser.add_argument("workflow", help="Workflow file (JSON or YAML)")
    validate_parser.add_argument(
        "--virtual",
        action="store_true",
        help="Also report steps that cannot run on payloads",
    )

    check_parser = subparsers.add_parser(
        "check", help="Check whether a workflow can run on payloads"
    )
    check_parser.add_argument("workflow", help="Workflow file (JSON or YAML)")

    run_parser = subparsers.add_parser("run", help="Run a workflow on a payload file")
    run_parser.add_argument("workflow", help="Workflow file (JSON or YAML)")
    run_parser.add_argument("payload", help="Payload file (JSON or YAML)")
    run_parser.add_argument("--output", "-o", help="Write the resulting payload to this file")
    run_parser.add_argument("--source-language", help="Override the payload source language")
    run_parser.add_argument("--target-language", help="Override the payload target language")
    run_parser.add_argument(
        "--stop-on-error",
        action="store_true",
        help="Stop at the first step error",
    )
    run_parser.add_argument(
        "--strict",
        action="store_true",
        help="Treat ineligible steps as errors instead of skipping them",
    )

    return parser


def load_document(path: Path) -> Any:
    """Load a JSON or YAML file.

    Raises:
        ValueError: If the file cannot be parsed
    """
    text = path.read_text(encoding="utf-8")
    try:
        if path.suffix.lower() in (".yaml", ".yml"):
            return yaml.safe_load(text)
        return json.loads(text)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise ValueError(f"Cannot parse {path}: {e}") from e


def load_workflow(path: Path) -> WorkflowDefinition:
    """Load and validate a workflow definition file."""
    data = load_document(path)
    if not isinstance(data, dict):
        raise ValueError(f"{path} must contain a workflow object")
    try:
        return WorkflowDefinition.model_validate(data)
    except ValidationError as e:
        raise ValueError(f"Invalid workflow in {path}: {e}") from e


def build_runner(config: WorkflowConfig) -> WorkflowRunner:
    """Create a runner with a standalone registry (no host application)."""
    return WorkflowRunner(WorkflowRegistry(config=config))


def steps_command(args: argparse.Namespace, runner: WorkflowRunner, console: ConsoleManager) -> int:
    console.print_steps(runner.get_available_steps(external_only=args.external_only))
    return 0


def validate_command(args: argparse.Namespace, runner: WorkflowRunner, console: ConsoleManager) -> int:
    workflow = load_workflow(Path(args.workflow))
    errors = runner.validate(workflow, for_virtual=args.virtual)
    console.print_validation(errors)
    return 0 if not errors else 1


def check_command(args: argparse.Namespace, runner: WorkflowRunner, console: ConsoleManager) -> int:
    workflow = load_workflow(Path(args.workflow))
    check = runner.check_virtual_compatibility(workflow)
    console.print_compatibility(check)
    return 0 if check["compatible"] else 1


def run_command(args: argparse.Namespace, runner: WorkflowRunner, console: ConsoleManager) -> int:
    """Handle the run subcommand.

    Returns:
        Exit code (0 if no step failed, 1 otherwise)
    """
    workflow = load_workflow(Path(args.workflow))
    payload = load_document(Path(args.payload))
    if not isinstance(payload, dict):
        raise ValueError(f"{args.payload} must contain a payload object")

    payload = _apply_language_overrides(payload, args)

    executor = runner.registry.get_executor()
    if args.stop_on_error:
        executor.set_continue_on_error(False)
    if args.strict:
        executor.set_skip_incompatible(False)

    console.print_stage(f"Workflow: {workflow.name or workflow.id or args.workflow}", "starting")
    result = runner.run_virtual(payload, workflow)

    console.print_report(result["execution"])
    console.print_document("Changes", result["changes"])

    if args.output:
        output_path = Path(args.output)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(
            json.dumps(result["payload"], indent=2, ensure_ascii=False), encoding="utf-8"
        )
        logger.info(f"Wrote resulting payload to {output_path}")

    console.print_stage("Workflow", "complete" if result["success"] else "error")
    return 0 if result["success"] else 1


def _apply_language_overrides(payload: Dict[str, Any], args: argparse.Namespace) -> Dict[str, Any]:
    payload = dict(payload)
    if args.source_language:
        payload["source_language"] = args.source_language
    if args.target_language:
        payload["target_language"] = args.target_language
    return payload


COMMANDS = {
    "steps": steps_command,
    "validate": validate_command,
    "check": check_command,
    "run": run_command,
}


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point.

    Returns:
        Exit code (0 for success, non-zero for failure)
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    load_environment(args.env_file)
    config = WorkflowConfig()

    LoggingFactory.initialize(
        log_dir=config.log_dir,
        level=getattr(logging, config.log_level, logging.INFO),
        log_to_file=config.log_to_file,
        log_to_console=False,
    )
    console = ConsoleManager(verbose=args.verbose, json_output=args.json_output)
    console.setup_logging(logging.getLogger("content_workflows"))

    handler = COMMANDS.get(args.command)
    if handler is None:
        parser.print_help()
        return 1

    try:
        return handler(args, build_runner(config), console)
    except (OSError, ValueError) as e:
        console.print_error(str(e))
        return 1
    except KeyboardInterrupt:
        logger.error("Operation cancelled by user")
        return 1


if __name__ == "__main__":
    sys.exit(main())
