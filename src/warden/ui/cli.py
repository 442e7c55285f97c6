# ruff: noqa: T201

from __future__ import annotations

import argparse
import json
import logging
import sys
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from warden.adapters.manifest import ManifestError, load_manifest
from warden.app import apply_resources, plan_resources
from warden.config import ConfigurationError, configure_logging
from warden.domain.model import ResourceKind

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

    from warden.domain.reconciliation import ApplyResult, PlanAction, ReconcilePlan

log = logging.getLogger(__name__)

_SYMBOLS = {
    "create": "+",
    "update": "~",
    "adopt": "^",
    "delete": "-",
    "skip": "=",
}


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Reconcile Letta resources against a manifest")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    plan = subparsers.add_parser("plan", help="Show what apply would change")
    apply = subparsers.add_parser("apply", help="Plan and execute changes")
    apply.add_argument(
        "--dry-run",
        action="store_true",
        help="Report the plan as executed without calling the API",
    )

    for sub in (plan, apply):
        sub.add_argument(
            "--manifest",
            required=True,
            help="Manifest file or directory of manifest files",
        )
        sub.add_argument(
            "--kind",
            type=ResourceKind,
            choices=list(ResourceKind),
            default=ResourceKind.BLOCK,
            help="Resource kind to reconcile (default: %(default)s)",
        )
        sub.add_argument(
            "--allow-delete",
            action="store_true",
            help="Delete managed resources that are no longer in the manifest",
        )
        sub.add_argument(
            "--package-version",
            type=str,
            help="Version stamp to record on managed resources (e.g. a git SHA)",
        )
        sub.add_argument(
            "--deployment",
            type=str,
            help="Restrict template reconciliation to one deployment id",
        )
        sub.add_argument("--json", action="store_true", help="Emit machine-readable JSON")

    return parser.parse_args(list(argv))


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    parsed_args = _parse_args(args_list)
    configure_logging(level=logging.DEBUG if parsed_args.verbose else logging.INFO)

    try:
        manifest = load_manifest(parsed_args.manifest)
        entries = manifest.entries(parsed_args.kind)
        if parsed_args.command == "plan":
            plan = plan_resources(
                entries,
                kind=parsed_args.kind,
                allow_delete=parsed_args.allow_delete,
                package_version=parsed_args.package_version,
                deployment_id=parsed_args.deployment,
            )
            _emit_plan(plan, as_json=parsed_args.json)
            return

        plan, result = apply_resources(
            entries,
            kind=parsed_args.kind,
            dry_run=parsed_args.dry_run,
            allow_delete=parsed_args.allow_delete,
            package_version=parsed_args.package_version,
            deployment_id=parsed_args.deployment,
        )
        _emit_apply(plan, result, as_json=parsed_args.json)
    except (ConfigurationError, ManifestError):
        log.exception("Invalid input")
        sys.exit(2)
    except Exception:
        log.exception("Fatal error during reconciliation")
        sys.exit(1)

    if not result.success:
        sys.exit(1)


def _emit_plan(plan: ReconcilePlan, *, as_json: bool) -> None:
    if as_json:
        print(json.dumps(plan.to_dict(), indent=2, default=str))
        return
    print(render_plan(plan))


def _emit_apply(plan: ReconcilePlan, result: ApplyResult, *, as_json: bool) -> None:
    if as_json:
        payload = {"plan": plan.to_dict(), "result": result.to_dict()}
        print(json.dumps(payload, indent=2, default=str))
        return
    print(render_plan(plan))
    print()
    print(render_result(result))


def render_plan(plan: ReconcilePlan) -> str:
    lines = [f"Plan {plan.plan_id} ({plan.kind})"]
    lines.extend(f"  warning: {warning}" for warning in plan.warnings)
    for action in plan.actions():
        lines.extend(_render_action(action))
    summary = plan.summary
    lines.append(
        f"{summary.to_create} to create, {summary.to_update} to update, "
        f"{summary.to_delete} to delete, {summary.unchanged} unchanged"
    )
    if not plan.has_changes:
        lines.append("No changes. Remote state matches the manifest.")
    return "\n".join(lines)


def render_result(result: ApplyResult) -> str:
    summary = result.summary
    prefix = "Dry run" if result.dry_run else "Applied"
    lines = [
        f"{prefix}: {summary.created} created, {summary.updated} updated, "
        f"{summary.deleted} deleted, {summary.skipped} skipped, {summary.failed} failed"
    ]
    lines.extend(f"  error: {error}" for error in result.errors)
    return "\n".join(lines)


def _render_action(action: PlanAction) -> list[str]:
    lines = [f"{_SYMBOLS[action.type]} {action.type:<6} {action.name}: {action.reason}"]
    for change in action.changes:
        if change.old_value is None:
            lines.append(f"    {change.field}: {change.new_value!r}")
        else:
            lines.append(f"    {change.field}: {change.old_value!r} -> {change.new_value!r}")
    return lines


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
