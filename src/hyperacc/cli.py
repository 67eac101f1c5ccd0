"""
CLI entry point for hyperacc.

The library is meant to be embedded in transaction code; the CLI is a
host-side tool for dry-running declarative policies against identities
described in YAML before deploying them.

Commands:
    check       Evaluate a policy against an identity
    show        Print a policy's rule tree
    validate    Validate a policy file

Exit codes for `check`:
    0   access allowed
    1   access denied
    2   identity lookup failed, or a file could not be loaded
"""

import json
import logging
import traceback
from pathlib import Path
from typing import Annotated, Any, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich.tree import Tree

from hyperacc import __version__
from hyperacc.errors import AccessError, HyperaccError, error_text
from hyperacc.identity import IdentityContext
from hyperacc.notify import MemoryNotifier, log_access_denied
from hyperacc.policy import build_controller, build_identity
from hyperacc.rules import Rule
from hyperacc.schema import load_identity, load_policy

logger = logging.getLogger(__name__)

EXIT_ALLOWED = 0
EXIT_DENIED = 1
EXIT_ERROR = 2

app = typer.Typer(
    name="hyperacc",
    help="Dry-run declarative access-control policies against caller identities.",
    add_completion=False,
    no_args_is_help=True,
)

console = Console()


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"[bold]hyperacc[/bold] version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        Optional[bool],
        typer.Option(
            "--version",
            "-v",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
) -> None:
    """
    hyperacc - Composable access-control rules for transaction code.
    """
    pass


PolicyArgument = Annotated[
    Path,
    typer.Argument(
        help="Path to the policy YAML file.",
        exists=True,
        readable=True,
        resolve_path=True,
    ),
]


@app.command()
def check(
    policy_path: PolicyArgument,
    identity_path: Annotated[
        Path,
        typer.Option(
            "--identity",
            "-i",
            help="Path to the identity YAML file.",
            exists=True,
            readable=True,
            resolve_path=True,
        ),
    ],
    json_output: Annotated[
        bool,
        typer.Option(
            "--json",
            help="Output the decision in JSON format.",
        ),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            help="Log each rule as it is checked.",
        ),
    ] = False,
    debug: Annotated[
        bool,
        typer.Option(
            "--debug",
            help="Include full error tracebacks.",
        ),
    ] = False,
) -> None:
    """
    Evaluate a policy against an identity.

    Top-level rules are checked in order and the first failure decides,
    exactly as AccessController.check does in transaction code.

    Example:
        $ hyperacc check transfer.yaml --identity alice.yaml
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        controller = build_controller(load_policy(policy_path))
        ctx = build_identity(load_identity(identity_path))
    except Exception as e:
        _report_error("load_error", e, json_output, debug)
        raise typer.Exit(code=EXIT_ERROR)

    rows = _run_checks(controller.rules, ctx)
    failure = next((row["error"] for row in rows if row["error"] is not None), None)

    if failure is not None and not isinstance(failure, AccessError):
        _report_error("identity_error", failure, json_output, debug)
        raise typer.Exit(code=EXIT_ERROR)

    notifier = MemoryNotifier()
    if failure is not None:
        log_access_denied(ctx, failure, notifier)

    if json_output:
        _output_json_decision(rows, failure, notifier)
    else:
        _display_decision(rows, failure, notifier)

    raise typer.Exit(code=EXIT_ALLOWED if failure is None else EXIT_DENIED)


@app.command()
def show(policy_path: PolicyArgument) -> None:
    """Print the rule tree of a policy."""
    try:
        document = load_policy(policy_path)
        controller = build_controller(document)
    except Exception as e:
        _report_error("load_error", e, False, False)
        raise typer.Exit(code=EXIT_ERROR)

    tree = Tree(f"[bold]{escape(document.name or policy_path.name)}[/bold] [dim](all must pass)[/dim]")
    for rule in controller.rules:
        _add_to_tree(tree, rule)
    console.print(tree)


@app.command()
def validate(policy_path: PolicyArgument) -> None:
    """Validate a policy file, including custom rule references."""
    try:
        controller = build_controller(load_policy(policy_path))
    except Exception as e:
        _report_error("validation_error", e, False, False)
        raise typer.Exit(code=EXIT_ERROR)

    count = sum(1 for rule in controller.rules for _ in rule.walk())
    console.print(f"[green]✓[/green] {escape(policy_path.name)}: {len(controller)} top-level rule(s), {count} in total")


# =============================================================================
# Helpers
# =============================================================================


def _run_checks(rules: tuple[Rule, ...], ctx: IdentityContext) -> list[dict[str, Any]]:
    """Check rules in order; rules after the first failure are skipped."""
    rows: list[dict[str, Any]] = []
    failed = False
    for position, rule in enumerate(rules, start=1):
        if failed:
            rows.append({"rule": rule.name, "status": "skipped", "error": None})
            continue
        logger.debug("Checking rule %d/%d: %s", position, len(rules), rule.name)
        try:
            rule.check(ctx)
        except Exception as e:
            failed = True
            status = "denied" if isinstance(e, AccessError) else "error"
            rows.append({"rule": rule.name, "status": status, "error": e})
        else:
            rows.append({"rule": rule.name, "status": "passed", "error": None})
    return rows


def _add_to_tree(parent: Tree, rule: Rule) -> None:
    style = "cyan" if rule.children else "white"
    branch = parent.add(f"[{style}]{escape(rule.name)}[/{style}]")
    for child in rule.children:
        _add_to_tree(branch, child)


def _display_decision(
    rows: list[dict[str, Any]],
    failure: BaseException | None,
    notifier: MemoryNotifier,
) -> None:
    """Display the decision in a formatted way."""
    if failure is None:
        console.print("[green]✓[/green] Access [green]allowed[/green]")
    else:
        console.print("[red]✗[/red] Access [red]denied[/red]")
    console.print()

    table = Table(show_header=True, header_style="bold")
    table.add_column("#", style="dim", width=3)
    table.add_column("Rule", style="cyan")
    table.add_column("Status", width=10)
    table.add_column("Details")

    styles = {"passed": "green", "denied": "yellow", "error": "red", "skipped": "dim"}
    for index, row in enumerate(rows, start=1):
        style = styles[row["status"]]
        details = escape(error_text(row["error"])) if row["error"] is not None else ""
        table.add_row(str(index), escape(row["rule"]), f"[{style}]{row['status']}[/{style}]", details)

    console.print(table)

    for event in notifier.events:
        console.print(f"[dim]{event.name}: {escape(event.payload.decode('utf-8'))}[/dim]")


def _output_json_decision(
    rows: list[dict[str, Any]],
    failure: BaseException | None,
    notifier: MemoryNotifier,
) -> None:
    """Output the decision in JSON format."""
    output = {
        "allowed": failure is None,
        "reason": error_text(failure) if failure is not None else "all rules passed",
        "rules": [
            {
                "rule": row["rule"],
                "status": row["status"],
                "reason": error_text(row["error"]) if row["error"] is not None else None,
            }
            for row in rows
        ],
        "events": [
            {"name": event.name, "payload": event.payload.decode("utf-8")}
            for event in notifier.events
        ],
    }
    print(json.dumps(output, indent=2))


def _report_error(
    error_type: str,
    error: BaseException,
    json_output: bool,
    include_traceback: bool,
) -> None:
    """Report a load or identity failure, in JSON or for the console."""
    if json_output:
        output: dict[str, Any] = {
            "error": True,
            "error_type": error_type,
            "message": error_text(error),
        }
        if isinstance(error, HyperaccError):
            output["details"] = error.to_dict()
        if include_traceback:
            output["traceback"] = "".join(traceback.format_exception(error))
        print(json.dumps(output, indent=2, default=str))
    else:
        console.print(f"[red]Error: {escape(error_text(error))}[/red]")
        if include_traceback:
            console.print(f"[dim]{escape(''.join(traceback.format_exception(error)))}[/dim]")


if __name__ == "__main__":
    app()
