# === NAVMAP v1 ===
# {
#   "module": "OpsKit.cli",
#   "purpose": "Command line entry point: show parsed documents and preview cyclic schedules.",
#   "sections": [
#     {"id": "main", "name": "main", "anchor": "function-main", "kind": "function"},
#     {"id": "show", "name": "show", "anchor": "function-show", "kind": "function"},
#     {"id": "schedule", "name": "schedule", "anchor": "function-schedule", "kind": "function"}
#   ]
# }
# === /NAVMAP ===

"""Command line entry point for OpsKit.

Provides two commands:
- `opskit show`: Parse a JSON/YAML document and print the generic tree as JSON
- `opskit schedule`: Print the first N elements of a cyclic schedule

Example:
    $ opskit show config.yaml
    $ opskit schedule alpha beta gamma --count 7
"""

import json
from pathlib import Path
from typing import Any, List, Optional

import typer

from OpsKit.Config.errors import FormatError
from OpsKit.Config.formats import format_for_path, load_document, normalize_config_path
from OpsKit.concurrency import CancellationToken, ChannelClosed, infinite_range
from OpsKit.logging_utils import setup_logging
from OpsKit.settings import get_settings

app = typer.Typer(
    name="opskit",
    help="Configuration and scheduling helpers",
    no_args_is_help=True,
)


def _stringify_keys(tree: Any) -> Any:
    """Return ``tree`` with every mapping key converted to ``str``.

    YAML allows integer, date and null keys next to strings; JSON output and
    key sorting both need a single key type.
    """
    if isinstance(tree, dict):
        return {str(key): _stringify_keys(value) for key, value in tree.items()}
    if isinstance(tree, list):
        return [_stringify_keys(item) for item in tree]
    return tree


@app.callback()
def main(
    log_level: Optional[str] = typer.Option(
        None,
        "--log-level",
        help="Logging level (defaults to OPSKIT_LOG_LEVEL or INFO)",
    ),
) -> None:
    """Configure logging before running a command."""
    setup_logging(level=log_level)


@app.command()
def show(
    file: Path = typer.Argument(
        ...,
        help="Configuration document to parse (YAML or JSON)",
    ),
    format_name: Optional[str] = typer.Option(
        None,
        "--format",
        "-f",
        help="Document format: json, yaml, or empty; inferred from the suffix when omitted",
    ),
) -> None:
    """Parse a configuration document and print it as JSON.

    Example:
        $ opskit show config.yaml
        $ opskit show settings.conf --format yaml
    """
    config_path = normalize_config_path(file)
    if not config_path.exists():
        typer.echo(f"Error: File not found: {config_path}", err=True)
        raise typer.Exit(3)

    resolved_format = format_for_path(config_path) if format_name is None else format_name
    try:
        tree = load_document(config_path.read_bytes(), resolved_format)
    except FormatError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(2)

    typer.echo(json.dumps(_stringify_keys(tree), indent=2, sort_keys=True, default=str))


@app.command()
def schedule(
    items: List[str] = typer.Argument(..., help="Elements of the schedule, in order"),
    count: int = typer.Option(10, "--count", "-n", min=0, help="Number of elements to print"),
) -> None:
    """Print the first COUNT elements of the cyclic schedule over ITEMS.

    Example:
        $ opskit schedule alpha beta gamma --count 7
    """
    token = CancellationToken()
    channel = infinite_range(token, items)
    try:
        for _ in range(count):
            try:
                typer.echo(channel.get())
            except ChannelClosed:
                break
    finally:
        token.cancel()
        channel.join(get_settings().worker_join_timeout)


__all__ = ["app", "main", "schedule", "show"]
