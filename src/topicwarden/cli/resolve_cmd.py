"""CLI command for resolving a write to the topics it invalidates.

Usage:
    topicwarden resolve USERS
    topicwarden resolve CONTRACTS --payload '{"status": "active"}'
    topicwarden resolve JOURNAL_ENTRIES -p '{"status": "posted"}' --format json
"""

from __future__ import annotations

from typing import Any, Optional

import typer


def _parse_payload(raw: str | None) -> Any:
    import orjson

    if raw is None:
        return None
    try:
        return orjson.loads(raw)
    except orjson.JSONDecodeError as e:
        raise typer.BadParameter(f"Payload is not valid JSON: {e}") from e


def resolve(
    trigger: str = typer.Argument(..., help="Topic name that was written"),
    payload: Optional[str] = typer.Option(
        None,
        "--payload",
        "-p",
        help="JSON payload of the write, for conditional rules",
    ),
    output_format: str = typer.Option(
        "text",
        "--format",
        "-f",
        help="Output format: text, json",
    ),
) -> None:
    """Print the topics a write to TRIGGER invalidates, trigger first."""
    import orjson
    from rich.console import Console

    from topicwarden.cache.default_rules import DEFAULT_RULES
    from topicwarden.cache.resolver import RuleResolver
    from topicwarden.cache.topics import build_default_registry

    data = _parse_payload(payload)
    topics = RuleResolver(DEFAULT_RULES).get_affected_topics(trigger, data)

    if output_format == "json":
        typer.echo(orjson.dumps(topics).decode())
        return

    if trigger not in build_default_registry():
        Console(stderr=True).print(f"[yellow]{trigger} is not a registered topic[/yellow]")
    for name in topics:
        typer.echo(name)
