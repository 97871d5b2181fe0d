"""CLI command for validating the invalidation rule table.

Usage:
    topicwarden validate
    topicwarden validate --format json
"""

from __future__ import annotations

import typer


def validate(
    output_format: str = typer.Option(
        "text",
        "--format",
        "-f",
        help="Output format: text, json",
    ),
) -> None:
    """Validate the default rule table against the default topic registry.

    Exits with code 1 when any rule names an unregistered topic.
    """
    import orjson
    from rich.console import Console
    from rich.markup import escape

    from topicwarden.cache.default_rules import DEFAULT_RULES
    from topicwarden.cache.topics import build_default_registry

    console = Console()
    registry = build_default_registry()
    problems = DEFAULT_RULES.problems(registry)

    if output_format == "json":
        report = {
            "valid": not problems,
            "rules": len(DEFAULT_RULES),
            "topics": len(registry),
            "problems": problems,
        }
        typer.echo(orjson.dumps(report, option=orjson.OPT_INDENT_2).decode())
    elif problems:
        console.print(f"[red]✗[/red] {len(problems)} problem(s) in the rule table:")
        for problem in problems:
            console.print(f"    [red]└[/red] {escape(problem)}", highlight=False)
    else:
        console.print(
            f"[green]✓[/green] {len(DEFAULT_RULES)} rules reference only registered topics "
            f"({len(registry)} topics)"
        )

    if problems:
        raise typer.Exit(code=1)
