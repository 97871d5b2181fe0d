"""CLI commands for topicwarden.

Provides command-line interface using Typer:
- topicwarden validate: Check the rule table against the topic registry
- topicwarden resolve: Show which topics a write invalidates
- topicwarden topics: List registered topics

Usage:
    topicwarden --help
    topicwarden validate
    topicwarden resolve CONTRACTS --payload '{"status": "active"}'
    topicwarden topics --profile reports
"""

import typer

from topicwarden.cli.resolve_cmd import resolve
from topicwarden.cli.topics_cmd import topics
from topicwarden.cli.validate_cmd import validate
from topicwarden.config import settings
from topicwarden.observability.logging import configure_logging

# Main CLI application
app = typer.Typer(
    name="topicwarden",
    help="topicwarden: dependency-aware cache invalidation",
    no_args_is_help=True,
)

app.command("validate")(validate)
app.command("resolve")(resolve)
app.command("topics")(topics)


@app.callback()
def callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log at DEBUG level"),
) -> None:
    """topicwarden: dependency-aware cache invalidation."""
    configure_logging(
        json_format=settings.log_json,
        level="DEBUG" if verbose else settings.log_level,
    )


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
