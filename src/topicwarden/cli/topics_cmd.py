"""CLI command for listing registered topics.

Usage:
    topicwarden topics
    topicwarden topics --profile realtime
"""

from __future__ import annotations

from typing import Optional

import typer


def topics(
    profile: Optional[str] = typer.Option(
        None,
        "--profile",
        help="Only list topics with this staleness profile",
    ),
) -> None:
    """List registered topics with their key and staleness profile."""
    from rich.console import Console
    from rich.markup import escape
    from rich.table import Table

    from topicwarden.cache.registry import PROFILES
    from topicwarden.cache.topics import build_default_registry

    if profile is not None and profile not in PROFILES:
        raise typer.BadParameter(
            f"Unknown profile {profile!r}; expected one of {', '.join(PROFILES)}",
            param_hint="--profile",
        )

    table = Table(title="Topics")
    table.add_column("Name", style="bold")
    table.add_column("Kind")
    table.add_column("Key")
    table.add_column("Profile")
    table.add_column("Stale (s)", justify="right")

    for topic in build_default_registry():
        if profile is not None and topic.profile.name != profile:
            continue
        key = ", ".join(str(p) for p in topic.prefix)
        if topic.params:
            key += ", " + ", ".join(f"<{p}>" for p in topic.params)
        table.add_row(
            topic.name,
            topic.kind.value,
            escape(f"[{key}]"),
            topic.profile.name,
            f"{topic.profile.stale_time:g}",
        )

    Console().print(table)
