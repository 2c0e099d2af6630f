"""Message formatting - Pure functions.

This module formats coordinates into the Slack notification payload
and the short human-readable replies of the command interface.
All functions are pure with no side effects.
"""

from datetime import datetime
from typing import Any

from coordlog.core.coordinate import Coordinate
from coordlog.core.geo import RankedCoordinate
from coordlog.core.query import ExportResult, SearchResult, StatsResult


def format_triple(coordinate: Coordinate) -> str:
    """Format a coordinate as "x, y, z"."""
    return f"{coordinate.x}, {coordinate.y}, {coordinate.z}"


def format_relative_time(when: datetime, now: datetime) -> str:
    """Format the age of a timestamp, e.g. "5m ago".

    Pure function.

    Args:
        when: Past timestamp
        now: Reference time

    Returns:
        Short relative description
    """
    seconds = int((now - when).total_seconds())
    if seconds < 0:
        return "just now"
    if seconds < 60:
        return f"{seconds}s ago"
    if seconds < 3600:
        return f"{seconds // 60}m ago"
    if seconds < 86400:
        return f"{seconds // 3600}h ago"
    return f"{seconds // 86400}d ago"


def format_slack_message(
    coordinate: Coordinate,
    source_name: str = "Glazed",
) -> dict[str, Any]:
    """Format a newly logged coordinate as a Slack message payload.

    Pure function.

    Args:
        coordinate: The stored coordinate
        source_name: Name of the automation that sent the ping

    Returns:
        Slack message payload dict
    """
    timestamp = int(coordinate.origin_timestamp.timestamp())
    fallback_time = coordinate.origin_timestamp.strftime("%Y-%m-%d %H:%M UTC")

    text = f"📍 New coordinate logged: {format_triple(coordinate)}"

    blocks: list[dict[str, Any]] = [
        {
            "type": "header",
            "text": {
                "type": "plain_text",
                "text": "📍 New Coordinate Logged",
            },
        },
        {
            "type": "section",
            "text": {
                "type": "mrkdwn",
                "text": f"*Coords:* `{format_triple(coordinate)}`",
            },
        },
        {
            "type": "section",
            "fields": [
                {"type": "mrkdwn", "text": f"*X*\n{coordinate.x}"},
                {"type": "mrkdwn", "text": f"*Y*\n{coordinate.y}"},
                {"type": "mrkdwn", "text": f"*Z*\n{coordinate.z}"},
            ],
        },
        {
            "type": "context",
            "elements": [
                {
                    "type": "mrkdwn",
                    "text": (
                        f"ID: #{coordinate.id} • Sent by {source_name} • "
                        f"<!date^{timestamp}^{{date_short_pretty}} {{time}}|{fallback_time}>"
                    ),
                },
            ],
        },
    ]

    return {
        "text": text,
        "blocks": blocks,
    }


def format_recent_reply(coordinates: list[Coordinate], now: datetime) -> str:
    """Format the recent-coordinates listing."""
    if not coordinates:
        return "📭 No coordinates logged yet!"

    lines = [f"📍 Recent Coordinates ({len(coordinates)})"]
    lines.extend(
        f"#{c.id} `{format_triple(c)}` - {format_relative_time(c.origin_timestamp, now)}"
        for c in coordinates
    )
    lines.append("Use search to find coords near a location")
    return "\n".join(lines)


def format_search_line(ranked: RankedCoordinate) -> str:
    """Format one search match with its rounded distance."""
    c = ranked.coordinate
    return f"#{c.id} `{format_triple(c)}` - {round(ranked.distance)} blocks away"


def format_search_reply(result: SearchResult, display_limit: int) -> str:
    """Format a radius search reply.

    Pure function. Only the nearest `display_limit` matches are listed;
    the footer always reports the full match count.

    Args:
        result: Full search result
        display_limit: Maximum matches to list

    Returns:
        Reply text
    """
    if not result.matches:
        return (
            f"📭 No coordinates found within {result.radius} blocks "
            f"of ({result.x}, {result.z})"
        )

    lines = [f"🔍 Coords near ({result.x}, {result.z})"]
    lines.extend(format_search_line(r) for r in result.nearest(display_limit))
    lines.append(f"Found {result.total} coords within {result.radius} blocks")
    return "\n".join(lines)


def format_stats_reply(stats: StatsResult) -> str:
    """Format the statistics reply."""
    last = f"`{format_triple(stats.latest)}`" if stats.latest else "None"
    return (
        "📊 Coordinate Stats\n"
        f"Total Logged: {stats.total} coordinates\n"
        f"Last Coord: {last}"
    )


def format_delete_reply(coordinate_id: int, deleted: bool) -> str:
    """Format the delete reply."""
    if deleted:
        return f"✅ Deleted coordinate #{coordinate_id}"
    return f"❌ Coordinate #{coordinate_id} not found"


def format_clear_reply(removed: int) -> str:
    """Format the clear-all reply."""
    return f"🗑️ Deleted all {removed} coordinates!"


def format_clear_confirmation_prompt(total: int) -> str:
    """Format the prompt asking to confirm a clear-all."""
    return (
        f"⚠️ This will delete all {total} coordinates. "
        "Run clear-all again with confirm=true to proceed."
    )


def format_export_reply(export: ExportResult) -> str:
    """Format the export reply.

    Pure function.

    Args:
        export: Serialized export

    Returns:
        Reply text with the export in a code block
    """
    if export.total == 0 or export.exported == 0:
        return "📭 No coordinates to export!"

    reply = f"📋 Exported {export.exported} coordinates:\n```\n{export.text}\n```"
    if export.is_partial:
        reply += f"\n(Showing last {export.exported})"
    return reply
