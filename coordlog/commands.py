"""Command Interface - Maps chat-style commands onto the query engine.

Each command returns a short human-readable CommandReply. Clearing the
store is a two-phase protocol: the first call without confirmation only
returns a prompt, and the engine's unconditional clear runs when the
caller explicitly confirms.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable

from coordlog.core.config import Config
from coordlog.core.coordinate import coordinate_to_dict
from coordlog.core.errors import InvalidParameterError, StoreError
from coordlog.core.formatter import (
    format_clear_confirmation_prompt,
    format_clear_reply,
    format_delete_reply,
    format_export_reply,
    format_recent_reply,
    format_search_reply,
    format_stats_reply,
)
from coordlog.query_engine import QueryEngine
from coordlog.shell.coordinate_store import utc_now


logger = logging.getLogger(__name__)


ERROR_REPLY = "❌ An error occurred!"


@dataclass
class CommandReply:
    """Reply to a command invocation.

    Attributes:
        text: Human-readable status
        ephemeral: Whether only the invoking user should see it
        data: Structured result for API callers
        success: False for rejected parameters and failures
    """
    text: str
    ephemeral: bool = True
    data: dict[str, Any] = field(default_factory=dict)
    success: bool = True


def _int_param(
    params: dict[str, Any],
    name: str,
    required: bool = False,
    minimum: int | None = None,
    maximum: int | None = None,
) -> int | None:
    """Read an integer command parameter, enforcing its range.

    Raises:
        InvalidParameterError: If missing, not an integer, or out of range
    """
    value = params.get(name)
    if value is None:
        if required:
            raise InvalidParameterError(f"Missing required parameter '{name}'")
        return None

    if isinstance(value, bool):
        raise InvalidParameterError(f"Parameter '{name}' must be an integer")
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise InvalidParameterError(f"Parameter '{name}' must be an integer")
    if isinstance(value, float) and value != number:
        raise InvalidParameterError(f"Parameter '{name}' must be an integer")

    if minimum is not None and number < minimum:
        raise InvalidParameterError(f"Parameter '{name}' must be at least {minimum}")
    if maximum is not None and number > maximum:
        raise InvalidParameterError(f"Parameter '{name}' must be at most {maximum}")
    return number


class CommandHandler:
    """Runs list-recent, search, stats, delete, clear-all and export."""

    def __init__(
        self,
        engine: QueryEngine,
        config: Config | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        """Initialize the handler.

        Args:
            engine: Query engine to run commands against
            config: Display limits (defaults if not provided)
            clock: Returns the current time for relative timestamps
        """
        self.engine = engine
        self.config = config or engine.config
        self._clock = clock
        self._commands: dict[str, Callable[[dict[str, Any]], CommandReply]] = {
            "list-recent": self._dispatch_list_recent,
            "search": self._dispatch_search,
            "stats": lambda params: self.stats(),
            "delete": self._dispatch_delete,
            "clear-all": self._dispatch_clear_all,
            "export": lambda params: self.export(),
        }

    @property
    def command_names(self) -> list[str]:
        """Names accepted by dispatch()."""
        return list(self._commands)

    def dispatch(self, name: str, params: dict[str, Any] | None = None) -> CommandReply:
        """Run a command by name with untyped parameters.

        Args:
            name: Command name, e.g. "list-recent"
            params: Raw parameter values

        Returns:
            CommandReply (success=False for invalid parameters)

        Raises:
            InvalidParameterError: If the command is unknown
        """
        handler = self._commands.get(name)
        if handler is None:
            raise InvalidParameterError(f"Unknown command '{name}'")

        try:
            return handler(params or {})
        except InvalidParameterError as e:
            return CommandReply(text=f"❌ {e}", success=False)

    def _dispatch_list_recent(self, params: dict[str, Any]) -> CommandReply:
        count = _int_param(
            params, "count",
            minimum=self.config.recent_min_count,
            maximum=self.config.recent_max_count,
        )
        return self.list_recent(count)

    def _dispatch_search(self, params: dict[str, Any]) -> CommandReply:
        x = _int_param(params, "x", required=True)
        z = _int_param(params, "z", required=True)
        radius = _int_param(params, "radius", minimum=1)
        return self.search(x, z, radius)

    def _dispatch_delete(self, params: dict[str, Any]) -> CommandReply:
        return self.delete(_int_param(params, "id", required=True))

    def _dispatch_clear_all(self, params: dict[str, Any]) -> CommandReply:
        return self.clear_all(confirm=params.get("confirm") is True)

    def list_recent(self, count: int | None = None) -> CommandReply:
        """Recent coordinates, newest first."""
        try:
            coordinates = self.engine.list_recent(count)
        except StoreError:
            logger.exception("list-recent failed")
            return CommandReply(text=ERROR_REPLY, success=False)

        return CommandReply(
            text=format_recent_reply(coordinates, self._clock()),
            ephemeral=not coordinates,
            data={"coordinates": [coordinate_to_dict(c) for c in coordinates]},
        )

    def search(self, x: int, z: int, radius: int | None = None) -> CommandReply:
        """Coordinates near (x, z), nearest first."""
        try:
            result = self.engine.search(x, z, radius)
        except InvalidParameterError as e:
            return CommandReply(text=f"❌ {e}", success=False)
        except StoreError:
            logger.exception("search failed")
            return CommandReply(text=ERROR_REPLY, success=False)

        shown = result.nearest(self.config.search_display_limit)
        return CommandReply(
            text=format_search_reply(result, self.config.search_display_limit),
            ephemeral=not result.matches,
            data={
                "x": result.x,
                "z": result.z,
                "radius": result.radius,
                "total": result.total,
                "matches": [
                    {**coordinate_to_dict(r.coordinate), "distance": r.distance}
                    for r in shown
                ],
            },
        )

    def stats(self) -> CommandReply:
        """Total count and most recent coordinate."""
        try:
            stats = self.engine.stats()
        except StoreError:
            logger.exception("stats failed")
            return CommandReply(text=ERROR_REPLY, success=False)

        return CommandReply(
            text=format_stats_reply(stats),
            ephemeral=False,
            data={
                "total": stats.total,
                "latest": coordinate_to_dict(stats.latest) if stats.latest else None,
            },
        )

    def delete(self, coordinate_id: int) -> CommandReply:
        """Delete one coordinate by id."""
        try:
            result = self.engine.delete(coordinate_id)
        except StoreError:
            logger.exception("delete failed")
            return CommandReply(text=ERROR_REPLY, success=False)

        return CommandReply(
            text=format_delete_reply(result.coordinate_id, result.deleted),
            data={"id": result.coordinate_id, "deleted": result.deleted},
        )

    def clear_all(self, confirm: bool = False) -> CommandReply:
        """Delete every coordinate once the caller has confirmed."""
        try:
            if not confirm:
                total = self.engine.count()
                return CommandReply(
                    text=format_clear_confirmation_prompt(total),
                    data={"confirmed": False, "removed": 0, "total": total},
                )

            removed = self.engine.clear_all()
        except StoreError:
            logger.exception("clear-all failed")
            return CommandReply(text=ERROR_REPLY, success=False)

        return CommandReply(
            text=format_clear_reply(removed),
            data={"confirmed": True, "removed": removed},
        )

    def export(self) -> CommandReply:
        """Newest coordinates as "x, y, z" lines."""
        try:
            export = self.engine.export()
        except StoreError:
            logger.exception("export failed")
            return CommandReply(text=ERROR_REPLY, success=False)

        return CommandReply(
            text=format_export_reply(export),
            data={
                "text": export.text,
                "exported": export.exported,
                "total": export.total,
                "truncated": export.truncated,
                "partial": export.is_partial,
            },
        )
