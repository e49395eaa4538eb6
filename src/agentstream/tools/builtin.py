"""Built-in tools.

Registered by the CLI so a chat session can exercise tool rounds without any
caller-supplied tools:
- current_time: the current date and time, optionally in an IANA timezone
"""

from datetime import UTC, datetime
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from agentstream.tools.registry import ToolRegistry

CURRENT_TIME_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "timezone": {
            "type": "string",
            "description": "IANA timezone such as 'Europe/Paris' (default UTC)",
        },
    },
}


async def current_time(input_data: dict[str, Any]) -> dict[str, str]:
    tz_name = input_data.get("timezone")
    if not tz_name:
        now = datetime.now(UTC)
        tz_name = "UTC"
    else:
        try:
            now = datetime.now(ZoneInfo(tz_name))
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f"Unknown timezone: {tz_name}") from e
    return {
        "timezone": tz_name,
        "datetime": now.isoformat(timespec="seconds"),
        "weekday": now.strftime("%A"),
    }


def register_builtin_tools(registry: ToolRegistry) -> ToolRegistry:
    registry.register(
        "current_time",
        current_time,
        description="Get the current date and time.",
        input_schema=CURRENT_TIME_SCHEMA,
    )
    return registry
