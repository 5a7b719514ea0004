"""Clock tool."""
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from .base import BaseTool


class TimeTool(BaseTool):
    name = "get_time"
    description = "Get current time"
    input_schema = {
        "type": "object",
        "properties": {
            "timezone": {"type": "string", "description": "Timezone (e.g., UTC, America/Mexico_City)"}
        }
    }

    def __init__(self, clock: Optional[Callable[[], datetime]] = None):
        self.clock = clock or (lambda: datetime.now(timezone.utc))

    def execute(self, arguments: Dict[str, Any]) -> Dict[str, Any]:
        zone_name = arguments.get("timezone") or "UTC"
        now = self.clock()
        try:
            now = now.astimezone(ZoneInfo(zone_name))
        except (ZoneInfoNotFoundError, ValueError):
            # Unknown zone names are echoed back with UTC time
            pass
        return {
            "time": now.strftime("%H:%M:%S"),
            "date": now.strftime("%Y-%m-%d"),
            "timezone": zone_name,
            "timestamp": now.isoformat()
        }
