"""Host information tool."""
import os
import platform
import time
from typing import Any, Dict

from .base import BaseTool

_STARTED = time.monotonic()


class SystemInfoTool(BaseTool):
    name = "system_info"
    description = "Get VPS system information"
    input_schema = {"type": "object", "properties": {}}

    def execute(self, arguments: Dict[str, Any]) -> Dict[str, Any]:
        info = {
            "platform": platform.system().lower(),
            "pythonVersion": platform.python_version(),
            "pid": os.getpid(),
            "uptime": f"{round((time.monotonic() - _STARTED) / 60)} minutes"
        }
        if hasattr(os, "getloadavg"):
            info["loadAverage"] = [round(value, 2) for value in os.getloadavg()]
        return info
