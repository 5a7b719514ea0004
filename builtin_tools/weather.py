"""Simulated weather tool."""
import logging
import random
from typing import Any, Dict, Optional

from .base import BaseTool

logger = logging.getLogger(__name__)

CONDITIONS = ["Sunny", "Cloudy", "Rainy", "Partly Cloudy"]


class WeatherTool(BaseTool):
    """Returns made-up current weather for a location."""

    name = "get_weather"
    description = "Get current weather for a location"
    input_schema = {
        "type": "object",
        "properties": {
            "location": {"type": "string", "description": "City name"}
        },
        "required": ["location"]
    }

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()

    def execute(self, arguments: Dict[str, Any]) -> Dict[str, Any]:
        location = arguments["location"]
        logger.debug(f"[WEATHER] Simulating weather for {location}")
        return {
            "location": location,
            "temperature": self.rng.randint(10, 39),
            "condition": self.rng.choice(CONDITIONS),
            "humidity": self.rng.randint(30, 79)
        }
