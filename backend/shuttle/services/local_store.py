"""
In-process fallback for the few non-critical settings (news text, vehicle
details) whose writes must not be lost to a brief database outage. Values
live only as long as the process.
"""

from typing import Any, Optional


class LocalSettingsStore:
    def __init__(self):
        self._values: dict[str, Any] = {}

    def get(self, key: str, default: Optional[Any] = None) -> Any:
        return self._values.get(key, default)

    def set(self, key: str, value: Any) -> None:
        self._values[key] = value

    def clear(self) -> None:
        self._values.clear()


local_settings = LocalSettingsStore()
