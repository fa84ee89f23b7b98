from __future__ import annotations

from datetime import datetime, timezone

DISPLAY_FORMAT = "%d.%m.%Y %H:%M:%S"


class Clock:
    def now_iso(self) -> str:
        return datetime.now(timezone.utc).astimezone().isoformat(timespec="seconds")

    def timestamp(self, time_format: str = "%Y%m%d_%H%M%S") -> str:
        return datetime.now().strftime(time_format)

    def display(self, moment: datetime) -> str:
        return moment.strftime(DISPLAY_FORMAT)
