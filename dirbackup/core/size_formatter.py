from __future__ import annotations


class SizeFormatter:
    _units = "KMGTPE"

    @classmethod
    def format_bytes(cls, value: int) -> str:
        unit = 1024
        if value < unit:
            return f"{value} B"
        divisor, exponent = unit, 0
        quotient = value // unit
        while quotient >= unit and exponent < len(cls._units) - 1:
            divisor *= unit
            exponent += 1
            quotient //= unit
        return f"{value / divisor:.1f} {cls._units[exponent]}B"

    @staticmethod
    def format_duration(seconds: float) -> str:
        total = int(round(seconds))
        hours, remainder = divmod(total, 3600)
        minutes, secs = divmod(remainder, 60)
        if hours:
            return f"{hours}h{minutes}m{secs}s"
        if minutes:
            return f"{minutes}m{secs}s"
        return f"{secs}s"
