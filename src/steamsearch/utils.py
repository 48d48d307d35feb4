import time
from collections.abc import Mapping
from typing import Any

import psutil

__all__ = ["dig", "as_int", "as_flag", "as_text", "format_size", "relative_time", "is_steam_running"]

STEAM_PROCESS_NAMES = frozenset({"steam.exe", "steam", "steam_osx"})


def dig(mapping: Any, *keys: Any) -> Any:
    """Walk nested mappings, None as soon as a level is missing or not a mapping"""
    for key in keys:
        if not isinstance(mapping, Mapping):
            return None
        mapping = mapping.get(key)
    return mapping


def as_int(value: Any) -> int | None:
    # appinfo values arrive as strings
    if isinstance(value, bool) or value is None:
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def as_flag(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip() not in ("", "0")
    return bool(value)


def as_text(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def format_size(size: int) -> str:
    if size <= 0:
        return "0 Bytes"
    scaled = float(size)
    for unit in ("Bytes", "KB", "MB", "GB"):
        if scaled < 1024:
            return f"{round(scaled, 2):g} {unit}"
        scaled /= 1024
    return f"{round(scaled, 2):g} TB"


def relative_time(timestamp: int, now: float | None = None) -> str:
    diff = max(int((time.time() if now is None else now) - timestamp), 0)
    days, remainder = divmod(diff, 24 * 60 * 60)
    hours, remainder = divmod(remainder, 60 * 60)
    minutes = remainder // 60

    def plural(count: int, unit: str):
        return f"{count} {unit}{'s' if count > 1 else ''} ago"

    if days > 30:
        return plural(days // 30, "month")
    if days > 0:
        return plural(days, "day")
    if hours > 0:
        return plural(hours, "hour")
    if minutes > 0:
        return plural(minutes, "minute")
    return "just now"


def is_steam_running() -> bool:
    for process in psutil.process_iter(["name"]):
        name = process.info.get("name") or ""
        if name.lower() in STEAM_PROCESS_NAMES:
            return True
    return False
