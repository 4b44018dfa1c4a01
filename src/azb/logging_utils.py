from __future__ import annotations

from rich.console import Console

__all__ = ["console", "debug_log", "debug_logging_enabled", "set_debug_logging"]

console = Console()

_DEBUG_LOG = False


def set_debug_logging(enabled: bool) -> None:
    global _DEBUG_LOG
    _DEBUG_LOG = enabled


def debug_logging_enabled() -> bool:
    return _DEBUG_LOG


def debug_log(message: str) -> None:
    if _DEBUG_LOG:
        print(f"[azb debug] {message}")
