import logging
from datetime import datetime
from typing import Any, Dict


KB = 1024
MB = KB * 1024
GB = MB * 1024
TB = GB * 1024

RED = "\033[31m"
YELLOW = "\033[33m"
RESET = "\033[0m"


def get_logger(name: str) -> logging.Logger:
    # Only the top-level "caphistory" logger owns a handler; children propagate to it.
    logger = logging.getLogger(name)
    parent = logging.getLogger(name.split('.')[0])
    if not parent.handlers:
        handler = logging.StreamHandler()
        formatter = logging.Formatter('%(levelname)s %(message)s')
        handler.setFormatter(formatter)
        parent.addHandler(handler)
        parent.setLevel(logging.INFO)
    return logger


def redacted_headers(headers: Dict[str, Any]) -> Dict[str, Any]:
    redacted = {}
    for k, v in headers.items():
        if k.lower() in ('authorization', 'cookie'):
            redacted[k] = '[REDACTED]'
        else:
            redacted[k] = v
    return redacted


def append_log_line(path: str, line: str) -> None:
    timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
    safe_line = line.rstrip("\n")
    with open(path, "a", encoding="utf-8") as handle:
        handle.write(f"[{timestamp}] {safe_line}\n")


def truncate_text(text: str, limit: int = 2000) -> str:
    if text is None:
        return ""
    if len(text) <= limit:
        return text
    return f"{text[:limit]}...[truncated {len(text) - limit} chars]"


def format_bytes(num: float) -> str:
    if num >= TB:
        return f"{num / TB:.2f} TB"
    if num >= GB:
        return f"{num / GB:.2f} GB"
    if num >= MB:
        return f"{num / MB:.2f} MB"
    if num >= KB:
        return f"{num / KB:.2f} KB"
    return f"{num:.0f} B"


def format_signed_bytes(num: int) -> str:
    sign = "-" if num < 0 else "+"
    return f"{sign}{format_bytes(abs(num))}"


def format_percent(value: float) -> str:
    return f"{value:.2f}%"


def colorize(text: str, color: str, enabled: bool = True) -> str:
    if not enabled:
        return text
    return f"{color}{text}{RESET}"
