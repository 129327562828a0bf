from typing import Optional


class ConfigurationError(Exception):
    """Invalid command line or credential setup, detected before any request."""


class TransportError(RuntimeError):
    """The capacity history request failed or returned an unusable body."""

    def __init__(self, message: str, status_code: Optional[int] = None, body: Optional[str] = None):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class ZeroCapacityError(ZeroDivisionError):
    def __init__(self, period_start_time: int):
        super().__init__(f"Sample at {period_start_time} reports total_usable=0")
        self.period_start_time = period_start_time
