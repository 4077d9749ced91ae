"""Shared protocol definitions."""

from typing import Protocol


class RequestLogger(Protocol):
    """Protocol for request diagnostics (Dashboard, ConsoleLogger)."""

    def log_forward(self, method: str, target_url: str) -> None: ...
    def log_response(self, method: str, target_url: str, status: int) -> None: ...
    def log_error(self, method: str, target_url: str, message: str) -> None: ...
