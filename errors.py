"""Exceptions raised while loading and summarizing age data."""

from __future__ import annotations
from typing import Any, Optional


class AgeStatsError(Exception):
    """Base class for errors surfaced by the age statistics pipeline."""

    def __init__(self, message: str, details: Optional[Any] = None):
        self.message = message
        self.details = details
        super().__init__(self.message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} Details: {self.details}"
        return self.message


class NoValidDataError(AgeStatsError):
    """Raised when a sheet yields no usable age values."""
    pass


class DecodeError(AgeStatsError):
    """Raised when uploaded bytes cannot be read as a spreadsheet."""
    pass


class UploadInProgressError(AgeStatsError):
    """Raised when an upload is started while another one is being processed."""
    pass
