from __future__ import annotations


class CourgetteError(RuntimeError):
    pass


class ConfigurationError(CourgetteError):
    """Raised before any worker starts when the run cannot be configured."""

    def __init__(self, message: str, *, key: str | None = None, value: str | None = None) -> None:
        super().__init__(message)
        self.key = key
        self.value = value
