from __future__ import annotations

from typing import Final

# Typed errors let callers of the CLI branch without parsing messages.
# Keep this list minimal and grow it only when a new type is actually emitted.
KNOWN_ERROR_TYPES: Final[set[str]] = {
    "CONFIG_ERROR",
}


def assert_known_error_type(error_type: str) -> None:
    if error_type not in KNOWN_ERROR_TYPES:
        raise ValueError(f"Unknown error type: {error_type!r}. Add it to courgette.core.error_types.KNOWN_ERROR_TYPES.")
