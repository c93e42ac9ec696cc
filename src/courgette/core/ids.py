from __future__ import annotations

import random
import re
import zlib
from dataclasses import dataclass

import ulid

SESSION_ID_RE = re.compile(r"^[0-9A-Z]{26}$")

# Non-negative so generated file names never carry a leading '-'.
INSTANCE_ID_BITS = 31


def session_id() -> str:
    return str(ulid.new())


def is_session_id(value: str) -> bool:
    return bool(SESSION_ID_RE.fullmatch(value))


def instance_id() -> int:
    return random.getrandbits(INSTANCE_ID_BITS)


def feature_fingerprint(uri: str) -> int:
    """Stable across processes, unlike the builtin str hash."""
    return zlib.crc32(uri.encode("utf-8"))


@dataclass(frozen=True)
class WorkerIdentity:
    session_id: str
    feature_fingerprint: int
    instance_id: int

    @property
    def feature_id(self) -> str:
        return f"{self.feature_fingerprint}_{self.instance_id}"

    @classmethod
    def for_feature(cls, session: str, uri: str) -> "WorkerIdentity":
        return cls(session_id=session, feature_fingerprint=feature_fingerprint(uri), instance_id=instance_id())
