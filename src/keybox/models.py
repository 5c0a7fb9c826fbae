from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import BinaryIO, Optional

from pydantic import BaseModel


class RejectReason(str, Enum):
    BAD_MIME_TYPE = "bad-mime-type"
    MALFORMED_STREAM = "malformed-stream"
    BAD_FORMAT_ATTRIBUTE = "bad-format-attribute"
    MISSING_OR_WRONG_COUNT = "missing-or-wrong-count"
    MISSING_ALGORITHM_MATERIAL = "missing-algorithm-material"
    # Settings store failed while committing an accepted bundle
    STORE_UNAVAILABLE = "store-unavailable"


class Verdict(BaseModel):
    accepted: bool
    reason: Optional[RejectReason] = None
    # User-facing message, filled in by the engine once the outcome is reported
    message: Optional[str] = None

    @classmethod
    def accept(cls) -> "Verdict":
        return cls(accepted=True)

    @classmethod
    def reject(cls, reason: RejectReason) -> "Verdict":
        return cls(accepted=False, reason=reason)


@dataclass
class RawSource:
    """One import attempt's input, as handed over by the file picker.

    `stream` is read once, forward only, and closed by the engine.
    `mime_type` and `name` are untrusted hints.
    """

    stream: BinaryIO
    mime_type: Optional[str] = None
    name: Optional[str] = None


class ImportResponse(BaseModel):
    accepted: bool
    reason: Optional[RejectReason] = None
    message: str


class StatusResponse(BaseModel):
    present: bool
    summary: str
    message: Optional[str] = None
