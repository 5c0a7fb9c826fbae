from __future__ import annotations

from typing import Optional

from .config import XML_MIME_TYPES, XML_SUFFIX
from .models import RawSource, RejectReason


def check_source(source: Optional[RawSource]) -> Optional[RejectReason]:
    """Return a reject reason, or None when the source may be parsed."""
    if source is None or source.stream is None:
        return RejectReason.MALFORMED_STREAM
    if source.mime_type in XML_MIME_TYPES:
        return None
    # Pickers often report a generic type for .xml files; fall back to the name
    if source.name and source.name.lower().endswith(XML_SUFFIX):
        return None
    return RejectReason.BAD_MIME_TYPE
