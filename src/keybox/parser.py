"""Streaming structural parser for keybox documents.

The source is read chunk by chunk, decoded as UTF-8 and pushed through a
defused expat SAX parser. SAX callbacks fold into a single `ParseTally`; no
element tree is ever built. Only the tally and the text of an open
`NumberOfKeyboxes` are held while parsing. Top-level content may be a
fragment (several sibling elements); it is parsed inside a synthetic root.

Vocabulary (everything else is skipped):
  NumberOfKeyboxes             integer text, judged later by the acceptor
  Key algorithm=ecdsa|rsa      opens an algorithm scope until </Key>
  PrivateKey format=pem        sets the per-algorithm private key flag
  Certificate format=pem       bumps the per-algorithm certificate count

A PrivateKey/Certificate whose `format` is not pem aborts the parse.
"""
from __future__ import annotations

import codecs
import re
from dataclasses import dataclass
from enum import Enum
from typing import BinaryIO, List, Optional
from xml.sax import SAXException
from xml.sax.handler import ContentHandler

from defusedxml import DefusedXmlException
from defusedxml.expatreader import create_parser

from .models import RejectReason
from .utils.logging import get_logger

log = get_logger("parser")

__all__ = [
    "Algorithm",
    "ParseTally",
    "KeyboxParseError",
    "ParsedBundle",
    "parse_keybox",
    "INVALID_COUNT",
]

# Stored when NumberOfKeyboxes is not an integer; can never equal 1
INVALID_COUNT = -1

_INT_RE = re.compile(r"[+-]?[0-9]+")

# Synthetic document element wrapped around the fed text; never persisted
FRAGMENT_ROOT = "keybox-fragment"


class Algorithm(str, Enum):
    ECDSA = "ecdsa"
    RSA = "rsa"

    @classmethod
    def from_attribute(cls, value: Optional[str]) -> Optional["Algorithm"]:
        if value is None:
            return None
        v = value.lower()
        for alg in cls:
            if alg.value == v:
                return alg
        return None


@dataclass
class ParseTally:
    number_of_keyboxes: Optional[int] = None
    current_algorithm: Optional[Algorithm] = None
    has_ecdsa_key: bool = False
    has_rsa_key: bool = False
    has_ecdsa_private_key: bool = False
    has_rsa_private_key: bool = False
    ecdsa_certificate_count: int = 0
    rsa_certificate_count: int = 0


@dataclass
class ParsedBundle:
    tally: ParseTally
    # Verbatim decoded source text, as persisted on accept
    text: str
    size_bytes: int = 0


class KeyboxParseError(Exception):
    """Terminal parse failure carrying the reject reason."""

    def __init__(self, reason: RejectReason, detail: str = ""):
        super().__init__(detail or reason.value)
        self.reason = reason
        self.detail = detail


def _parse_count(text: str) -> int:
    s = text.strip()
    if not _INT_RE.fullmatch(s):
        return INVALID_COUNT
    return int(s)


class _TallyHandler(ContentHandler):
    """Folds SAX events into one ParseTally owned by a single parse call."""

    def __init__(self, tally: ParseTally):
        super().__init__()
        self.tally = tally
        self._count_text: Optional[List[str]] = None

    def startElement(self, name, attrs):
        t = self.tally
        if name == "NumberOfKeyboxes":
            self._count_text = []
        elif name == "Key":
            alg = Algorithm.from_attribute(attrs.get("algorithm"))
            t.current_algorithm = alg
            if alg is Algorithm.ECDSA:
                t.has_ecdsa_key = True
            elif alg is Algorithm.RSA:
                t.has_rsa_key = True
        elif name == "PrivateKey":
            self._require_pem(name, attrs)
            if t.current_algorithm is Algorithm.ECDSA:
                t.has_ecdsa_private_key = True
            elif t.current_algorithm is Algorithm.RSA:
                t.has_rsa_private_key = True
        elif name == "Certificate":
            self._require_pem(name, attrs)
            if t.current_algorithm is Algorithm.ECDSA:
                t.ecdsa_certificate_count += 1
            elif t.current_algorithm is Algorithm.RSA:
                t.rsa_certificate_count += 1

    def characters(self, content):
        if self._count_text is not None:
            self._count_text.append(content)

    def endElement(self, name):
        if name == "NumberOfKeyboxes" and self._count_text is not None:
            # An element with no text keeps whatever count was seen before
            if self._count_text:
                self.tally.number_of_keyboxes = _parse_count("".join(self._count_text))
            self._count_text = None
        elif name == "Key":
            self.tally.current_algorithm = None

    @staticmethod
    def _require_pem(name: str, attrs) -> None:
        fmt = attrs.get("format")
        if fmt is None or fmt.lower() != "pem":
            log.warning("invalid or missing format=%r on %s", fmt, name)
            raise KeyboxParseError(RejectReason.BAD_FORMAT_ATTRIBUTE, f"{name} format={fmt!r}")


class _FragmentFeed:
    """Feeds decoded text to the SAX parser inside a synthetic root element.

    Keybox files are folded element by element, so several top-level elements
    are allowed. The synthetic root opens right after a leading XML
    declaration (or at the very start) and closes at `finish()`. The caller's
    verbatim copy of the text never sees it.
    """

    _OPEN = f"<{FRAGMENT_ROOT}>"
    _CLOSE = f"</{FRAGMENT_ROOT}>"
    _DECL = "<?xml"

    def __init__(self, sax):
        self.sax = sax
        self.head = ""
        self.opened = False

    def feed(self, text: str) -> None:
        if self.opened:
            self.sax.feed(text)
            return
        self.head += text
        self._try_open(final=False)

    def finish(self) -> None:
        if not self.opened:
            self._try_open(final=True)
        self.sax.feed(self._CLOSE)
        self.sax.close()

    def _try_open(self, final: bool) -> None:
        # A leading byte order mark is kept in the verbatim text but not parsed
        body = self.head.lstrip("\ufeff")
        if body.startswith(self._DECL):
            end = body.find("?>")
            if end < 0 and not final:
                return
            split = len(body) if end < 0 else end + 2
        elif self._DECL.startswith(body) and not final:
            # Too short to tell whether a declaration follows
            return
        else:
            split = 0
        if split:
            self.sax.feed(body[:split])
        self.sax.feed(self._OPEN)
        if body[split:]:
            self.sax.feed(body[split:])
        self.head = ""
        self.opened = True


def parse_keybox(stream: BinaryIO, *, max_bytes: int = 1024 * 1024, chunk_size: int = 8192) -> ParsedBundle:
    """Run one forward pass over `stream` and return the completed tally.

    Raises KeyboxParseError with MALFORMED_STREAM for undecodable bytes,
    ill-formed XML, read errors or a source larger than `max_bytes`, and with
    BAD_FORMAT_ATTRIBUTE on the first non-pem PrivateKey/Certificate. The
    stream is not closed here; the caller owns it.
    """
    tally = ParseTally()
    sax = create_parser()
    sax.setContentHandler(_TallyHandler(tally))
    events = _FragmentFeed(sax)
    decoder = codecs.getincrementaldecoder("utf-8")()
    pieces: List[str] = []
    total = 0
    try:
        while True:
            chunk = stream.read(chunk_size)
            if not chunk:
                break
            total += len(chunk)
            if total > max_bytes:
                raise KeyboxParseError(RejectReason.MALFORMED_STREAM, f"source exceeds {max_bytes} bytes")
            text = decoder.decode(chunk)
            if text:
                pieces.append(text)
                events.feed(text)
        tail = decoder.decode(b"", final=True)
        if tail:
            pieces.append(tail)
            events.feed(tail)
        if total == 0:
            raise KeyboxParseError(RejectReason.MALFORMED_STREAM, "empty source")
        events.finish()
    except KeyboxParseError:
        raise
    except (UnicodeDecodeError, SAXException, DefusedXmlException, OSError, ValueError, TypeError) as e:
        log.warning("keybox stream rejected as malformed: %s", e)
        raise KeyboxParseError(RejectReason.MALFORMED_STREAM, str(e)) from e
    return ParsedBundle(tally=tally, text="".join(pieces), size_bytes=total)
