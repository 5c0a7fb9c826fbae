"""Keybox import engine: source gate, parser, acceptor, persistence, reporter.

Each stage can short-circuit to a reject verdict. Nothing raised by the
gate, parser, acceptor or settings store escapes `import_bundle`; every
outcome is a Verdict.
Imports are serialized on a per-engine lock, so a second import waits for
the first to finish and the last writer wins deterministically.
"""
from __future__ import annotations

import threading
from contextlib import closing
from typing import Callable, Optional

from .acceptor import evaluate
from .config import KeyboxConfig, load_config
from .models import RawSource, RejectReason, Verdict
from .obs import prom
from .parser import KeyboxParseError, ParsedBundle, parse_keybox
from .persistence import BundlePersistence, open_store
from .reporter import OutcomeReporter
from .source_gate import check_source
from .store.base import SettingsStore
from .utils.logging import get_logger

log = get_logger("engine")

ParseFn = Callable[..., ParsedBundle]


class KeyboxImporter:
    def __init__(
        self,
        store: Optional[SettingsStore] = None,
        *,
        cfg: Optional[KeyboxConfig] = None,
        reporter: Optional[OutcomeReporter] = None,
        parse: ParseFn = parse_keybox,
    ):
        self.cfg = cfg or load_config()
        self.persistence = BundlePersistence(
            store if store is not None else open_store(self.cfg),
            user=self.cfg.user,
            setting_key=self.cfg.setting_key,
        )
        self.reporter = reporter or OutcomeReporter()
        self._parse = parse
        self._lock = threading.Lock()

    def import_bundle(self, source: Optional[RawSource]) -> Verdict:
        """Run one import; the returned verdict carries the reported message."""
        with self._lock:
            verdict, size = self._run(source)
            prom.observe_import(
                accepted=verdict.accepted,
                reason=verdict.reason.value if verdict.reason else None,
                size_bytes=size,
            )
            self._refresh_present_gauge()
            message = self.reporter.report_import(verdict)
            return verdict.model_copy(update={"message": message})

    def _run(self, source: Optional[RawSource]) -> tuple[Verdict, Optional[int]]:
        rejected = check_source(source)
        if rejected is not None:
            if source is not None and source.stream is not None:
                source.stream.close()
            log.info("keybox source rejected before parsing: %s (mime=%r)", rejected.value,
                     getattr(source, "mime_type", None))
            return Verdict.reject(rejected), None
        with closing(source.stream) as stream:
            try:
                parsed = self._parse(stream, max_bytes=self.cfg.max_bytes, chunk_size=self.cfg.read_chunk)
            except KeyboxParseError as e:
                log.info("keybox parse failed: %s (%s)", e.reason.value, e.detail)
                return Verdict.reject(e.reason), None
        verdict = evaluate(parsed.tally)
        if not verdict.accepted:
            log.info("keybox tally rejected: %s %s", verdict.reason.value, parsed.tally)
            return verdict, parsed.size_bytes
        try:
            self.persistence.replace(parsed.text)
        except Exception:
            # put() is a whole-value write, so the previous bundle is still intact
            log.exception("keybox store write failed; previous bundle left in place")
            return Verdict.reject(RejectReason.STORE_UNAVAILABLE), parsed.size_bytes
        return verdict, parsed.size_bytes

    def _refresh_present_gauge(self, present: Optional[bool] = None) -> None:
        if present is None:
            try:
                present = self.persistence.has_bundle()
            except Exception:
                log.exception("keybox store read failed")
                return
        prom.set_bundle_present(present)

    def has_stored_bundle(self) -> bool:
        """False when nothing is stored or the store cannot be read."""
        try:
            return self.persistence.has_bundle()
        except Exception:
            log.exception("keybox store read failed")
            return False

    def clear_bundle(self) -> str:
        """Clear the stored bundle and return the reported message."""
        with self._lock:
            prom.observe_clear()
            try:
                self.persistence.clear()
            except Exception:
                log.exception("keybox store clear failed")
                self._refresh_present_gauge()
                return self.reporter.report_clear_failed()
            self._refresh_present_gauge(False)
            return self.reporter.report_cleared()
