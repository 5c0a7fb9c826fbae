"""Prometheus instrumentation for keybox imports.

Reject reasons are a closed set, so labelling by reason keeps cardinality fixed.
"""
from __future__ import annotations
from prometheus_client import (
    CollectorRegistry,
    Counter,
    Gauge,
    Histogram,
    generate_latest,
    CONTENT_TYPE_LATEST,
)

REGISTRY = CollectorRegistry()

IMPORTS = Counter(
    "keybox_imports_total",
    "Keybox import attempts by outcome.",
    ["result", "reason"],
    registry=REGISTRY,
)
CLEARS = Counter(
    "keybox_clears_total",
    "Explicit keybox clear requests.",
    registry=REGISTRY,
)
BUNDLE_PRESENT = Gauge(
    "keybox_bundle_present",
    "1 when a keybox is currently stored, else 0.",
    registry=REGISTRY,
)
IMPORT_BYTES = Histogram(
    "keybox_import_bytes",
    "Size of parsed keybox sources (bytes).",
    buckets=(512, 1024, 2048, 4096, 8192, 16384, 65536, 262144, 1048576),
    registry=REGISTRY,
)


def observe_import(*, accepted: bool, reason: str | None, size_bytes: int | None = None):
    IMPORTS.labels(result="accept" if accepted else "reject", reason=reason or "none").inc()
    if size_bytes is not None:
        IMPORT_BYTES.observe(size_bytes)


def observe_clear():
    CLEARS.inc()


def set_bundle_present(present: bool):
    BUNDLE_PRESENT.set(1 if present else 0)


def prometheus_latest() -> tuple[bytes, str]:
    return generate_latest(REGISTRY), CONTENT_TYPE_LATEST
