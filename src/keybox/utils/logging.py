import logging
import os
import sys

_ROOT = "keybox"


def get_logger(component: str | None = None) -> logging.Logger:
    """Return the shared "keybox" logger, or a child of it for one component.

    The stdout handler lives on the root "keybox" logger only; children
    propagate to it. Level comes from KEYBOX_LOG_LEVEL (default INFO).
    """
    root = logging.getLogger(_ROOT)
    if not root.handlers:
        h = logging.StreamHandler(sys.stdout)
        h.setFormatter(logging.Formatter("[%(asctime)s] %(levelname)s %(name)s %(message)s"))
        root.addHandler(h)
        root.setLevel(os.getenv("KEYBOX_LOG_LEVEL", "INFO").upper())
    if component:
        return root.getChild(component)
    return root
