from __future__ import annotations

from .models import RejectReason, Verdict
from .parser import ParseTally


def evaluate(tally: ParseTally) -> Verdict:
    """Judge a completed tally. Both ECDSA and RSA material are required."""
    if tally.number_of_keyboxes != 1:
        return Verdict.reject(RejectReason.MISSING_OR_WRONG_COUNT)
    ecdsa_ok = tally.has_ecdsa_key and tally.has_ecdsa_private_key and tally.ecdsa_certificate_count >= 1
    rsa_ok = tally.has_rsa_key and tally.has_rsa_private_key and tally.rsa_certificate_count >= 1
    if not (ecdsa_ok and rsa_ok):
        return Verdict.reject(RejectReason.MISSING_ALGORITHM_MATERIAL)
    return Verdict.accept()
