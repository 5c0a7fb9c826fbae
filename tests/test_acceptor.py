from dataclasses import replace

import pytest

from keybox.acceptor import evaluate
from keybox.models import RejectReason
from keybox.parser import INVALID_COUNT, ParseTally

FULL = ParseTally(
    number_of_keyboxes=1,
    has_ecdsa_key=True,
    has_rsa_key=True,
    has_ecdsa_private_key=True,
    has_rsa_private_key=True,
    ecdsa_certificate_count=1,
    rsa_certificate_count=2,
)


def test_full_tally_accepted():
    v = evaluate(FULL)
    assert v.accepted is True
    assert v.reason is None


@pytest.mark.parametrize("count", [None, 0, 2, INVALID_COUNT])
def test_count_must_be_one(count):
    v = evaluate(replace(FULL, number_of_keyboxes=count))
    assert v.reason is RejectReason.MISSING_OR_WRONG_COUNT


def test_count_reason_wins_over_missing_material():
    v = evaluate(ParseTally(number_of_keyboxes=3))
    assert v.reason is RejectReason.MISSING_OR_WRONG_COUNT


@pytest.mark.parametrize("field,value", [
    ("has_ecdsa_key", False),
    ("has_ecdsa_private_key", False),
    ("ecdsa_certificate_count", 0),
    ("has_rsa_key", False),
    ("has_rsa_private_key", False),
    ("rsa_certificate_count", 0),
])
def test_each_algorithm_term_required(field, value):
    v = evaluate(replace(FULL, **{field: value}))
    assert v.accepted is False
    assert v.reason is RejectReason.MISSING_ALGORITHM_MATERIAL
