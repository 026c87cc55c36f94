"""Tests for the transition and capability tables."""

from reelcost.domain.entities import InvoiceStatus, ProjectRole
from reelcost.domain.lifecycle import (
    ALLOWED_TRANSITIONS,
    SKIP_BALANCE_CHECK,
    TRANSITION_ROLES,
    has_capability,
)


def test_final_approved_is_terminal():
    assert ALLOWED_TRANSITIONS[InvoiceStatus.FINAL_APPROVED] == []


def test_every_status_has_transitions_entry():
    assert set(ALLOWED_TRANSITIONS) == set(InvoiceStatus)


def test_role_table_covers_only_allowed_transitions():
    for current, target in TRANSITION_ROLES:
        assert target in ALLOWED_TRANSITIONS[current]


def test_only_producer_skips_balance_check():
    assert has_capability(ProjectRole.PRODUCER, SKIP_BALANCE_CHECK)
    assert not has_capability(ProjectRole.LINE_PRODUCER, SKIP_BALANCE_CHECK)
    assert not has_capability(ProjectRole.ACCOUNTANT, SKIP_BALANCE_CHECK)
    assert has_capability("producer", SKIP_BALANCE_CHECK)
