"""Tests for relationship health predicates."""

from datetime import timedelta

import pytest

from denote_contacts.models import Contact
from denote_contacts.status import (
    NEVER_CONTACTED,
    Health,
    days_since_contact,
    frequency_days,
    health,
    is_overdue,
    is_within_threshold,
    needs_attention,
)

from conftest import NOW


def _contact(rel="close", days_ago=None, style="", custom=0):
    last = None if days_ago is None else NOW - timedelta(days=days_ago)
    return Contact(
        title="Pat",
        relationship_type=rel,
        contact_style=style,
        custom_frequency_days=custom,
        last_contacted=last,
    )


class TestFrequency:
    @pytest.mark.parametrize("rel,expected", [
        ("close", 30), ("family", 30), ("work", 60), ("network", 90),
        ("social", 0), ("providers", 0), ("recruiters", 0), ("", 0),
    ])
    def test_defaults(self, rel, expected):
        assert frequency_days(_contact(rel)) == expected

    def test_custom_overrides_type(self):
        assert frequency_days(_contact("network", custom=14)) == 14


class TestDaysSinceContact:
    def test_never_contacted(self):
        assert days_since_contact(_contact(), NOW) == NEVER_CONTACTED

    def test_truncates_partial_days(self):
        contact = _contact()
        contact.last_contacted = NOW - timedelta(hours=47)
        assert days_since_contact(contact, NOW) == 1

    def test_future_is_negative(self):
        assert days_since_contact(_contact(days_ago=-3), NOW) == -3


class TestPredicates:
    def test_close_boundaries(self):
        # frequency 30: window is (23, 30], overdue beyond 30
        assert health(_contact(days_ago=15), NOW) is Health.WITHIN_THRESHOLD
        assert health(_contact(days_ago=16), NOW) is Health.OK
        assert health(_contact(days_ago=23), NOW) is Health.OK
        assert health(_contact(days_ago=24), NOW) is Health.NEEDS_ATTENTION
        assert health(_contact(days_ago=30), NOW) is Health.NEEDS_ATTENTION
        assert health(_contact(days_ago=31), NOW) is Health.OVERDUE

    def test_never_contacted_periodic(self):
        contact = _contact("work")
        assert is_overdue(contact, NOW)
        assert needs_attention(contact, NOW)
        assert not is_within_threshold(contact, NOW)
        assert health(contact, NOW) is Health.OVERDUE

    @pytest.mark.parametrize("style", ["ambient", "triggered"])
    def test_non_periodic_styles_never_flagged(self, style):
        contact = _contact("close", days_ago=400, style=style)
        assert not is_overdue(contact, NOW)
        assert not needs_attention(contact, NOW)
        assert not is_within_threshold(contact, NOW)
        assert health(contact, NOW) is Health.OK

    def test_no_frequency_never_flagged(self):
        contact = _contact("social")
        assert health(contact, NOW) is Health.OK

    def test_future_contact_not_within_threshold(self):
        assert not is_within_threshold(_contact(days_ago=-2), NOW)

    def test_custom_frequency_used(self):
        contact = _contact("network", days_ago=20, custom=14)
        assert is_overdue(contact, NOW)
