"""
Unit tests for the BillableRate entity.
"""

import pytest
from datetime import datetime, timedelta, timezone

from app.domain.models.base import ValidationError
from app.domain.models.billable_rate import BillableRate


FROM = datetime(2024, 1, 1, tzinfo=timezone.utc)


def rate(**kwargs):
    values = dict(hourly_rate=100.0, currency="USD", effective_from=FROM, user_id="user-1")
    values.update(kwargs)
    return BillableRate(**values)


class TestBillableRate:

    def test_scope_match_requires_equal_non_null_fields(self):
        scoped = rate(project_id="project-1")

        assert scoped.matches("user-1", "project-1")
        assert scoped.matches("user-1", "project-1", "design")
        assert not scoped.matches("user-1", "project-2")
        assert not scoped.matches("user-2", "project-1")

    def test_unscoped_rate_never_matches(self):
        unscoped = rate(user_id=None)
        assert unscoped.is_unscoped
        assert not unscoped.matches("user-1", "project-1", "design")

    def test_validity_window_is_half_open(self):
        windowed = rate(effective_to=FROM + timedelta(days=10))

        assert windowed.is_effective_at(FROM)
        assert windowed.is_effective_at(FROM + timedelta(days=9, hours=23))
        assert not windowed.is_effective_at(FROM + timedelta(days=10))
        assert not windowed.is_effective_at(FROM - timedelta(seconds=1))

    def test_naive_moment_is_treated_as_utc(self):
        assert rate().is_effective_at(datetime(2024, 6, 1))

    def test_open_ended_rate(self):
        assert rate().is_effective_at(FROM + timedelta(days=3650))

    def test_validate(self):
        rate().validate()
        rate(hourly_rate=0).validate()

    @pytest.mark.parametrize("kwargs,field", [
        (dict(hourly_rate=-1), "hourly_rate"),
        (dict(currency="US"), "currency"),
        (dict(currency="U5D"), "currency"),
        (dict(effective_to=FROM), "effective_to"),
        (dict(user_id=None), "user_id"),
    ])
    def test_invalid_rates(self, kwargs, field):
        with pytest.raises(ValidationError) as exc_info:
            rate(**kwargs).validate()
        assert exc_info.value.field == field
