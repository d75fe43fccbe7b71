"""
Safe Haven Backend: Counselor Assignment Strategy Tests
"""

from datetime import date
from types import SimpleNamespace
from uuid import uuid4

import pytest

from safehaven.enums import ServiceType
from safehaven.exceptions import NoCounselorAvailableError
from safehaven.services.assignment import (
    BookingContext,
    FirstActiveCounselorStrategy,
    SpecializationMatchStrategy,
    get_assignment_strategy,
)


def _person(role="counselor", active=True, specializations=None):
    return SimpleNamespace(
        id=uuid4(), role=role, is_active=active, specializations=specializations or []
    )


def _context(service_type=ServiceType.INDIVIDUAL_COUNSELING):
    return BookingContext(
        service_type=service_type,
        appointment_date=date(2025, 3, 10),
        start_time="09:00",
        duration=60,
    )


class TestFirstActiveCounselorStrategy:

    def setup_method(self):
        self.strategy = FirstActiveCounselorStrategy()

    def test_picks_first_active_counselor(self):
        inactive, first, second = _person(active=False), _person(), _person()
        assert self.strategy.select_counselor([inactive, first, second], _context()) is first

    def test_ignores_non_counselors(self):
        admin, counselor = _person(role="admin"), _person()
        assert self.strategy.select_counselor([admin, counselor], _context()) is counselor

    def test_empty_pool_raises(self):
        with pytest.raises(NoCounselorAvailableError):
            self.strategy.select_counselor([], _context())

    def test_pool_without_eligible_counselor_raises(self):
        with pytest.raises(NoCounselorAvailableError):
            self.strategy.select_counselor([_person(active=False), _person(role="client")], _context())


class TestSpecializationMatchStrategy:

    def setup_method(self):
        self.strategy = SpecializationMatchStrategy()

    def test_prefers_matching_specialization(self):
        generalist = _person(specializations=["Anxiety"])
        grief = _person(specializations=["Grief Counseling"])
        chosen = self.strategy.select_counselor(
            [generalist, grief], _context(ServiceType.GRIEF_COUNSELING)
        )
        assert chosen is grief

    def test_falls_back_to_first_active(self):
        first, second = _person(specializations=["Anxiety"]), _person(specializations=[""])
        chosen = self.strategy.select_counselor(
            [first, second], _context(ServiceType.YOUTH_COUNSELING)
        )
        assert chosen is first

    def test_empty_pool_raises(self):
        with pytest.raises(NoCounselorAvailableError):
            self.strategy.select_counselor([], _context())


class TestStrategyFactory:

    @pytest.mark.parametrize(
        "name,cls",
        [("first-active", FirstActiveCounselorStrategy), ("specialization", SpecializationMatchStrategy)],
    )
    def test_known_names(self, name, cls):
        assert isinstance(get_assignment_strategy(name), cls)

    def test_unknown_name(self):
        with pytest.raises(ValueError):
            get_assignment_strategy("round-robin")
