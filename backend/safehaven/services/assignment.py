"""
Safe Haven Backend: Counselor Assignment Strategies
=====================================================

What:  Chooses a counselor for a new, unassigned booking.
Why:   The production policy ("first active counselor") is a placeholder.
       Keeping it behind an abstract strategy lets the office switch to
       specialization matching, or later load balancing, without touching
       the validator or the state machine.
How:   AppointmentService collects active counselors (minus those already
       booked in the requested range) and hands them to the strategy.

An empty candidate list is a business outcome, not an error in the store:
every strategy raises NoCounselorAvailableError for it.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date
from typing import Any, Sequence

from safehaven.enums import Role, ServiceType
from safehaven.exceptions import NoCounselorAvailableError
from safehaven.services.catalog import get_service

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BookingContext:
    """What a strategy may look at when choosing."""

    service_type: ServiceType
    appointment_date: date
    start_time: str
    duration: int


class CounselorAssignmentStrategy(ABC):
    """
    Contract:
        - select_counselor() receives counselors in repository order
        - returns one of them, never a default or a new object
        - raises NoCounselorAvailableError when nothing qualifies
    """

    name: str = "abstract"

    @abstractmethod
    def select_counselor(self, candidates: Sequence[Any], request: BookingContext) -> Any:
        ...

    @staticmethod
    def _eligible(candidates: Sequence[Any]) -> list:
        return [
            c for c in candidates
            if getattr(c, "role", None) == Role.COUNSELOR.value and getattr(c, "is_active", False)
        ]


class FirstActiveCounselorStrategy(CounselorAssignmentStrategy):
    """Production default: first active counselor in the order received."""

    name = "first-active"

    def select_counselor(self, candidates: Sequence[Any], request: BookingContext) -> Any:
        eligible = self._eligible(candidates)
        if not eligible:
            raise NoCounselorAvailableError(
                context={"service_type": request.service_type.value, "strategy": self.name}
            )
        return eligible[0]


class SpecializationMatchStrategy(CounselorAssignmentStrategy):
    """
    Prefers a counselor whose specializations mention the requested service
    (by catalog name or id, case-insensitive). Falls back to the first
    active counselor when nobody matches.
    """

    name = "specialization"

    def select_counselor(self, candidates: Sequence[Any], request: BookingContext) -> Any:
        eligible = self._eligible(candidates)
        if not eligible:
            raise NoCounselorAvailableError(
                context={"service_type": request.service_type.value, "strategy": self.name}
            )

        catalog_name = get_service(request.service_type.value).name.lower()
        keywords = {catalog_name, request.service_type.value.replace("-", " ")}
        for counselor in eligible:
            tags = [
                str(tag).strip().lower()
                for tag in (getattr(counselor, "specializations", None) or [])
                if str(tag).strip()
            ]
            if any(keyword in tag or tag in keyword for tag in tags for keyword in keywords):
                return counselor

        logger.debug("No specialization match for %s; using first active counselor", catalog_name)
        return eligible[0]


_STRATEGIES = {
    FirstActiveCounselorStrategy.name: FirstActiveCounselorStrategy,
    SpecializationMatchStrategy.name: SpecializationMatchStrategy,
}


def get_assignment_strategy(name: str) -> CounselorAssignmentStrategy:
    try:
        return _STRATEGIES[name]()
    except KeyError:
        raise ValueError(f"Unknown counselor assignment strategy '{name}'")
