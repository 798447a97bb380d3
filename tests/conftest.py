"""Pytest configuration and shared fixtures."""

import pytest

from facility_router.application.ports.decision_logger import (
    DecisionEvent,
    DecisionLogger,
    DecisionRecord,
)
from facility_router.domain.value_objects.issue_dictionary import IssueDictionary

MINIMAL_DICTIONARY = {
    "precedence_order": ["vendor", "technical", "plumbing", "soft_service"],
    "defaults": {"fallback_skill_group": "technical", "confidence_on_fallback": "low"},
    "skill_groups": {
        "vendor": {
            "lift_breakdown": ["lift", "elevator stuck"],
        },
        "technical": {
            "ac_breakdown": ["ac", "not cooling"],
            "power_outage": ["power cut", "no power"],
        },
        "plumbing": {
            "water_leakage": ["leak", "water leak"],
            "drainage_blockage": ["drain"],
        },
        "soft_service": {
            "cleaning_required": ["cleaning", "dirty"],
        },
    },
}


class RecordingDecisionLogger(DecisionLogger):
    def __init__(self):
        self.items = []

    def submit(self, item):
        self.items.append(item)

    @property
    def events(self) -> list[DecisionEvent]:
        return [i for i in self.items if isinstance(i, DecisionEvent)]

    @property
    def records(self) -> list[DecisionRecord]:
        return [i for i in self.items if isinstance(i, DecisionRecord)]

    def event_names(self) -> list[str]:
        return [e.name for e in self.events]


@pytest.fixture
def raw_dictionary():
    return MINIMAL_DICTIONARY


@pytest.fixture
def dictionary():
    return IssueDictionary.from_mapping(MINIMAL_DICTIONARY)


@pytest.fixture
def decision_logger():
    return RecordingDecisionLogger()
