"""Tests for descriptors and run reports."""

import pytest

from formfiller.components.locators import ByExactId
from formfiller.components.models import (
    FieldDescriptor,
    FieldKind,
    FillErrorKind,
    MatchTier,
    SequenceReport,
    StepResult,
    StrategyUsed,
)


class TestFieldDescriptor:
    def test_selectors_stored_as_tuples(self):
        descriptor = FieldDescriptor("City", [ByExactId("address--city")], "Tucson",
                                     companion_selectors=[ByExactId("y")])

        assert descriptor.candidate_selectors == (ByExactId("address--city"),)
        assert descriptor.companion_selectors == (ByExactId("y"),)
        assert descriptor.kind is FieldKind.TEXT

    def test_needs_at_least_one_selector(self):
        with pytest.raises(ValueError, match="no candidate selectors"):
            FieldDescriptor("City", [], "Tucson")

    def test_checkbox_needs_boolean(self):
        with pytest.raises(ValueError, match="boolean"):
            FieldDescriptor("Terms", [ByExactId("input-8")], "yes", kind=FieldKind.CHECKBOX)

    def test_is_immutable(self):
        descriptor = FieldDescriptor("City", [ByExactId("c")], "Tucson")

        with pytest.raises(AttributeError):
            descriptor.value = "Phoenix"


def make_report():
    report = SequenceReport()
    report.add(StepResult("Email", True, StrategyUsed.INTERNAL_STATE, attempts=1, selector_index=0))
    report.add(StepResult("Source", True, StrategyUsed.INTERNAL_STATE, attempts=1,
                          match_tier=MatchTier.POSITIONAL, low_confidence=True))
    report.add(StepResult("Degree", False, attempts=1, error=FillErrorKind.NO_MATCHING_OPTION,
                          detail="no option matching 'Masters' among 0"))
    return report


class TestSequenceReport:
    def test_partitions(self):
        report = make_report()

        assert [r.field_name for r in report.succeeded] == ["Email", "Source"]
        assert [r.field_name for r in report.failed] == ["Degree"]
        assert [r.field_name for r in report.low_confidence] == ["Source"]
        assert not report.all_succeeded

    def test_summary(self):
        assert make_report().summary() == "2/3 fields filled; 1 low-confidence; fill manually: Degree"
        assert SequenceReport().summary() == "0/0 fields filled"

    def test_to_dict(self):
        data = make_report().to_dict()

        assert (data["total"], data["succeeded"], data["failed"]) == (3, 2, 1)
        assert data["steps"][0] == {
            "field": "Email",
            "succeeded": True,
            "strategy": "internal_state",
            "attempts": 1,
            "error": None,
            "selector_index": 0,
            "match_tier": None,
            "low_confidence": False,
            "detail": "",
        }
        assert data["steps"][1]["match_tier"] == "positional"
        assert data["steps"][2]["error"] == "no_matching_option"
        assert data["steps"][2]["strategy"] is None

    def test_first_selector_is_not_a_fallback(self):
        assert not StepResult("x", True, selector_index=0).via_fallback_selector
        assert not StepResult("x", False).via_fallback_selector
        assert StepResult("x", True, selector_index=2).via_fallback_selector
