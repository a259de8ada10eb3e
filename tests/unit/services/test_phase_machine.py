"""Unit tests for the phase unlock and completion rules."""

import pytest

from b4_platform.core.constants import Episode, JourneyType
from b4_platform.core.exceptions import ValidationError
from b4_platform.services.phase_machine import (
    EPISODE_MACHINES,
    JOURNEY_MACHINES,
    NEXT_EPISODE,
    PhaseDefinition,
    PhaseMachine,
    episode_machine,
    journey_machine,
)

SKILL_PTC_PHASE_0 = {
    "identify_skills": "Facilitation",
    "skill_examples": "Ran three design sprints",
    "skill_passion": "Workshops",
}


class TestCatalogs:

    def test_journey_phase_names(self):
        assert [p.name for p in JOURNEY_MACHINES[JourneyType.SKILL_PTC].phases] == [
            "Skills Assessment", "Practice", "Train", "Consult",
        ]
        assert [p.name for p in JOURNEY_MACHINES[JourneyType.IDEA_PTC].phases] == [
            "Ideation", "Structuring", "Team Building", "Launch",
        ]
        assert [p.name for p in JOURNEY_MACHINES[JourneyType.SCALING_PATH].phases] == [
            "Personal Entity", "Company Formation", "Process Implementation",
            "Optimization", "Scalability",
        ]

    def test_episode_phase_names(self):
        assert [p.name for p in EPISODE_MACHINES[Episode.VALIDATION].phases] == [
            "Validation", "Execution & Operations", "Iteration & Improvement",
        ]
        assert [p.name for p in EPISODE_MACHINES[Episode.GROWTH].phases] == [
            "Customer Acquisition", "Partnerships", "Revenue Growth", "Team Scaling",
        ]

    def test_episode_order(self):
        assert NEXT_EPISODE[Episode.DEVELOPMENT] == Episode.VALIDATION
        assert NEXT_EPISODE[Episode.VALIDATION] == Episode.GROWTH
        assert NEXT_EPISODE[Episode.GROWTH] is None

    def test_unknown_lookups_raise(self):
        with pytest.raises(ValidationError):
            journey_machine("cooking_path")
        with pytest.raises(ValidationError):
            episode_machine("maturity")


class TestPhaseMachine:

    @pytest.fixture
    def machine(self) -> PhaseMachine:
        return journey_machine("skill_ptc")

    def test_first_phase_always_accessible(self, machine):
        assert machine.can_access(0, set())

    def test_linear_unlock(self, machine):
        assert not machine.can_access(1, set())
        assert machine.can_access(1, {0})
        # No skipping: phase 2 needs phase 1, not just phase 0
        assert not machine.can_access(2, {0})
        assert machine.can_access(2, {0, 1})

    def test_out_of_range_phase_not_accessible(self, machine):
        assert not machine.can_access(4, {0, 1, 2, 3})
        assert not machine.can_access(-1, set())

    def test_text_tasks_need_non_blank_answers(self, machine):
        responses = dict(SKILL_PTC_PHASE_0, skill_passion="   ")
        assert machine.missing_tasks(0, responses, []) == ["skill_passion"]
        assert machine.is_phase_complete(0, SKILL_PTC_PHASE_0, [])

    def test_checklist_tasks_need_ticks(self, machine):
        responses = {"self_assessment": "Solid"}
        assert machine.missing_tasks(1, responses, ["core_methodology"]) == ["framework_basics"]
        assert machine.is_phase_complete(1, responses, ["core_methodology", "framework_basics"])

    def test_checklist_task_accepts_true_response(self, machine):
        responses = {"self_assessment": "Solid", "core_methodology": True, "framework_basics": True}
        assert machine.is_phase_complete(1, responses, [])

    def test_empty_input_lists_every_task(self, machine):
        assert machine.missing_tasks(0, None, None) == [
            "identify_skills", "skill_examples", "skill_passion",
        ]

    def test_unknown_phase_raises(self, machine):
        with pytest.raises(ValidationError):
            machine.missing_tasks(9, {}, [])

    def test_last_phase_and_all_completed(self, machine):
        assert machine.is_last_phase(3)
        assert not machine.is_last_phase(2)
        assert not machine.all_completed({0, 1, 2})
        assert machine.all_completed({0, 1, 2, 3})

    def test_catalog_must_be_numbered_in_order(self):
        with pytest.raises(ValueError):
            PhaseMachine((PhaseDefinition(1, "Only", ()),))
        with pytest.raises(ValueError):
            PhaseMachine(())
