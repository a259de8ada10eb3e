"""Linear phase gating shared by learning journeys and idea episodes.

This module provides:
1. Phase catalogs for every learning journey type and idea episode
2. ``PhaseMachine``: the unlock predicate and completion checks over a catalog

Phase ``n`` is accessible only when phase ``n - 1`` is completed. A phase is
complete when every text task has a non-blank answer and every checklist
task is ticked.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Collection, Dict, List, Mapping, Optional, Tuple

from b4_platform.core.constants import Episode, JourneyType
from b4_platform.core.exceptions import ValidationError


class TaskKind(str, Enum):
    TEXT = "text"
    CHECKLIST = "checklist"


@dataclass(frozen=True)
class TaskDefinition:
    id: str
    label: str
    kind: TaskKind = TaskKind.TEXT


@dataclass(frozen=True)
class PhaseDefinition:
    number: int
    name: str
    tasks: Tuple[TaskDefinition, ...]


def _text(task_id: str, label: str) -> TaskDefinition:
    return TaskDefinition(task_id, label, TaskKind.TEXT)


def _check(task_id: str, label: str) -> TaskDefinition:
    return TaskDefinition(task_id, label, TaskKind.CHECKLIST)


def _catalog(*phases: Tuple[str, Tuple[TaskDefinition, ...]]) -> Tuple[PhaseDefinition, ...]:
    return tuple(PhaseDefinition(number, name, tasks) for number, (name, tasks) in enumerate(phases))


class PhaseMachine:
    """Unlock and completion rules over an ordered phase catalog."""

    def __init__(self, phases: Tuple[PhaseDefinition, ...]):
        if not phases:
            raise ValueError("A phase catalog needs at least one phase")
        for index, phase in enumerate(phases):
            if phase.number != index:
                raise ValueError(f"Phase '{phase.name}' is numbered {phase.number}, expected {index}")
        self.phases = phases

    def __len__(self) -> int:
        return len(self.phases)

    def get_phase(self, phase_number: int) -> PhaseDefinition:
        if not 0 <= phase_number < len(self.phases):
            raise ValidationError(f"Unknown phase {phase_number}")
        return self.phases[phase_number]

    def can_access(self, phase_number: int, completed: Collection[int]) -> bool:
        """Phase 0 is always open; any later phase needs its predecessor completed."""
        if not 0 <= phase_number < len(self.phases):
            return False
        return phase_number == 0 or (phase_number - 1) in completed

    def missing_tasks(
        self,
        phase_number: int,
        responses: Optional[Mapping[str, object]],
        completed_tasks: Optional[Collection[str]],
    ) -> List[str]:
        """Ids of the tasks still blocking completion of a phase."""
        responses = responses or {}
        ticked = set(completed_tasks or ())
        missing = []
        for task in self.get_phase(phase_number).tasks:
            if task.kind == TaskKind.CHECKLIST:
                done = task.id in ticked or responses.get(task.id) is True
            else:
                answer = responses.get(task.id)
                done = isinstance(answer, str) and bool(answer.strip())
            if not done:
                missing.append(task.id)
        return missing

    def is_phase_complete(
        self,
        phase_number: int,
        responses: Optional[Mapping[str, object]],
        completed_tasks: Optional[Collection[str]],
    ) -> bool:
        return not self.missing_tasks(phase_number, responses, completed_tasks)

    def is_last_phase(self, phase_number: int) -> bool:
        return phase_number == len(self.phases) - 1

    def all_completed(self, completed: Collection[int]) -> bool:
        return all(phase.number in completed for phase in self.phases)


# ============= LEARNING JOURNEYS =============

SKILL_PTC_PHASES = _catalog(
    ("Skills Assessment", (
        _text("identify_skills", "Identify your core skills"),
        _text("skill_examples", "Give concrete examples of each skill in action"),
        _text("skill_passion", "Which skill do you most enjoy using?"),
    )),
    ("Practice", (
        _check("core_methodology", "Learn the core methodology"),
        _check("framework_basics", "Master the framework basics"),
        _text("self_assessment", "Self-assessment of your practice"),
    )),
    ("Train", (
        _check("case_study_1", "Complete case study 1"),
        _check("case_study_2", "Complete case study 2"),
        _text("portfolio", "Link or describe your portfolio"),
        _check("peer_review", "Pass a peer review"),
    )),
    ("Consult", (
        _check("mentoring_session", "Run a mentoring session"),
        _check("advisory_role", "Take on an advisory role"),
        _check("certification_ready", "Ready for certification"),
    )),
)

IDEA_PTC_PHASES = _catalog(
    ("Ideation", (
        _text("vision", "What is your vision?"),
        _text("problem", "What problem are you solving?"),
        _text("market", "Who is your target market?"),
    )),
    ("Structuring", (
        _text("business_model", "Describe your business model"),
        _text("key_roles", "Which key roles does the venture need?"),
        _text("value_proposition", "What is your value proposition?"),
    )),
    ("Team Building", (
        _text("role_requirements", "Requirements for each role"),
        _check("cobuilder_search", "Search for Co-Builders"),
        _check("team_formation", "Form the founding team"),
    )),
    ("Launch", (
        _text("execution_plan", "Execution plan"),
        _check("milestone_1", "Reach the first milestone"),
        _check("launch_ready", "Ready to launch"),
    )),
)

SCALING_PATH_PHASES = _catalog(
    ("Personal Entity", (
        _text("logo_name", "Logo and name of your personal entity"),
        _text("services_3", "Three services you offer"),
        _text("website_link", "Website link"),
        _text("missions_10", "Ten missions completed"),
    )),
    ("Company Formation", (
        _text("company_brand", "Company brand"),
        _text("company_services", "Company services"),
        _text("company_website", "Company website"),
        _text("proposal_template", "Proposal template"),
        _check("first_invoice", "Issue the first invoice"),
    )),
    ("Process Implementation", (
        _text("define_process", "Define the process"),
        _check("implement_process", "Implement the process"),
        _text("review_process", "Review the process"),
        _check("mission_external_internal", "Run one external and one internal mission"),
    )),
    ("Optimization", (
        _text("optimize_process", "Optimize the process"),
        _text("optimize_implementation", "Optimize the implementation"),
        _check("missions_3", "Complete three missions"),
        _check("process_manager", "Appoint a process manager"),
    )),
    ("Scalability", (
        _text("final_optimize", "Final optimization"),
        _text("final_implementation", "Final implementation"),
        _check("missions_5", "Complete five missions"),
        _check("structure_handler", "Hand the structure over"),
    )),
)

# ============= IDEA EPISODES =============

DEVELOPMENT_PHASES = _catalog(
    ("Ideation", (
        _text("vision", "What is your vision?"),
        _text("problem", "What problem are you solving?"),
        _text("market", "Who is your target market?"),
    )),
    ("Structuring", (
        _text("business_model", "Describe your business model"),
        _text("key_roles", "Which key roles does the venture need?"),
        _text("value_proposition", "What is your value proposition?"),
    )),
    ("Team Building", (
        _text("role_requirements", "Requirements for each role"),
        _check("team_search", "Search for Co-Builders"),
    )),
    ("Launch", (
        _text("execution_plan", "Execution plan"),
        _text("first_milestone", "First milestone"),
        _text("launch_readiness", "Launch readiness"),
    )),
)

VALIDATION_PHASES = _catalog(
    ("Validation", (
        _text("hypothesis_testing", "Which hypotheses did you test?"),
        _text("customer_feedback", "What did customers tell you?"),
        _text("pivot_decisions", "Which pivots did you decide on?"),
    )),
    ("Execution & Operations", (
        _text("operational_processes", "Operational processes"),
        _text("metrics_dashboard", "Metrics you track"),
        _text("resource_allocation", "Resource allocation"),
    )),
    ("Iteration & Improvement", (
        _text("product_iterations", "Product iterations"),
        _text("process_improvements", "Process improvements"),
        _text("lessons_learned", "Lessons learned"),
    )),
)

GROWTH_PHASES = _catalog(
    ("Customer Acquisition", (
        _text("acquisition_channels", "Acquisition channels"),
        _text("customer_segmentation", "Customer segmentation"),
        _text("conversion_optimization", "Conversion optimization"),
    )),
    ("Partnerships", (
        _text("partnership_strategy", "Partnership strategy"),
        _text("active_partnerships", "Active partnerships"),
        _text("partnership_pipeline", "Partnership pipeline"),
    )),
    ("Revenue Growth", (
        _text("revenue_streams", "Revenue streams"),
        _text("pricing_strategy", "Pricing strategy"),
        _text("unit_economics", "Unit economics"),
    )),
    ("Team Scaling", (
        _text("org_structure", "Organisation structure"),
        _text("hiring_plan", "Hiring plan"),
        _text("culture_values", "Culture and values"),
    )),
)

JOURNEY_MACHINES: Dict[JourneyType, PhaseMachine] = {
    JourneyType.SKILL_PTC: PhaseMachine(SKILL_PTC_PHASES),
    JourneyType.IDEA_PTC: PhaseMachine(IDEA_PTC_PHASES),
    JourneyType.SCALING_PATH: PhaseMachine(SCALING_PATH_PHASES),
}

EPISODE_MACHINES: Dict[Episode, PhaseMachine] = {
    Episode.DEVELOPMENT: PhaseMachine(DEVELOPMENT_PHASES),
    Episode.VALIDATION: PhaseMachine(VALIDATION_PHASES),
    Episode.GROWTH: PhaseMachine(GROWTH_PHASES),
}

# Episode that follows each one once its last phase is completed
NEXT_EPISODE: Dict[Episode, Optional[Episode]] = {
    Episode.DEVELOPMENT: Episode.VALIDATION,
    Episode.VALIDATION: Episode.GROWTH,
    Episode.GROWTH: None,
}


def journey_machine(journey_type: str) -> PhaseMachine:
    try:
        return JOURNEY_MACHINES[JourneyType(journey_type)]
    except ValueError as e:
        raise ValidationError(f"Unknown journey type '{journey_type}'") from e


def episode_machine(episode: str) -> PhaseMachine:
    try:
        return EPISODE_MACHINES[Episode(episode)]
    except ValueError as e:
        raise ValidationError(f"Unknown episode '{episode}'") from e
