"""
Platform Constants

Enumerations shared by the onboarding wizard, learning journeys, idea
episodes and the admin review workflow. Values are the strings stored in
the database.
"""

from enum import Enum, IntEnum


class PrimaryRole(str, Enum):
    ENTREPRENEUR = "entrepreneur"
    COBUILDER = "cobuilder"


class AppRole(str, Enum):
    ENTREPRENEUR = "entrepreneur"
    COBUILDER = "cobuilder"
    BOX_MANAGER = "box_manager"
    ADMIN = "admin"


class OnboardingJourneyStatus(str, Enum):
    IN_PROGRESS = "in_progress"
    PENDING_APPROVAL = "pending_approval"
    APPROVED = "approved"
    REJECTED = "rejected"
    ENTREPRENEUR_APPROVED = "entrepreneur_approved"
    ENTREPRENEUR_IN_PROGRESS = "entrepreneur_in_progress"


class OnboardingStep(IntEnum):
    """Co-Builder wizard steps, in order."""
    PATH_SELECTION = 1
    NATURAL_ROLE_DEFINITION = 2
    PROMISE_CHECK = 3
    PRACTICE_CHECK = 4
    TRAINING_CHECK = 5
    CONSULTING_CHECK = 6
    SCALING_DECISION = 7
    PROFILE_INFO = 8
    COMPLETION = 9


class EntrepreneurStep(IntEnum):
    """Entrepreneur wizard steps, in order."""
    PATH_SELECTION = 1
    PROJECT = 2
    PRODUCT = 3
    TEAM = 4
    BUSINESS = 5
    BOARD = 6
    PROFILE_INFO = 7
    REVIEW = 8
    COMPLETION = 9


class ExperienceCategory(str, Enum):
    PROJECT = "project"
    PRODUCT = "product"
    TEAM = "team"
    BUSINESS = "business"
    BOARD = "board"


EXPERIENCE_CATEGORY_STEPS = {
    ExperienceCategory.PROJECT: EntrepreneurStep.PROJECT,
    ExperienceCategory.PRODUCT: EntrepreneurStep.PRODUCT,
    ExperienceCategory.TEAM: EntrepreneurStep.TEAM,
    ExperienceCategory.BUSINESS: EntrepreneurStep.BUSINESS,
    ExperienceCategory.BOARD: EntrepreneurStep.BOARD,
}

# Column carrying the has/has-not answer for each category
EXPERIENCE_FLAG_COLUMNS = {
    ExperienceCategory.PROJECT: "has_developed_project",
    ExperienceCategory.PRODUCT: "has_built_product",
    ExperienceCategory.TEAM: "has_led_team",
    ExperienceCategory.BUSINESS: "has_run_business",
    ExperienceCategory.BOARD: "has_served_on_board",
}


class NaturalRoleStatus(str, Enum):
    PENDING = "pending"
    DEFINED = "defined"
    ASSISTANCE_REQUESTED = "assistance_requested"
    NOT_READY = "not_ready"


class JourneyType(str, Enum):
    SKILL_PTC = "skill_ptc"
    IDEA_PTC = "idea_ptc"
    SCALING_PATH = "scaling_path"


class LearningJourneyStatus(str, Enum):
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    PENDING_APPROVAL = "pending_approval"
    APPROVED = "approved"
    REJECTED = "rejected"


class UserStatus(str, Enum):
    BOOSTED = "boosted"
    SCALED = "scaled"


class BoostType(str, Enum):
    BOOSTED_CO_BUILDER = "boosted_co_builder"
    BOOSTED_INITIATOR = "boosted_initiator"
    BOOSTED_TALENT = "boosted_talent"


class ScaleType(str, Enum):
    VENTURE_PROMISE = "venture_promise"
    PERSONAL_PROMISE = "personal_promise"


class Episode(str, Enum):
    DEVELOPMENT = "development"
    VALIDATION = "validation"
    GROWTH = "growth"


# Value of StartupIdea.current_episode once the growth episode is finished
EPISODES_COMPLETED = "completed"


class IdeaReviewStatus(str, Enum):
    PENDING = "pending"
    UNDER_REVIEW = "under_review"
    APPROVED = "approved"
    REJECTED = "rejected"


class ApplicationStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


class TrainingReviewStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    DECLINED = "declined"


class NRDecoderStatus(str, Enum):
    PENDING = "pending"
    REVIEWED = "reviewed"


class ReviewDecision(str, Enum):
    APPROVE = "approve"
    REJECT = "reject"


# Placeholder owner of applications submitted without an account
ANONYMOUS_USER_ID = "00000000-0000-0000-0000-000000000000"

JOURNEY_DOCUMENTS_BUCKET = "journey-documents"
