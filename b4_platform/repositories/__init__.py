"""Repository layer modules."""

from b4_platform.repositories.account_repository import AccountDeletionTokenRepository
from b4_platform.repositories.learning_journey_repository import (
    JourneyPhaseResponseRepository,
    LearningJourneyRepository,
    UserCertificationRepository,
)
from b4_platform.repositories.notification_repository import (
    AdminNotificationRepository,
    UserNotificationRepository,
)
from b4_platform.repositories.onboarding_repository import (
    EntrepreneurialOnboardingRepository,
    NaturalRoleRepository,
    OnboardingStateRepository,
    ProfileRepository,
)
from b4_platform.repositories.startup_idea_repository import (
    EntrepreneurJourneyResponseRepository,
    IdeaJourneyProgressRepository,
    StartupApplicationRepository,
    StartupIdeaRepository,
)
from b4_platform.repositories.submission_repository import (
    NRDecoderSubmissionRepository,
    TrainingOpportunityRepository,
)
from b4_platform.repositories.user_role_repository import UserRoleRepository

__all__ = [
    "AccountDeletionTokenRepository",
    "AdminNotificationRepository",
    "EntrepreneurialOnboardingRepository",
    "EntrepreneurJourneyResponseRepository",
    "IdeaJourneyProgressRepository",
    "JourneyPhaseResponseRepository",
    "LearningJourneyRepository",
    "NRDecoderSubmissionRepository",
    "NaturalRoleRepository",
    "OnboardingStateRepository",
    "ProfileRepository",
    "StartupApplicationRepository",
    "StartupIdeaRepository",
    "TrainingOpportunityRepository",
    "UserCertificationRepository",
    "UserNotificationRepository",
    "UserRoleRepository",
]
