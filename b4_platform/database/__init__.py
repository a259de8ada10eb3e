"""Database module for SQLAlchemy models."""

from b4_platform.database.models import (
    AccountDeletionToken,
    AdminNotification,
    EntrepreneurialOnboarding,
    EntrepreneurJourneyResponse,
    IdeaJourneyProgress,
    JourneyPhaseResponse,
    LearningJourney,
    NaturalRole,
    NRDecoderSubmission,
    OnboardingState,
    Profile,
    StartupApplication,
    StartupIdea,
    TrainingOpportunity,
    UserCertification,
    UserNotification,
    UserRole,
)

__all__ = [
    "AccountDeletionToken",
    "AdminNotification",
    "EntrepreneurialOnboarding",
    "EntrepreneurJourneyResponse",
    "IdeaJourneyProgress",
    "JourneyPhaseResponse",
    "LearningJourney",
    "NaturalRole",
    "NRDecoderSubmission",
    "OnboardingState",
    "Profile",
    "StartupApplication",
    "StartupIdea",
    "TrainingOpportunity",
    "UserCertification",
    "UserNotification",
    "UserRole",
]
