"""Admin analytics and per-user dashboard aggregates."""

from typing import Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from b4_platform.core.constants import (
    ApplicationStatus,
    IdeaReviewStatus,
    OnboardingJourneyStatus,
)
from b4_platform.repositories.learning_journey_repository import (
    LearningJourneyRepository,
    UserCertificationRepository,
)
from b4_platform.repositories.notification_repository import UserNotificationRepository
from b4_platform.repositories.onboarding_repository import (
    OnboardingStateRepository,
    ProfileRepository,
)
from b4_platform.repositories.startup_idea_repository import (
    EntrepreneurJourneyResponseRepository,
    StartupApplicationRepository,
    StartupIdeaRepository,
)
from b4_platform.schemas.dashboard import AdminAnalytics, CertificationOut, UserDashboard
from b4_platform.schemas.journeys import LearningJourneyOut
from b4_platform.schemas.onboarding import OnboardingStateResponse
from b4_platform.schemas.reviews import StartupIdeaOut
from b4_platform.services.base_service import BaseService

JOURNEY_RESPONSE_FIELDS: Tuple[str, ...] = (
    "vision",
    "problem",
    "market",
    "business_model",
    "roles_needed",
    "cobuilder_plan",
    "execution_plan",
)


def rate(part: int, total: int) -> int:
    """Whole percentage of ``part`` in ``total``, rounding halves up.

    >>> rate(3, 4)
    75
    >>> rate(1, 8)
    13
    """
    if total == 0:
        return 0
    # Integer arithmetic keeps x.5 exact
    return (200 * part + total) // (2 * total)


class DashboardService(BaseService):

    def __init__(self, session: AsyncSession):
        super().__init__(session)
        self.profile_repo = ProfileRepository(session)
        self.state_repo = OnboardingStateRepository(session)
        self.idea_repo = StartupIdeaRepository(session)
        self.application_repo = StartupApplicationRepository(session)
        self.journey_response_repo = EntrepreneurJourneyResponseRepository(session)
        self.learning_journey_repo = LearningJourneyRepository(session)
        self.certification_repo = UserCertificationRepository(session)
        self.user_notification_repo = UserNotificationRepository(session)

    async def get_admin_analytics(self) -> AdminAnalytics:
        """Platform-wide counts and the three headline percentages.

        The counts run one after another on the request's session; an
        AsyncSession does not allow concurrent statements.
        """
        total_users = await self.profile_repo.count()
        approved_users = await self.state_repo.count(filters={
            "journey_status": [
                OnboardingJourneyStatus.APPROVED.value,
                OnboardingJourneyStatus.ENTREPRENEUR_APPROVED.value,
            ]
        })
        pending_approvals = await self.state_repo.count(
            filters={"journey_status": OnboardingJourneyStatus.PENDING_APPROVAL.value}
        )

        total_ideas = await self.idea_repo.count()
        approved_ideas = await self.idea_repo.count(
            filters={"review_status": IdeaReviewStatus.APPROVED.value}
        )
        pending_ideas = await self.idea_repo.count(filters={
            "review_status": [IdeaReviewStatus.PENDING.value, IdeaReviewStatus.UNDER_REVIEW.value]
        })

        total_applications = await self.application_repo.count()
        pending_applications = await self.application_repo.count(
            filters={"status": ApplicationStatus.PENDING.value}
        )
        accepted_applications = await self.application_repo.count(
            filters={"status": ApplicationStatus.ACCEPTED.value}
        )

        total_journey_responses = await self.journey_response_repo.count()
        completed_journeys, in_progress_journeys = (
            await self.journey_response_repo.count_by_completion(JOURNEY_RESPONSE_FIELDS)
        )

        return AdminAnalytics(
            total_users=total_users,
            approved_users=approved_users,
            pending_approvals=pending_approvals,
            total_ideas=total_ideas,
            approved_ideas=approved_ideas,
            pending_ideas=pending_ideas,
            total_applications=total_applications,
            pending_applications=pending_applications,
            accepted_applications=accepted_applications,
            total_journey_responses=total_journey_responses,
            completed_journeys=completed_journeys,
            in_progress_journeys=in_progress_journeys,
            journey_completion_rate=rate(completed_journeys, total_journey_responses),
            idea_approval_rate=rate(approved_ideas, total_ideas),
            application_acceptance_rate=rate(accepted_applications, total_applications),
        )

    async def get_user_dashboard(self, user_id: str) -> UserDashboard:
        state = await self.state_repo.get_by_user(user_id)
        certifications = await self.certification_repo.list_for_user(user_id)
        journeys = await self.learning_journey_repo.list_for_user(user_id)
        ideas = await self.idea_repo.list_by_creator(user_id)
        unread = await self.user_notification_repo.count_unread(user_id)

        return UserDashboard(
            onboarding=OnboardingStateResponse.model_validate(state) if state else None,
            certifications=[
                CertificationOut(
                    certification_type=c.certification_type,
                    display_label=c.display_label,
                    verified=c.verified,
                )
                for c in certifications
            ],
            journeys=[LearningJourneyOut.model_validate(j) for j in journeys],
            ideas=[StartupIdeaOut.model_validate(i) for i in ideas],
            unread_notifications=unread,
        )
