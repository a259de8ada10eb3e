"""Admin review of submitted learning journeys."""

from datetime import datetime, timezone
from typing import List, Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from b4_platform.core.constants import LearningJourneyStatus, ReviewDecision
from b4_platform.core.exceptions import InvalidTransitionError, NotesRequiredError, NotFoundError
from b4_platform.database.models import LearningJourney
from b4_platform.repositories.learning_journey_repository import (
    LearningJourneyRepository,
    UserCertificationRepository,
)
from b4_platform.repositories.onboarding_repository import OnboardingStateRepository
from b4_platform.schemas.auth import CurrentUser
from b4_platform.services.base_service import BaseService
from b4_platform.services.learning_journey_service import journey_label
from b4_platform.services.notification_service import NotificationService
from b4_platform.services.review.certification_rules import certification_rule

LISTED_STATUSES = [
    LearningJourneyStatus.PENDING_APPROVAL.value,
    LearningJourneyStatus.IN_PROGRESS.value,
    LearningJourneyStatus.APPROVED.value,
    LearningJourneyStatus.REJECTED.value,
]


class JourneyReviewService(BaseService):
    """Approves or rejects learning journeys awaiting approval."""

    def __init__(self, session: AsyncSession):
        super().__init__(session)
        self.journey_repo = LearningJourneyRepository(session)
        self.certification_repo = UserCertificationRepository(session)
        self.state_repo = OnboardingStateRepository(session)
        self.notifications = NotificationService(session)

    async def list_pending(self) -> List[LearningJourney]:
        """Journeys an admin may look at, most recently updated first."""
        return await self.journey_repo.list_by_status(LISTED_STATUSES)

    async def review(
        self,
        admin: CurrentUser,
        journey_id: UUID,
        decision: ReviewDecision,
        notes: Optional[str] = None,
    ) -> LearningJourney:
        """Apply an admin decision and every side effect of it in one transaction.

        Raises:
            NotesRequiredError: Rejecting without notes; nothing is written
            NotFoundError: Unknown journey
            InvalidTransitionError: The journey is not awaiting approval
        """
        decision = ReviewDecision(decision)
        notes = (notes or "").strip() or None
        if decision == ReviewDecision.REJECT and not notes:
            raise NotesRequiredError("Please provide notes explaining why the journey is rejected")

        async with self.transaction():
            journey = await self.journey_repo.get_by_id(journey_id)
            if journey is None:
                raise NotFoundError(f"Learning journey {journey_id} not found")
            if journey.status != LearningJourneyStatus.PENDING_APPROVAL.value:
                raise InvalidTransitionError(
                    f"Only journeys pending approval can be reviewed (status: {journey.status})",
                    current=journey.status,
                    requested=decision.value,
                )

            if decision == ReviewDecision.APPROVE:
                journey = await self._approve(admin, journey, notes)
            else:
                journey = await self._reject(journey, notes)

        self.logger.info(
            f"Journey {journey_id} {journey.status} by {admin.id}",
            extra={"journey_type": journey.journey_type, "user_id": journey.user_id}
        )
        return journey

    async def _approve(
        self, admin: CurrentUser, journey: LearningJourney, notes: Optional[str]
    ) -> LearningJourney:
        rule = certification_rule(journey.journey_type)
        label = journey_label(journey.journey_type)

        journey = await self.journey_repo.update_instance(
            journey,
            status=LearningJourneyStatus.APPROVED.value,
            approved_at=datetime.now(timezone.utc),
            approved_by=admin.id,
            admin_notes=notes,
        )
        await self.certification_repo.upsert(
            user_id=journey.user_id,
            certification_type=rule.certification_type,
            display_label=rule.display_label,
            verified=True,
        )

        state = await self.state_repo.get_by_user(journey.user_id)
        if state is not None:
            await self.state_repo.update_instance(state, **rule.state_changes())
        else:
            self.logger.warning(f"No onboarding state for {journey.user_id}; status not updated")

        await self.notifications.notify_user(
            journey.user_id,
            "journey_approved",
            "Journey Approved!",
            f"Congratulations! Your {label} journey has been approved. "
            f"You've earned the \"{rule.display_label}\" certification!",
            link="/profile",
        )
        return journey

    async def _reject(self, journey: LearningJourney, notes: str) -> LearningJourney:
        label = journey_label(journey.journey_type)
        journey = await self.journey_repo.update_instance(
            journey,
            status=LearningJourneyStatus.REJECTED.value,
            admin_notes=notes,
        )
        await self.notifications.notify_user(
            journey.user_id,
            "journey_rejected",
            "Journey Needs Revision",
            f"Your {label} journey needs revision. Please check the feedback and try again.",
            link="/profile",
        )
        return journey
