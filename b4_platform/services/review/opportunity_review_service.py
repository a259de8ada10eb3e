"""Admin review of startup ideas (opportunities)."""

from datetime import datetime, timezone
from typing import List, Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from b4_platform.core.constants import (
    AppRole,
    IdeaReviewStatus,
    OnboardingJourneyStatus,
    ReviewDecision,
)
from b4_platform.core.exceptions import InvalidTransitionError, NotFoundError
from b4_platform.database.models import StartupIdea
from b4_platform.repositories.onboarding_repository import (
    OnboardingStateRepository,
    ProfileRepository,
)
from b4_platform.repositories.startup_idea_repository import StartupIdeaRepository
from b4_platform.repositories.user_role_repository import UserRoleRepository
from b4_platform.schemas.auth import CurrentUser
from b4_platform.services.base_service import BaseService
from b4_platform.services.email_service import (
    OPPORTUNITY_APPROVED,
    OPPORTUNITY_REJECTED,
    EmailService,
)
from b4_platform.services.notification_service import NotificationService
from b4_platform.services.supabase_admin import SupabaseAdminClient

REVIEWABLE_STATUSES = [IdeaReviewStatus.PENDING.value, IdeaReviewStatus.UNDER_REVIEW.value]


class OpportunityReviewService(BaseService):
    """Approves ideas into the public opportunity list or rejects them.

    Approval also makes the creator an approved entrepreneur (Initiator).
    Emails go out after the decision is committed; a failed email is logged
    and never undoes the decision.
    """

    def __init__(
        self,
        session: AsyncSession,
        email_service: Optional[EmailService] = None,
        auth_admin: Optional[SupabaseAdminClient] = None,
    ):
        super().__init__(session)
        self.idea_repo = StartupIdeaRepository(session)
        self.state_repo = OnboardingStateRepository(session)
        self.profile_repo = ProfileRepository(session)
        self.role_repo = UserRoleRepository(session)
        self.notifications = NotificationService(session)
        self.email_service = email_service or EmailService()
        self.auth_admin = auth_admin or SupabaseAdminClient()

    async def list_pending(self) -> List[StartupIdea]:
        return await self.idea_repo.list_by_review_status(REVIEWABLE_STATUSES)

    async def mark_under_review(self, idea_id: UUID) -> StartupIdea:
        async with self.transaction():
            idea = await self._get_reviewable(idea_id, IdeaReviewStatus.UNDER_REVIEW.value)
            return await self.idea_repo.update_instance(
                idea, review_status=IdeaReviewStatus.UNDER_REVIEW.value
            )

    async def _get_reviewable(self, idea_id: UUID, requested: str) -> StartupIdea:
        idea = await self.idea_repo.get_by_id(idea_id)
        if idea is None:
            raise NotFoundError(f"Startup idea {idea_id} not found")
        if idea.review_status not in REVIEWABLE_STATUSES:
            raise InvalidTransitionError(
                f"Idea was already {idea.review_status}",
                current=idea.review_status,
                requested=requested,
            )
        return idea

    async def review(
        self,
        admin: CurrentUser,
        idea_id: UUID,
        decision: ReviewDecision,
        notes: Optional[str] = None,
    ) -> StartupIdea:
        decision = ReviewDecision(decision)
        notes = (notes or "").strip() or None
        approved = decision == ReviewDecision.APPROVE
        new_status = IdeaReviewStatus.APPROVED if approved else IdeaReviewStatus.REJECTED

        async with self.transaction():
            idea = await self._get_reviewable(idea_id, new_status.value)
            idea = await self.idea_repo.update_instance(
                idea,
                review_status=new_status.value,
                reviewed_at=datetime.now(timezone.utc),
                admin_notes=notes,
            )
            profile = await self.profile_repo.get_by_user(idea.creator_id)
            creator_name = profile.full_name if profile else None

            if approved:
                await self._promote_creator(idea.creator_id)
                message = (
                    f'Your opportunity "{idea.title}" has been approved and is now visible to all '
                    f"co-builders! You are now a Co-Builder and Initiator."
                )
                title = "Opportunity Approved! 🚀"
                link = "/profile"
            else:
                message = f'Your opportunity "{idea.title}" has been declined.'
                title = "Opportunity Declined"
                link = None

            await self.notifications.notify_admins(
                user_id=idea.creator_id,
                notification_type=f"opportunity_{new_status.value}",
                user_name=creator_name,
                message=message,
            )
            await self.notifications.notify_user(
                idea.creator_id, f"opportunity_{new_status.value}", title, message, link=link
            )

        self.logger.info(f"Idea {idea_id} {new_status.value} by {admin.id}")
        await self._send_email(
            idea.creator_id,
            OPPORTUNITY_APPROVED if approved else OPPORTUNITY_REJECTED,
            idea.title,
        )
        return idea

    async def _promote_creator(self, creator_id: str) -> None:
        state = await self.state_repo.get_by_user(creator_id)
        if state is not None:
            await self.state_repo.update_instance(
                state,
                journey_status=OnboardingJourneyStatus.ENTREPRENEUR_APPROVED.value,
                entrepreneur_step=1,
            )
        await self.role_repo.grant_role(creator_id, AppRole.COBUILDER.value)
        await self.role_repo.grant_role(creator_id, AppRole.ENTREPRENEUR.value)

    async def _send_email(self, user_id: str, email_type: str, idea_title: str) -> None:
        if not self.email_service.is_configured:
            self.logger.info(f"Email not configured; skipping {email_type} email")
            return
        try:
            contact = await self.auth_admin.get_user_contact(user_id)
            if contact is None:
                self.logger.warning(f"No email address for {user_id}; skipping {email_type} email")
                return
            await self.email_service.send_notification_email(
                to=contact["email"],
                user_name=contact["name"],
                email_type=email_type,
                data={"idea_title": idea_title},
            )
        except Exception as e:
            self.logger.error(f"Failed to send {email_type} email to {user_id}: {str(e)}", exc_info=True)
