"""Admin approval of completed onboarding wizards."""

from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from b4_platform.core.constants import (
    JourneyType,
    OnboardingJourneyStatus,
    PrimaryRole,
    ReviewDecision,
)
from b4_platform.core.exceptions import InvalidTransitionError, NotFoundError
from b4_platform.database.models import OnboardingState
from b4_platform.repositories.learning_journey_repository import UserCertificationRepository
from b4_platform.repositories.onboarding_repository import (
    NaturalRoleRepository,
    OnboardingStateRepository,
    ProfileRepository,
)
from b4_platform.schemas.auth import CurrentUser
from b4_platform.schemas.reviews import PendingOnboardingOut
from b4_platform.services.base_service import BaseService
from b4_platform.services.email_service import COBUILDER_APPROVED, EmailService
from b4_platform.services.notification_service import NotificationService
from b4_platform.services.review.certification_rules import CERTIFICATION_RULES
from b4_platform.services.supabase_admin import SupabaseAdminClient

PATH_LABELS = {
    PrimaryRole.COBUILDER.value: "Co-Builder",
    PrimaryRole.ENTREPRENEUR.value: "Entrepreneur",
}


class OnboardingReviewService(BaseService):
    """Lists and decides onboarding submissions pending approval."""

    def __init__(
        self,
        session: AsyncSession,
        email_service: Optional[EmailService] = None,
        auth_admin: Optional[SupabaseAdminClient] = None,
    ):
        super().__init__(session)
        self.state_repo = OnboardingStateRepository(session)
        self.natural_role_repo = NaturalRoleRepository(session)
        self.profile_repo = ProfileRepository(session)
        self.certification_repo = UserCertificationRepository(session)
        self.notifications = NotificationService(session)
        self.email_service = email_service or EmailService()
        self.auth_admin = auth_admin or SupabaseAdminClient()

    async def list_pending(self, search: Optional[str] = None) -> List[PendingOnboardingOut]:
        rows = await self.state_repo.list_pending_approvals(search=search)
        return [
            PendingOnboardingOut(
                user_id=state.user_id,
                primary_role=state.primary_role,
                journey_status=state.journey_status,
                full_name=profile.full_name if profile else None,
                primary_skills=profile.primary_skills if profile else None,
                natural_role=natural_role.description if natural_role else None,
                is_ready=bool(natural_role and natural_role.is_ready),
                retry_count=state.retry_count or 0,
                updated_at=state.updated_at,
            )
            for state, profile, natural_role in rows
        ]

    async def review(
        self,
        admin: CurrentUser,
        user_id: str,
        decision: ReviewDecision,
        notes: Optional[str] = None,
    ) -> OnboardingState:
        """Approve or reject a pending onboarding. Notes are optional.

        Raises:
            NotFoundError: The user has no onboarding state
            InvalidTransitionError: The onboarding is not pending approval
        """
        decision = ReviewDecision(decision)
        notes = (notes or "").strip() or None

        async with self.transaction():
            state = await self.state_repo.get_by_user(user_id)
            if state is None:
                raise NotFoundError(f"No onboarding found for user {user_id}")
            if state.journey_status != OnboardingJourneyStatus.PENDING_APPROVAL.value:
                raise InvalidTransitionError(
                    f"Onboarding is {state.journey_status}, not pending approval",
                    current=state.journey_status,
                    requested=decision.value,
                )

            profile = await self.profile_repo.get_by_user(user_id)
            user_name = profile.full_name if profile and profile.full_name else None
            path_label = PATH_LABELS.get(state.primary_role, "Co-Builder")

            if decision == ReviewDecision.APPROVE:
                state = await self._approve(state, user_name, path_label)
            else:
                state = await self._reject(state, user_name, path_label, notes)

        self.logger.info(
            f"Onboarding of {user_id} {state.journey_status} by {admin.id}",
            extra={"primary_role": state.primary_role}
        )

        if (
            decision == ReviewDecision.APPROVE
            and state.primary_role != PrimaryRole.ENTREPRENEUR.value
        ):
            await self._send_approval_email(user_id)
        return state

    async def _approve(
        self, state: OnboardingState, user_name: Optional[str], path_label: str
    ) -> OnboardingState:
        is_entrepreneur = state.primary_role == PrimaryRole.ENTREPRENEUR.value
        new_status = (
            OnboardingJourneyStatus.ENTREPRENEUR_APPROVED
            if is_entrepreneur
            else OnboardingJourneyStatus.APPROVED
        )
        state = await self.state_repo.update_instance(state, journey_status=new_status.value)

        if not is_entrepreneur:
            natural_role = await self.natural_role_repo.get_by_user(state.user_id)
            if natural_role is not None and natural_role.is_ready:
                rule = CERTIFICATION_RULES[JourneyType.SKILL_PTC]
                await self.certification_repo.upsert(
                    user_id=state.user_id,
                    certification_type=rule.certification_type,
                    display_label=rule.display_label,
                    verified=True,
                )

        await self.notifications.notify_admins(
            user_id=state.user_id,
            notification_type="journey_approved",
            user_name=user_name,
            step_name="Approval",
            message=f"Your {path_label} journey has been approved! You now have full access to the platform.",
        )
        await self.notifications.notify_user(
            state.user_id,
            "journey_approved",
            "Onboarding Approved! 🎉",
            f"You've been approved as a {path_label}. You now have full access to the platform.",
            link="/profile",
        )
        return state

    async def _reject(
        self,
        state: OnboardingState,
        user_name: Optional[str],
        path_label: str,
        notes: Optional[str],
    ) -> OnboardingState:
        state = await self.state_repo.update_instance(
            state, journey_status=OnboardingJourneyStatus.REJECTED.value
        )
        message = f"Your {path_label} application requires additional review. Please contact support."
        await self.notifications.notify_admins(
            user_id=state.user_id,
            notification_type="journey_rejected",
            user_name=user_name,
            step_name="Approval",
            message=message,
        )
        user_message = message if not notes else f"{message} Admin notes: {notes}"
        await self.notifications.notify_user(
            state.user_id,
            "journey_rejected",
            "Onboarding Needs Revision",
            user_message,
            link="/onboarding",
        )
        return state

    async def _send_approval_email(self, user_id: str) -> None:
        """Best effort: the approval is committed whatever happens here."""
        if not self.email_service.is_configured:
            return
        try:
            contact = await self.auth_admin.get_user_contact(user_id)
            if contact is None:
                return
            await self.email_service.send_notification_email(
                to=contact["email"], user_name=contact["name"], email_type=COBUILDER_APPROVED
            )
        except Exception as e:
            self.logger.error(f"Approval email to {user_id} failed: {str(e)}", exc_info=True)
