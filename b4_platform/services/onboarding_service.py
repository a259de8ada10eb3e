"""Onboarding wizard service.

Walks a user through the Co-Builder or Entrepreneur onboarding wizard. Each
operation persists one step's answers and advances ``current_step``.

Step rules:
- ``current_step`` only ever grows: every write is ``max(current, requested)``
- a step can be submitted once the user has reached it; submitting a step
  ahead of ``current_step`` raises ``InvalidTransitionError``
- going back in the UI is navigation only and never reaches this service
"""

from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from b4_platform.core.constants import (
    EXPERIENCE_CATEGORY_STEPS,
    EntrepreneurStep,
    ExperienceCategory,
    NaturalRoleStatus,
    OnboardingJourneyStatus,
    OnboardingStep,
    PrimaryRole,
)
from b4_platform.core.exceptions import InvalidTransitionError, ValidationError
from b4_platform.database.models import (
    EntrepreneurialOnboarding,
    NaturalRole,
    OnboardingState,
)
from b4_platform.repositories.onboarding_repository import (
    EntrepreneurialOnboardingRepository,
    NaturalRoleRepository,
    OnboardingStateRepository,
    ProfileRepository,
)
from b4_platform.schemas.auth import CurrentUser
from b4_platform.schemas.onboarding import (
    ConsultingAnswer,
    EntrepreneurialCategoryInput,
    PracticeAnswer,
    ProfileInput,
    TrainingAnswer,
)
from b4_platform.services.base_service import BaseService
from b4_platform.services.notification_service import NotificationService

POTENTIAL_ROLES = {
    PrimaryRole.ENTREPRENEUR: "potential_entrepreneur",
    PrimaryRole.COBUILDER: "potential_co_builder",
}

PATH_NAMES = {
    PrimaryRole.ENTREPRENEUR: "Entrepreneur",
    PrimaryRole.COBUILDER: "Co-Builder",
}

PATH_LOCKED_STATUSES = frozenset({
    OnboardingJourneyStatus.PENDING_APPROVAL.value,
    OnboardingJourneyStatus.APPROVED.value,
    OnboardingJourneyStatus.ENTREPRENEUR_APPROVED.value,
})

CATEGORY_LABELS = {
    ExperienceCategory.PROJECT: "Initiatives & Projects",
    ExperienceCategory.PRODUCT: "Products & Prototypes",
    ExperienceCategory.TEAM: "Team Leadership",
    ExperienceCategory.BUSINESS: "Business & Commercial",
    ExperienceCategory.BOARD: "Equity & Board Contributions",
}


class OnboardingService(BaseService):
    """State machine behind both onboarding wizards."""

    def __init__(self, session: AsyncSession):
        super().__init__(session)
        self.state_repo = OnboardingStateRepository(session)
        self.natural_role_repo = NaturalRoleRepository(session)
        self.entrepreneurial_repo = EntrepreneurialOnboardingRepository(session)
        self.profile_repo = ProfileRepository(session)
        self.notifications = NotificationService(session)

    # ------------------------------------------------------------------ state

    async def _load_state(self, user_id: str) -> OnboardingState:
        state = await self.state_repo.get_by_user(user_id)
        if state is None:
            state = await self.state_repo.get_or_create(
                {"user_id": user_id},
                current_step=int(OnboardingStep.PATH_SELECTION),
                journey_status=OnboardingJourneyStatus.IN_PROGRESS.value,
                onboarding_completed=False,
                retry_count=0,
            )
            self.logger.info(f"Created onboarding state for {user_id}")
        return state

    async def _load_natural_role(self, user_id: str) -> NaturalRole:
        natural_role = await self.natural_role_repo.get_by_user(user_id)
        if natural_role is None:
            natural_role = await self.natural_role_repo.get_or_create(
                {"user_id": user_id},
                status=NaturalRoleStatus.PENDING.value,
                is_ready=False,
            )
        return natural_role

    async def _load_entrepreneurial(self, user_id: str) -> EntrepreneurialOnboarding:
        record = await self.entrepreneurial_repo.get_by_user(user_id)
        if record is None:
            record = await self.entrepreneurial_repo.get_or_create(
                {"user_id": user_id}, is_completed=False
            )
        return record

    async def get_or_create_state(self, user_id: str) -> OnboardingState:
        """Return the user's onboarding state, creating it at step 1 if missing."""
        async with self.transaction():
            return await self._load_state(user_id)

    async def get_snapshot(self, user_id: str) -> dict:
        async with self.transaction():
            state = await self._load_state(user_id)
        natural_role = await self.natural_role_repo.get_by_user(user_id)
        entrepreneurial = await self.entrepreneurial_repo.get_by_user(user_id)
        return {"state": state, "natural_role": natural_role, "entrepreneurial": entrepreneurial}

    @staticmethod
    def _require_step(state: OnboardingState, step: int) -> None:
        if step > state.current_step:
            raise InvalidTransitionError(
                f"Step {step} is not reachable from step {state.current_step}",
                current=str(state.current_step),
                requested=str(step),
            )

    @staticmethod
    def _require_path(state: OnboardingState, role: PrimaryRole) -> None:
        if state.primary_role != role.value:
            raise InvalidTransitionError(
                f"This step belongs to the {PATH_NAMES[role]} path",
                current=state.primary_role,
                requested=role.value,
            )

    async def _advance(self, state: OnboardingState, step: int, **changes) -> OnboardingState:
        return await self.state_repo.update_instance(
            state, current_step=max(state.current_step, int(step)), **changes
        )

    async def _notify_admins(
        self, user: CurrentUser, notification_type: str, step_name: str, message: str,
        natural_role: Optional[NaturalRole] = None,
    ) -> None:
        await self.notifications.notify_admins(
            user_id=user.id,
            notification_type=notification_type,
            user_name=user.display_name,
            user_email=user.email,
            step_name=step_name,
            message=message,
            nr_description=natural_role.description if natural_role else None,
        )

    # ------------------------------------------------------ path selection

    async def select_path(self, user: CurrentUser, role: PrimaryRole) -> OnboardingState:
        """Step 1: choose the Entrepreneur or Co-Builder path.

        The path can be changed while the wizard is in progress or after a
        rejection. Once the onboarding is submitted for review or approved
        the role is fixed and this raises ``InvalidTransitionError``.
        """
        role = PrimaryRole(role)
        async with self.transaction():
            state = await self._load_state(user.id)
            if state.journey_status in PATH_LOCKED_STATUSES:
                raise InvalidTransitionError(
                    "The path cannot be changed after onboarding is submitted for review",
                    current=state.primary_role,
                    requested=role.value,
                )
            state = await self._advance(
                state,
                OnboardingStep.NATURAL_ROLE_DEFINITION,
                primary_role=role.value,
                potential_role=POTENTIAL_ROLES[role],
            )
            await self.notifications.notify_user(
                user.id,
                "onboarding_path_selected",
                "Path Selected! 🎯",
                f"You've chosen the {PATH_NAMES[role]} path. Let's continue your journey!",
                link="/onboarding",
            )
        self.logger.info(f"User {user.id} selected the {role.value} path")
        return state

    # --------------------------------------------------- co-builder wizard

    async def define_natural_role(self, user: CurrentUser, description: str) -> OnboardingState:
        """Step 2: record the Natural Role description."""
        description = (description or "").strip()
        if not description:
            raise ValidationError("Natural Role description must not be empty")

        async with self.transaction():
            state = await self._load_state(user.id)
            self._require_path(state, PrimaryRole.COBUILDER)
            self._require_step(state, OnboardingStep.NATURAL_ROLE_DEFINITION)

            natural_role = await self._load_natural_role(user.id)
            await self.natural_role_repo.update_instance(
                natural_role, description=description, status=NaturalRoleStatus.DEFINED.value
            )
            return await self._advance(state, OnboardingStep.PROMISE_CHECK)

    async def request_natural_role_help(self, user: CurrentUser) -> OnboardingState:
        """Step 2 alternative: ask an admin for help; the user stays on step 2."""
        async with self.transaction():
            state = await self._load_state(user.id)
            self._require_path(state, PrimaryRole.COBUILDER)
            self._require_step(state, OnboardingStep.NATURAL_ROLE_DEFINITION)

            natural_role = await self._load_natural_role(user.id)
            await self.natural_role_repo.update_instance(
                natural_role, status=NaturalRoleStatus.ASSISTANCE_REQUESTED.value
            )
            await self._notify_admins(
                user, "nr_help_requested", "Natural Role Definition",
                "User needs help defining their Natural Role", natural_role,
            )
            return await self._advance(state, OnboardingStep.NATURAL_ROLE_DEFINITION)

    async def answer_promise(self, user: CurrentUser, has_promise: bool) -> OnboardingState:
        """Step 3: a "no" marks the Natural Role not ready and keeps the user on step 3."""
        async with self.transaction():
            state = await self._load_state(user.id)
            self._require_path(state, PrimaryRole.COBUILDER)
            self._require_step(state, OnboardingStep.PROMISE_CHECK)

            natural_role = await self._load_natural_role(user.id)
            if has_promise:
                await self.natural_role_repo.update_instance(natural_role, promise_check=True)
                return await self._advance(state, OnboardingStep.PRACTICE_CHECK)

            await self.natural_role_repo.update_instance(
                natural_role, promise_check=False, status=NaturalRoleStatus.NOT_READY.value
            )
            return await self._advance(state, OnboardingStep.PROMISE_CHECK)

    async def request_guidance(self, user: CurrentUser) -> OnboardingState:
        """Exit path after a "no" on the promise check: hand the user to an admin."""
        async with self.transaction():
            state = await self._load_state(user.id)
            self._require_path(state, PrimaryRole.COBUILDER)
            self._require_step(state, OnboardingStep.PROMISE_CHECK)

            natural_role = await self._load_natural_role(user.id)
            if natural_role.promise_check is not False:
                raise InvalidTransitionError("Guidance is only offered after answering no to the promise check")

            await self._notify_admins(
                user, "user_stuck", "Promise Check",
                "User is not ready - wants guidance to develop their Natural Role", natural_role,
            )
            return await self.state_repo.update_instance(state, onboarding_completed=True)

    async def answer_practice(self, user: CurrentUser, answer: PracticeAnswer) -> OnboardingState:
        """Step 4: practice experience."""
        async with self.transaction():
            state = await self._load_state(user.id)
            self._require_path(state, PrimaryRole.COBUILDER)
            self._require_step(state, OnboardingStep.PRACTICE_CHECK)

            natural_role = await self._load_natural_role(user.id)
            if answer.has_experience:
                await self.natural_role_repo.update_instance(
                    natural_role,
                    practice_check=True,
                    practice_entities=answer.entities,
                    practice_case_studies=answer.case_studies,
                    practice_needs_help=False,
                )
            else:
                await self.natural_role_repo.update_instance(
                    natural_role, practice_check=False, practice_needs_help=answer.needs_help
                )
                if answer.needs_help:
                    await self._notify_admins(
                        user, "practice_help", "Practice Check",
                        "User needs help practicing their Natural Role", natural_role,
                    )
            return await self._advance(state, OnboardingStep.TRAINING_CHECK)

    async def answer_training(self, user: CurrentUser, answer: TrainingAnswer) -> OnboardingState:
        """Step 5: training experience."""
        async with self.transaction():
            state = await self._load_state(user.id)
            self._require_path(state, PrimaryRole.COBUILDER)
            self._require_step(state, OnboardingStep.TRAINING_CHECK)

            natural_role = await self._load_natural_role(user.id)
            if answer.has_experience:
                await self.natural_role_repo.update_instance(
                    natural_role,
                    training_check=True,
                    training_contexts=answer.contexts,
                    training_count=answer.people_trained,
                    training_needs_help=False,
                )
            else:
                await self.natural_role_repo.update_instance(
                    natural_role, training_check=False, training_needs_help=answer.needs_help
                )
                if answer.needs_help:
                    await self._notify_admins(
                        user, "training_help", "Training Check",
                        "User wants help starting to train others in their Natural Role", natural_role,
                    )
            return await self._advance(state, OnboardingStep.CONSULTING_CHECK)

    async def answer_consulting(self, user: CurrentUser, answer: ConsultingAnswer) -> OnboardingState:
        """Step 6: consulting experience."""
        async with self.transaction():
            state = await self._load_state(user.id)
            self._require_path(state, PrimaryRole.COBUILDER)
            self._require_step(state, OnboardingStep.CONSULTING_CHECK)

            natural_role = await self._load_natural_role(user.id)
            if answer.has_experience:
                await self.natural_role_repo.update_instance(
                    natural_role,
                    consulting_check=True,
                    consulting_with_whom=answer.with_whom,
                    consulting_case_studies=answer.case_studies,
                    consulting_needs_help=False,
                )
            else:
                await self.natural_role_repo.update_instance(
                    natural_role, consulting_check=False, consulting_needs_help=answer.needs_help
                )
                if answer.needs_help:
                    await self._notify_admins(
                        user, "consulting_help", "Consulting Check",
                        "User wants help starting to consult in their Natural Role", natural_role,
                    )
            return await self._advance(state, OnboardingStep.SCALING_DECISION)

    async def decide_scaling(self, user: CurrentUser, wants_to_scale: bool) -> OnboardingState:
        """Step 7: whether the user wants to scale their Natural Role."""
        async with self.transaction():
            state = await self._load_state(user.id)
            self._require_path(state, PrimaryRole.COBUILDER)
            self._require_step(state, OnboardingStep.SCALING_DECISION)

            natural_role = await self._load_natural_role(user.id)
            await self.natural_role_repo.update_instance(natural_role, wants_to_scale=wants_to_scale)
            if wants_to_scale:
                await self._notify_admins(
                    user, "scaling_candidate", "Scaling Decision",
                    "User wants to scale their Natural Role - process formalization candidate",
                    natural_role,
                )
            return await self._advance(state, OnboardingStep.PROFILE_INFO)

    async def save_profile(self, user: CurrentUser, profile: ProfileInput) -> OnboardingState:
        """Profile step: step 8 of the Co-Builder path, step 7 of the Entrepreneur path."""
        async with self.transaction():
            state = await self._load_state(user.id)
            if state.primary_role == PrimaryRole.ENTREPRENEUR.value:
                step, next_step = EntrepreneurStep.PROFILE_INFO, EntrepreneurStep.REVIEW
            else:
                self._require_path(state, PrimaryRole.COBUILDER)
                step, next_step = OnboardingStep.PROFILE_INFO, OnboardingStep.COMPLETION
            self._require_step(state, step)

            await self.profile_repo.upsert(user.id, **profile.model_dump(exclude_unset=True))
            return await self._advance(state, next_step)

    async def complete_onboarding(self, user: CurrentUser) -> OnboardingState:
        """Step 9: submit the Co-Builder onboarding for admin approval.

        Completing twice changes nothing; a rejected onboarding is resubmitted.
        """
        async with self.transaction():
            state = await self._load_state(user.id)
            self._require_path(state, PrimaryRole.COBUILDER)
            self._require_step(state, OnboardingStep.COMPLETION)

            resubmission = state.journey_status == OnboardingJourneyStatus.REJECTED.value
            if state.onboarding_completed and not resubmission:
                self.logger.info(f"Onboarding of {user.id} already submitted ({state.journey_status})")
                return state

            natural_role = await self._load_natural_role(user.id)
            is_ready = all(
                check is True for check in (
                    natural_role.promise_check,
                    natural_role.practice_check,
                    natural_role.training_check,
                    natural_role.consulting_check,
                )
            )
            await self.natural_role_repo.update_instance(natural_role, is_ready=is_ready)

            await self._notify_admins(
                user, "journey_completed", "Journey Complete - Pending Approval",
                f"User completed onboarding journey. Ready status: {'Ready' if is_ready else 'Needs assistance'}",
                natural_role,
            )
            await self.notifications.notify_user(
                user.id,
                "onboarding_complete",
                "Journey Complete! 🎓",
                "You've completed your onboarding journey. Your application is now under review.",
                link="/profile",
            )
            state = await self.state_repo.update_instance(
                state,
                onboarding_completed=True,
                journey_status=OnboardingJourneyStatus.PENDING_APPROVAL.value,
                retry_count=state.retry_count + 1 if resubmission else state.retry_count,
            )

        self.logger.info(
            f"Onboarding submitted for {user.id}",
            extra={"is_ready": is_ready, "resubmission": resubmission}
        )
        return state

    # ------------------------------------------------- entrepreneur wizard

    async def save_entrepreneurial_category(
        self,
        user: CurrentUser,
        category: ExperienceCategory,
        data: EntrepreneurialCategoryInput,
    ) -> OnboardingState:
        """Steps 2-6 of the Entrepreneur path, one per experience category."""
        category = ExperienceCategory(category)
        step = EXPERIENCE_CATEGORY_STEPS[category]

        async with self.transaction():
            state = await self._load_state(user.id)
            self._require_path(state, PrimaryRole.ENTREPRENEUR)
            self._require_step(state, step)

            record = await self._load_entrepreneurial(user.id)
            await self.entrepreneurial_repo.update_instance(record, **data.to_columns(category))

            if not data.has_experience and data.needs_help:
                label = CATEGORY_LABELS[category]
                await self._notify_admins(
                    user, f"{category.value}_help", label,
                    f"User needs help with {label}",
                )
            return await self._advance(state, step + 1)

    async def submit_entrepreneurial_onboarding(self, user: CurrentUser) -> OnboardingState:
        """Review step of the Entrepreneur path: submit for admin approval."""
        async with self.transaction():
            state = await self._load_state(user.id)
            self._require_path(state, PrimaryRole.ENTREPRENEUR)
            self._require_step(state, EntrepreneurStep.REVIEW)

            resubmission = state.journey_status == OnboardingJourneyStatus.REJECTED.value
            if state.onboarding_completed and not resubmission:
                return state

            record = await self._load_entrepreneurial(user.id)
            await self.entrepreneurial_repo.update_instance(record, is_completed=True)

            await self._notify_admins(
                user, "user_ready", "Entrepreneurial Journey Complete",
                "User completed entrepreneurial onboarding journey. Pending approval.",
            )
            await self.notifications.notify_user(
                user.id,
                "onboarding_complete",
                "Journey Complete! 🎓",
                "You've completed your entrepreneurial onboarding. Your application is now under review.",
                link="/profile",
            )
            return await self._advance(
                state,
                EntrepreneurStep.COMPLETION,
                primary_role=PrimaryRole.ENTREPRENEUR.value,
                onboarding_completed=True,
                journey_status=OnboardingJourneyStatus.PENDING_APPROVAL.value,
                retry_count=state.retry_count + 1 if resubmission else state.retry_count,
            )
