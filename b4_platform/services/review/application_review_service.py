"""Admin review of public applications and of co-builder applications to ideas."""

from typing import List, Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from b4_platform.core.constants import (
    ANONYMOUS_USER_ID,
    ApplicationStatus,
    AppRole,
    ReviewDecision,
)
from b4_platform.core.exceptions import (
    InvalidTransitionError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from b4_platform.database.models import AdminNotification, StartupApplication
from b4_platform.repositories.notification_repository import AdminNotificationRepository
from b4_platform.repositories.startup_idea_repository import (
    StartupApplicationRepository,
    StartupIdeaRepository,
)
from b4_platform.repositories.user_role_repository import UserRoleRepository
from b4_platform.schemas.auth import CurrentUser
from b4_platform.schemas.notifications import (
    APPLICATION_SUBMISSION,
    AdminNotificationOut,
    ApplicationOut,
    ApplicationSubmissionRequest,
    decode_notification_payload,
)
from b4_platform.services.base_service import BaseService
from b4_platform.services.notification_service import NotificationService

ROLE_FILTERS = {"all", "entrepreneur", "cobuilder", "partner"}


class ApplicationReviewService(BaseService):
    """Applications sent through the public join form.

    They are stored as admin notifications of type ``application_submission``
    whose message is the JSON-encoded form.
    """

    def __init__(self, session: AsyncSession):
        super().__init__(session)
        self.admin_repo = AdminNotificationRepository(session)
        self.role_repo = UserRoleRepository(session)
        self.notifications = NotificationService(session)

    async def submit_application(
        self, request: ApplicationSubmissionRequest, user_id: Optional[str] = None
    ) -> AdminNotification:
        """Record an application; visitors without an account use the placeholder id."""
        payload = request.to_payload()
        async with self.transaction():
            notification = await self.notifications.notify_admins(
                user_id=user_id or ANONYMOUS_USER_ID,
                notification_type=APPLICATION_SUBMISSION,
                message=payload.encode(),
                user_name=payload.full_name,
                user_email=payload.email,
                step_name=request.role,
            )
        self.logger.info(f"Application submitted as {request.role}", extra={"email": payload.email})
        return notification

    async def list_pending(
        self, role: str = "all", search: Optional[str] = None
    ) -> List[ApplicationOut]:
        """Applications newest first, filtered by role and name/email search."""
        if role not in ROLE_FILTERS:
            raise ValidationError(f"Unknown role filter '{role}'")

        rows = await self.admin_repo.list_recent(
            notification_type=APPLICATION_SUBMISSION, search=search
        )
        applications = []
        for row in rows:
            payload = decode_notification_payload(row.notification_type, row.message)
            if role != "all" and payload.role != role:
                continue
            applications.append(
                ApplicationOut(notification=AdminNotificationOut.model_validate(row), payload=payload)
            )
        return applications

    async def review(self, notification_id: UUID, decision: ReviewDecision) -> ApplicationOut:
        """Approve or reject an application, then mark it read.

        Approving an entrepreneur application from a registered user grants
        the ``entrepreneur`` role; granting twice is harmless.
        """
        decision = ReviewDecision(decision)
        async with self.transaction():
            row = await self.admin_repo.get_by_id(notification_id)
            if row is None or row.notification_type != APPLICATION_SUBMISSION:
                raise NotFoundError(f"Application {notification_id} not found")

            payload = decode_notification_payload(row.notification_type, row.message)
            if (
                decision == ReviewDecision.APPROVE
                and payload.role == AppRole.ENTREPRENEUR.value
                and row.user_id != ANONYMOUS_USER_ID
            ):
                granted = await self.role_repo.grant_role(row.user_id, AppRole.ENTREPRENEUR.value)
                self.logger.info(
                    f"Entrepreneur role for {row.user_id}: {'granted' if granted else 'already held'}"
                )

            row = await self.admin_repo.update_instance(row, is_read=True)

        return ApplicationOut(notification=AdminNotificationOut.model_validate(row), payload=payload)


class IdeaApplicationReviewService(BaseService):
    """The idea creator (or an admin) accepts or rejects co-builder applications."""

    def __init__(self, session: AsyncSession):
        super().__init__(session)
        self.application_repo = StartupApplicationRepository(session)
        self.idea_repo = StartupIdeaRepository(session)
        self.notifications = NotificationService(session)

    async def decide(
        self, reviewer: CurrentUser, application_id: UUID, status: str
    ) -> StartupApplication:
        """
        Raises:
            PermissionDeniedError: The reviewer neither created the idea nor is an admin
            InvalidTransitionError: The application was already decided
        """
        if status not in (ApplicationStatus.ACCEPTED.value, ApplicationStatus.REJECTED.value):
            raise ValidationError(f"Invalid application status '{status}'")

        async with self.transaction():
            application = await self.application_repo.get_by_id(application_id)
            if application is None:
                raise NotFoundError(f"Application {application_id} not found")
            idea = await self.idea_repo.get_by_id(application.startup_id)
            if idea is None:
                raise NotFoundError(f"Startup idea {application.startup_id} not found")
            if idea.creator_id != reviewer.id and not reviewer.is_admin:
                raise PermissionDeniedError("Only the idea creator can decide on applications")
            if application.status != ApplicationStatus.PENDING.value:
                raise InvalidTransitionError(
                    f"Application is already {application.status}",
                    current=application.status,
                    requested=status,
                )

            application = await self.application_repo.update_instance(application, status=status)
            accepted = status == ApplicationStatus.ACCEPTED.value
            await self.notifications.notify_user(
                application.applicant_id,
                f"application_{status}",
                "Application Accepted! 🎉" if accepted else "Application Update",
                (
                    f'Your application to join "{idea.title}" has been accepted! The initiator will reach out to you.'
                    if accepted
                    else f'Your application to join "{idea.title}" was not accepted at this time.'
                ),
                link="/opportunities",
            )

        self.logger.info(f"Application {application_id} {status} by {reviewer.id}")
        return application
