"""User submissions reviewed by admins: trainings and Natural Role decoder answers."""

from datetime import datetime, timezone
from typing import Dict, List, Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from b4_platform.core.constants import NRDecoderStatus, TrainingReviewStatus
from b4_platform.core.exceptions import InvalidTransitionError, NotFoundError, ValidationError
from b4_platform.database.models import NRDecoderSubmission, TrainingOpportunity
from b4_platform.repositories.submission_repository import (
    NRDecoderSubmissionRepository,
    TrainingOpportunityRepository,
)
from b4_platform.schemas.auth import CurrentUser
from b4_platform.schemas.reviews import TrainingSubmission
from b4_platform.services.base_service import BaseService
from b4_platform.services.notification_service import NotificationService

NR_DECODER_QUESTIONS: Dict[str, str] = {
    "1": "When people come to you for help, what is the type of help they expect?",
    "2": "What is something you do easily that others find difficult?",
    "3": 'What are you doing when you feel "in flow"?',
    "4": "What result do you produce without even trying?",
    "5": 'Finish the sentence: "What I naturally do is: to __"',
    "6": "What is the most repeated positive feedback you hear about your work?",
    "7": "If you could only solve ONE type of problem for the world, which problem would you choose?",
}


class TrainingReviewService(BaseService):

    def __init__(self, session: AsyncSession):
        super().__init__(session)
        self.training_repo = TrainingOpportunityRepository(session)

    async def submit(self, user_id: str, data: TrainingSubmission) -> TrainingOpportunity:
        title = data.title.strip()
        description = data.description.strip()
        if not title or not description:
            raise ValidationError("Title and description are required.")

        async with self.transaction():
            return await self.training_repo.create(
                user_id=user_id,
                title=title,
                description=description,
                target_audience=data.target_audience,
                duration=data.duration,
                format=data.format,
                sector=data.sector,
                review_status=TrainingReviewStatus.PENDING.value,
            )

    async def list_split(self) -> Dict[str, List[TrainingOpportunity]]:
        """Trainings grouped into ``pending`` and ``reviewed``, newest first."""
        trainings = await self.training_repo.list_recent()
        pending = [t for t in trainings if t.review_status == TrainingReviewStatus.PENDING.value]
        reviewed = [t for t in trainings if t.review_status != TrainingReviewStatus.PENDING.value]
        return {"pending": pending, "reviewed": reviewed}

    async def review(
        self, training_id: UUID, status: str, notes: Optional[str] = None
    ) -> TrainingOpportunity:
        if status not in (TrainingReviewStatus.APPROVED.value, TrainingReviewStatus.DECLINED.value):
            raise ValidationError(f"Invalid training status '{status}'")

        async with self.transaction():
            training = await self.training_repo.get_by_id(training_id)
            if training is None:
                raise NotFoundError(f"Training {training_id} not found")
            training = await self.training_repo.update_instance(
                training,
                review_status=status,
                admin_notes=(notes or "").strip() or None,
                reviewed_at=datetime.now(timezone.utc),
            )
        self.logger.info(f"Training {training_id} {status}")
        return training


class NRDecoderReviewService(BaseService):
    """Seven-question Natural Role decoder: users submit, admins mark reviewed."""

    def __init__(self, session: AsyncSession):
        super().__init__(session)
        self.submission_repo = NRDecoderSubmissionRepository(session)
        self.notifications = NotificationService(session)

    async def submit(self, user_id: str, answers: Dict[str, str]) -> NRDecoderSubmission:
        """
        Raises:
            ValidationError: If any of the seven questions is unanswered
        """
        cleaned = {key: (answers.get(key) or "").strip() for key in NR_DECODER_QUESTIONS}
        missing = [key for key, value in cleaned.items() if not value]
        if missing:
            raise ValidationError(f"Please answer every question (missing: {', '.join(missing)})")

        async with self.transaction():
            return await self.submission_repo.create(
                user_id=user_id, answers=cleaned, status=NRDecoderStatus.PENDING.value
            )

    async def list_for_user(self, user_id: str) -> List[NRDecoderSubmission]:
        return await self.submission_repo.list_for_user(user_id)

    async def list_pending(self) -> List[NRDecoderSubmission]:
        return await self.submission_repo.list_recent()

    async def review(
        self,
        admin: CurrentUser,
        submission_id: UUID,
        notes: Optional[str] = None,
        result_pdf_url: Optional[str] = None,
    ) -> NRDecoderSubmission:
        async with self.transaction():
            submission = await self.submission_repo.get_by_id(submission_id)
            if submission is None:
                raise NotFoundError(f"NR decoder submission {submission_id} not found")
            if submission.status != NRDecoderStatus.PENDING.value:
                raise InvalidTransitionError(
                    "Submission was already reviewed", current=submission.status
                )

            submission = await self.submission_repo.update_instance(
                submission,
                status=NRDecoderStatus.REVIEWED.value,
                admin_notes=(notes or "").strip() or None,
                reviewed_by=admin.id,
                reviewed_at=datetime.now(timezone.utc),
                result_pdf_url=result_pdf_url,
            )
            await self.notifications.notify_user(
                submission.user_id,
                "nr_decoder_reviewed",
                "Natural Role Decoder Reviewed",
                "Your Natural Role Decoder submission has been reviewed. "
                "An admin will contact you with your personalized blueprint.",
                link="/messages",
            )
        return submission
