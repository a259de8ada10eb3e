"""SQLAlchemy models for all database tables."""

import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    Boolean,
    ForeignKey,
    Integer,
    String,
    Text,
    TIMESTAMP,
    UniqueConstraint,
)
from sqlalchemy.dialects.postgresql import ARRAY, JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from b4_platform.core.database import Base


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Profile(Base):
    """Public profile of a Supabase-authenticated user."""

    __tablename__ = "profiles"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    user_id: Mapped[str] = mapped_column(String, unique=True, nullable=False)
    full_name: Mapped[str | None] = mapped_column(String, nullable=True)
    avatar_url: Mapped[str | None] = mapped_column(String, nullable=True)
    bio: Mapped[str | None] = mapped_column(Text, nullable=True)
    primary_skills: Mapped[str | None] = mapped_column(Text, nullable=True)
    years_of_experience: Mapped[int | None] = mapped_column(Integer, nullable=True)
    startup_name: Mapped[str | None] = mapped_column(String, nullable=True)
    preferred_sector: Mapped[str | None] = mapped_column(String, nullable=True)
    organization_name: Mapped[str | None] = mapped_column(String, nullable=True)
    partnership_interest: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_deleted: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    deleted_at: Mapped[datetime | None] = mapped_column(TIMESTAMP(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default="NOW()"
    )
    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default="NOW()", onupdate=utc_now
    )


class OnboardingState(Base):
    """Per-user wizard position and approval status."""

    __tablename__ = "onboarding_state"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    user_id: Mapped[str] = mapped_column(String, unique=True, nullable=False)
    primary_role: Mapped[str | None] = mapped_column(
        String, nullable=True, comment="entrepreneur or cobuilder"
    )
    potential_role: Mapped[str | None] = mapped_column(String, nullable=True)
    current_step: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    entrepreneur_step: Mapped[int | None] = mapped_column(Integer, nullable=True)
    onboarding_completed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    journey_status: Mapped[str] = mapped_column(String, nullable=False, default="in_progress")
    user_status: Mapped[str | None] = mapped_column(String, nullable=True)
    boost_type: Mapped[str | None] = mapped_column(String, nullable=True)
    scale_type: Mapped[str | None] = mapped_column(String, nullable=True)
    consultant_access: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    retry_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default="NOW()"
    )
    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default="NOW()", onupdate=utc_now
    )


class NaturalRole(Base):
    """Self-declared Natural Role and its four readiness checks."""

    __tablename__ = "natural_roles"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    user_id: Mapped[str] = mapped_column(String, unique=True, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(String, nullable=False, default="pending")

    promise_check: Mapped[bool | None] = mapped_column(Boolean, nullable=True)

    practice_check: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    practice_entities: Mapped[str | None] = mapped_column(Text, nullable=True)
    practice_case_studies: Mapped[int | None] = mapped_column(Integer, nullable=True)
    practice_needs_help: Mapped[bool | None] = mapped_column(Boolean, nullable=True)

    training_check: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    training_count: Mapped[int | None] = mapped_column(Integer, nullable=True)
    training_contexts: Mapped[str | None] = mapped_column(Text, nullable=True)
    training_needs_help: Mapped[bool | None] = mapped_column(Boolean, nullable=True)

    consulting_check: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    consulting_with_whom: Mapped[str | None] = mapped_column(Text, nullable=True)
    consulting_case_studies: Mapped[str | None] = mapped_column(Text, nullable=True)
    consulting_needs_help: Mapped[bool | None] = mapped_column(Boolean, nullable=True)

    is_ready: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    wants_to_scale: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default="NOW()"
    )
    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default="NOW()", onupdate=utc_now
    )


class EntrepreneurialOnboarding(Base):
    """Entrepreneurial experience across five categories."""

    __tablename__ = "entrepreneurial_onboarding"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    user_id: Mapped[str] = mapped_column(String, unique=True, nullable=False)

    # Initiatives & projects
    has_developed_project: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    project_description: Mapped[str | None] = mapped_column(Text, nullable=True)
    project_count: Mapped[int | None] = mapped_column(Integer, nullable=True)
    project_role: Mapped[str | None] = mapped_column(String, nullable=True)
    project_outcome: Mapped[str | None] = mapped_column(Text, nullable=True)
    project_needs_help: Mapped[bool | None] = mapped_column(Boolean, nullable=True)

    # Products & prototypes
    has_built_product: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    product_description: Mapped[str | None] = mapped_column(Text, nullable=True)
    product_count: Mapped[int | None] = mapped_column(Integer, nullable=True)
    product_stage: Mapped[str | None] = mapped_column(String, nullable=True)
    product_users_count: Mapped[str | None] = mapped_column(String, nullable=True)
    product_needs_help: Mapped[bool | None] = mapped_column(Boolean, nullable=True)

    # Team leadership
    has_led_team: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    team_description: Mapped[str | None] = mapped_column(Text, nullable=True)
    team_size: Mapped[int | None] = mapped_column(Integer, nullable=True)
    team_role: Mapped[str | None] = mapped_column(String, nullable=True)
    team_needs_help: Mapped[bool | None] = mapped_column(Boolean, nullable=True)

    # Business & commercial
    has_run_business: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    business_description: Mapped[str | None] = mapped_column(Text, nullable=True)
    business_count: Mapped[int | None] = mapped_column(Integer, nullable=True)
    business_revenue: Mapped[str | None] = mapped_column(String, nullable=True)
    business_duration: Mapped[str | None] = mapped_column(String, nullable=True)
    business_needs_help: Mapped[bool | None] = mapped_column(Boolean, nullable=True)

    # Equity & board contributions
    has_served_on_board: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    board_description: Mapped[str | None] = mapped_column(Text, nullable=True)
    board_count: Mapped[int | None] = mapped_column(Integer, nullable=True)
    board_role_type: Mapped[str | None] = mapped_column(String, nullable=True)
    board_equity_details: Mapped[str | None] = mapped_column(Text, nullable=True)
    board_needs_help: Mapped[bool | None] = mapped_column(Boolean, nullable=True)

    is_completed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default="NOW()"
    )
    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default="NOW()", onupdate=utc_now
    )


class UserRole(Base):
    """Granted application role (entrepreneur, cobuilder, box_manager, admin)."""

    __tablename__ = "user_roles"
    __table_args__ = (UniqueConstraint("user_id", "role", name="uq_user_roles_user_role"),)

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    user_id: Mapped[str] = mapped_column(String, nullable=False, index=True)
    role: Mapped[str] = mapped_column(String, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default="NOW()"
    )


class LearningJourney(Base):
    """A user's run through one of the certification journeys."""

    __tablename__ = "learning_journeys"
    __table_args__ = (
        UniqueConstraint("user_id", "journey_type", name="uq_learning_journeys_user_type"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    user_id: Mapped[str] = mapped_column(String, nullable=False, index=True)
    journey_type: Mapped[str] = mapped_column(
        String, nullable=False, comment="skill_ptc, idea_ptc, scaling_path"
    )
    current_phase: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    status: Mapped[str] = mapped_column(String, nullable=False, default="not_started")
    started_at: Mapped[datetime | None] = mapped_column(TIMESTAMP(timezone=True), nullable=True)
    completed_at: Mapped[datetime | None] = mapped_column(TIMESTAMP(timezone=True), nullable=True)
    approved_at: Mapped[datetime | None] = mapped_column(TIMESTAMP(timezone=True), nullable=True)
    approved_by: Mapped[str | None] = mapped_column(String, nullable=True)
    admin_notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default="NOW()"
    )
    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default="NOW()", onupdate=utc_now
    )

    phase_responses: Mapped[list["JourneyPhaseResponse"]] = relationship(
        "JourneyPhaseResponse", back_populates="journey", cascade="all, delete-orphan"
    )


class JourneyPhaseResponse(Base):
    """Answers for one phase of a learning journey."""

    __tablename__ = "journey_phase_responses"
    __table_args__ = (
        UniqueConstraint("journey_id", "phase_number", name="uq_journey_phase_responses_phase"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    journey_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("learning_journeys.id", ondelete="CASCADE"), nullable=False
    )
    user_id: Mapped[str] = mapped_column(String, nullable=False)
    phase_number: Mapped[int] = mapped_column(Integer, nullable=False)
    phase_name: Mapped[str] = mapped_column(String, nullable=False)
    responses: Mapped[dict] = mapped_column(JSONB, nullable=False, default=dict)
    completed_tasks: Mapped[list] = mapped_column(JSONB, nullable=False, default=list)
    uploaded_files: Mapped[list] = mapped_column(JSONB, nullable=False, default=list)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_completed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    completed_at: Mapped[datetime | None] = mapped_column(TIMESTAMP(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default="NOW()"
    )
    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default="NOW()", onupdate=utc_now
    )

    journey: Mapped["LearningJourney"] = relationship(
        "LearningJourney", back_populates="phase_responses"
    )


class UserCertification(Base):
    """Certification earned by an approved journey."""

    __tablename__ = "user_certifications"
    __table_args__ = (
        UniqueConstraint("user_id", "certification_type", name="uq_user_certifications_type"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    user_id: Mapped[str] = mapped_column(String, nullable=False, index=True)
    certification_type: Mapped[str] = mapped_column(String, nullable=False)
    display_label: Mapped[str] = mapped_column(String, nullable=False)
    verified: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    earned_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default="NOW()"
    )
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default="NOW()"
    )


class StartupIdea(Base):
    """Startup pitch proposed by an Initiator."""

    __tablename__ = "startup_ideas"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    creator_id: Mapped[str] = mapped_column(String, nullable=False, index=True)
    title: Mapped[str] = mapped_column(String, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    sector: Mapped[str | None] = mapped_column(String, nullable=True)
    roles_needed: Mapped[list[str] | None] = mapped_column(ARRAY(String), nullable=True)
    is_looking_for_cobuilders: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    status: Mapped[str] = mapped_column(String, nullable=False, default="active")
    review_status: Mapped[str] = mapped_column(
        String, nullable=False, default="pending",
        comment="pending, under_review, approved, rejected"
    )
    reviewed_at: Mapped[datetime | None] = mapped_column(TIMESTAMP(timezone=True), nullable=True)
    admin_notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    current_episode: Mapped[str] = mapped_column(String, nullable=False, default="development")
    development_completed_at: Mapped[datetime | None] = mapped_column(TIMESTAMP(timezone=True), nullable=True)
    validation_completed_at: Mapped[datetime | None] = mapped_column(TIMESTAMP(timezone=True), nullable=True)
    growth_completed_at: Mapped[datetime | None] = mapped_column(TIMESTAMP(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default="NOW()"
    )
    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default="NOW()", onupdate=utc_now
    )


class IdeaJourneyProgress(Base):
    """Answers for one phase of one episode of a startup idea."""

    __tablename__ = "idea_journey_progress"
    __table_args__ = (
        UniqueConstraint(
            "startup_id", "phase_number", "episode", name="uq_idea_journey_progress_phase"
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    startup_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("startup_ideas.id", ondelete="CASCADE"), nullable=False
    )
    user_id: Mapped[str] = mapped_column(String, nullable=False)
    episode: Mapped[str] = mapped_column(
        String, nullable=False, default="development", comment="development, validation, growth"
    )
    phase_number: Mapped[int] = mapped_column(Integer, nullable=False)
    phase_name: Mapped[str] = mapped_column(String, nullable=False)
    responses: Mapped[dict] = mapped_column(JSONB, nullable=False, default=dict)
    completed_tasks: Mapped[list] = mapped_column(JSONB, nullable=False, default=list)
    is_completed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    completed_at: Mapped[datetime | None] = mapped_column(TIMESTAMP(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default="NOW()"
    )
    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default="NOW()", onupdate=utc_now
    )


class StartupApplication(Base):
    """A Co-Builder's application to join a startup idea."""

    __tablename__ = "startup_applications"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    startup_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("startup_ideas.id", ondelete="CASCADE"), nullable=False
    )
    applicant_id: Mapped[str] = mapped_column(String, nullable=False, index=True)
    role_applied: Mapped[str | None] = mapped_column(String, nullable=True)
    cover_message: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(String, nullable=False, default="pending")
    proposed_time_equity_percentage: Mapped[int | None] = mapped_column(Integer, nullable=True)
    proposed_performance_equity_percentage: Mapped[int | None] = mapped_column(Integer, nullable=True)
    proposed_performance_milestone: Mapped[str | None] = mapped_column(Text, nullable=True)
    proposed_vesting_years: Mapped[int | None] = mapped_column(Integer, nullable=True)
    proposed_cliff_years: Mapped[int | None] = mapped_column(Integer, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default="NOW()"
    )
    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default="NOW()", onupdate=utc_now
    )


class EntrepreneurJourneyResponse(Base):
    """Initiator's answers to the seven-question entrepreneur journey."""

    __tablename__ = "entrepreneur_journey_responses"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    user_id: Mapped[str] = mapped_column(String, nullable=False, index=True)
    idea_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True), ForeignKey("startup_ideas.id", ondelete="SET NULL"), nullable=True
    )
    vision: Mapped[str | None] = mapped_column(Text, nullable=True)
    problem: Mapped[str | None] = mapped_column(Text, nullable=True)
    market: Mapped[str | None] = mapped_column(Text, nullable=True)
    business_model: Mapped[str | None] = mapped_column(Text, nullable=True)
    roles_needed: Mapped[str | None] = mapped_column(Text, nullable=True)
    cobuilder_plan: Mapped[str | None] = mapped_column(Text, nullable=True)
    execution_plan: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default="NOW()"
    )
    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default="NOW()", onupdate=utc_now
    )


class AdminNotification(Base):
    """Event addressed to the admin team."""

    __tablename__ = "admin_notifications"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    user_id: Mapped[str] = mapped_column(String, nullable=False, index=True)
    notification_type: Mapped[str] = mapped_column(String, nullable=False)
    user_name: Mapped[str | None] = mapped_column(String, nullable=True)
    user_email: Mapped[str | None] = mapped_column(String, nullable=True)
    nr_description: Mapped[str | None] = mapped_column(Text, nullable=True)
    step_name: Mapped[str | None] = mapped_column(String, nullable=True)
    message: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_read: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default="NOW()"
    )


class UserNotification(Base):
    """Event addressed to a single user."""

    __tablename__ = "user_notifications"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    user_id: Mapped[str] = mapped_column(String, nullable=False, index=True)
    notification_type: Mapped[str] = mapped_column(String, nullable=False)
    title: Mapped[str] = mapped_column(String, nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    link: Mapped[str | None] = mapped_column(String, nullable=True)
    is_read: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default="NOW()"
    )


class TrainingOpportunity(Base):
    """Training offered by a user, visible once approved."""

    __tablename__ = "training_opportunities"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    user_id: Mapped[str] = mapped_column(String, nullable=False, index=True)
    title: Mapped[str] = mapped_column(String, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    target_audience: Mapped[str | None] = mapped_column(String, nullable=True)
    duration: Mapped[str | None] = mapped_column(String, nullable=True)
    format: Mapped[str | None] = mapped_column(String, nullable=True)
    sector: Mapped[str | None] = mapped_column(String, nullable=True)
    review_status: Mapped[str] = mapped_column(String, nullable=False, default="pending")
    admin_notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    reviewed_at: Mapped[datetime | None] = mapped_column(TIMESTAMP(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default="NOW()"
    )
    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default="NOW()", onupdate=utc_now
    )


class NRDecoderSubmission(Base):
    """Answers to the Natural Role decoder questionnaire."""

    __tablename__ = "nr_decoder_submissions"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    user_id: Mapped[str] = mapped_column(String, nullable=False, index=True)
    answers: Mapped[dict] = mapped_column(JSONB, nullable=False, default=dict)
    status: Mapped[str] = mapped_column(String, nullable=False, default="pending")
    admin_notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    reviewed_by: Mapped[str | None] = mapped_column(String, nullable=True)
    reviewed_at: Mapped[datetime | None] = mapped_column(TIMESTAMP(timezone=True), nullable=True)
    result_pdf_url: Mapped[str | None] = mapped_column(String, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default="NOW()"
    )
    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default="NOW()", onupdate=utc_now
    )


class AccountDeletionToken(Base):
    """Hashed one-time code confirming a permanent account deletion."""

    __tablename__ = "account_deletion_tokens"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    user_id: Mapped[str] = mapped_column(String, nullable=False, index=True)
    token_hash: Mapped[str] = mapped_column(String, nullable=False)
    expires_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), nullable=False)
    used_at: Mapped[datetime | None] = mapped_column(TIMESTAMP(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default="NOW()"
    )
