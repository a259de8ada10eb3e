"""Unit tests for application payload decoding and application reviews."""

import json
from datetime import datetime, timezone
from types import SimpleNamespace
from unittest.mock import AsyncMock, Mock
from uuid import uuid4

import pytest

from b4_platform.core.constants import ANONYMOUS_USER_ID
from b4_platform.core.exceptions import (
    InvalidTransitionError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from b4_platform.schemas.notifications import (
    ApplicationSubmissionPayload,
    ApplicationSubmissionRequest,
    TextPayload,
    decode_notification_payload,
)
from b4_platform.services.review.application_review_service import (
    ApplicationReviewService,
    IdeaApplicationReviewService,
)


async def _apply(instance, **changes):
    for key, value in changes.items():
        setattr(instance, key, value)
    return instance


def _notification(message, user_id="user-1", notification_type="application_submission"):
    return SimpleNamespace(
        id=uuid4(),
        user_id=user_id,
        notification_type=notification_type,
        user_name="Noa Cohen",
        user_email="noa@example.com",
        nr_description=None,
        step_name="entrepreneur",
        message=message,
        is_read=False,
        created_at=datetime(2026, 3, 1, tzinfo=timezone.utc),
    )


class TestDecodeNotificationPayload:

    def test_application_submission(self):
        message = json.dumps({
            "role": "cobuilder",
            "firstName": "Noa",
            "lastName": "Cohen",
            "email": "noa@example.com",
            "yearsOfExperience": 7,
        })

        payload = decode_notification_payload("application_submission", message)

        assert isinstance(payload, ApplicationSubmissionPayload)
        assert payload.role == "cobuilder"
        assert payload.full_name == "Noa Cohen"
        assert payload.years_of_experience == 7

    def test_malformed_json_decodes_to_empty_payload(self):
        payload = decode_notification_payload("application_submission", "{not json")

        assert payload == ApplicationSubmissionPayload()
        assert payload.full_name == ""

    def test_json_array_decodes_to_empty_payload(self):
        assert decode_notification_payload("application_submission", "[1, 2]") == ApplicationSubmissionPayload()

    def test_other_types_are_text(self):
        payload = decode_notification_payload("user_stuck", "Needs guidance")

        assert payload == TextPayload(text="Needs guidance")
        assert decode_notification_payload("user_stuck", None).text == ""

    def test_request_encodes_camel_case(self):
        request = ApplicationSubmissionRequest(
            role="entrepreneur",
            firstName="Noa",
            lastName="Cohen",
            email="noa@example.com",
            startupName="Brewbot",
        )

        encoded = json.loads(request.to_payload().encode())

        assert encoded == {
            "role": "entrepreneur",
            "firstName": "Noa",
            "lastName": "Cohen",
            "email": "noa@example.com",
            "startupName": "Brewbot",
        }


class TestApplicationReviewService:

    @pytest.fixture
    def service(self, mock_session):
        service = ApplicationReviewService(mock_session)
        service.admin_repo = Mock(
            list_recent=AsyncMock(return_value=[]),
            get_by_id=AsyncMock(),
            update_instance=AsyncMock(side_effect=_apply),
        )
        service.role_repo = Mock(grant_role=AsyncMock(return_value=True))
        service.notifications = Mock(notify_admins=AsyncMock(return_value=Mock()))
        return service

    @pytest.mark.asyncio
    async def test_anonymous_submission_uses_placeholder_id(self, service):
        request = ApplicationSubmissionRequest(
            role="partner", firstName="Dan", lastName="Ross", email="dan@example.com",
        )

        await service.submit_application(request)

        kwargs = service.notifications.notify_admins.await_args.kwargs
        assert kwargs["user_id"] == ANONYMOUS_USER_ID
        assert kwargs["notification_type"] == "application_submission"
        assert kwargs["user_name"] == "Dan Ross"
        assert json.loads(kwargs["message"])["role"] == "partner"

    @pytest.mark.asyncio
    async def test_list_filters_by_role(self, service):
        service.admin_repo.list_recent.return_value = [
            _notification(json.dumps({"role": "entrepreneur", "firstName": "Noa"})),
            _notification(json.dumps({"role": "cobuilder", "firstName": "Eli"})),
            _notification("corrupted"),
        ]

        everything = await service.list_pending()
        cobuilders = await service.list_pending(role="cobuilder")

        assert len(everything) == 3
        assert [a.payload.first_name for a in cobuilders] == ["Eli"]

    @pytest.mark.asyncio
    async def test_unknown_role_filter(self, service):
        with pytest.raises(ValidationError):
            await service.list_pending(role="investor")

    @pytest.mark.asyncio
    async def test_approving_entrepreneur_grants_role(self, service):
        row = _notification(json.dumps({"role": "entrepreneur"}))
        service.admin_repo.get_by_id.return_value = row

        result = await service.review(row.id, "approve")

        service.role_repo.grant_role.assert_awaited_once_with("user-1", "entrepreneur")
        assert result.notification.is_read is True

    @pytest.mark.asyncio
    async def test_anonymous_entrepreneur_gets_no_role(self, service):
        row = _notification(json.dumps({"role": "entrepreneur"}), user_id=ANONYMOUS_USER_ID)
        service.admin_repo.get_by_id.return_value = row

        await service.review(row.id, "approve")

        service.role_repo.grant_role.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_rejecting_only_marks_read(self, service):
        row = _notification(json.dumps({"role": "entrepreneur"}))
        service.admin_repo.get_by_id.return_value = row

        result = await service.review(row.id, "reject")

        service.role_repo.grant_role.assert_not_awaited()
        assert result.notification.is_read is True

    @pytest.mark.asyncio
    async def test_other_notification_types_are_not_applications(self, service):
        service.admin_repo.get_by_id.return_value = _notification("x", notification_type="user_stuck")

        with pytest.raises(NotFoundError):
            await service.review(uuid4(), "approve")


class TestIdeaApplicationReviewService:

    @pytest.fixture
    def application(self):
        return SimpleNamespace(
            id=uuid4(), startup_id=uuid4(), applicant_id="applicant-1", status="pending"
        )

    @pytest.fixture
    def service(self, mock_session, application, current_user):
        service = IdeaApplicationReviewService(mock_session)
        service.application_repo = Mock(
            get_by_id=AsyncMock(return_value=application),
            update_instance=AsyncMock(side_effect=_apply),
        )
        service.idea_repo = Mock(get_by_id=AsyncMock(return_value=SimpleNamespace(
            id=application.startup_id, creator_id=current_user.id, title="Brewbot",
        )))
        service.notifications = Mock(notify_user=AsyncMock())
        return service

    @pytest.mark.asyncio
    async def test_creator_accepts(self, service, application, current_user):
        result = await service.decide(current_user, application.id, "accepted")

        assert result.status == "accepted"
        args = service.notifications.notify_user.await_args.args
        assert args[0] == "applicant-1"
        assert args[1] == "application_accepted"
        assert "Brewbot" in args[3]

    @pytest.mark.asyncio
    async def test_stranger_cannot_decide(self, service, application, current_user):
        current_user.id = "stranger"

        with pytest.raises(PermissionDeniedError):
            await service.decide(current_user, application.id, "accepted")

    @pytest.mark.asyncio
    async def test_admin_can_decide(self, service, application, admin_user):
        result = await service.decide(admin_user, application.id, "rejected")

        assert result.status == "rejected"

    @pytest.mark.asyncio
    async def test_already_decided(self, service, application, current_user):
        application.status = "accepted"

        with pytest.raises(InvalidTransitionError):
            await service.decide(current_user, application.id, "rejected")

    @pytest.mark.asyncio
    async def test_invalid_status(self, service, application, current_user):
        with pytest.raises(ValidationError):
            await service.decide(current_user, application.id, "pending")
