"""Unit tests for DashboardService and its aggregate helpers."""

from types import SimpleNamespace
from unittest.mock import AsyncMock, Mock

import pytest
from sqlalchemy.dialects import postgresql

from b4_platform.repositories.startup_idea_repository import EntrepreneurJourneyResponseRepository
from b4_platform.services.dashboard_service import (
    JOURNEY_RESPONSE_FIELDS,
    DashboardService,
    rate,
)


class TestRate:

    def test_rounds_half_up(self):
        assert rate(3, 4) == 75
        assert rate(1, 8) == 13
        assert rate(1, 3) == 33
        assert rate(2, 3) == 67

    def test_empty_total_is_zero(self):
        assert rate(0, 0) == 0


class TestJourneyResponseCompletionCounts:

    @pytest.mark.asyncio
    async def test_counts_run_in_one_query(self, mock_session):
        mock_session.execute.return_value = Mock(**{"one.return_value": (4, 9)})
        repository = EntrepreneurJourneyResponseRepository(mock_session)

        completed, in_progress = await repository.count_by_completion(JOURNEY_RESPONSE_FIELDS)

        assert (completed, in_progress) == (4, 9)
        mock_session.execute.assert_awaited_once()
        statement = mock_session.execute.await_args.args[0]
        sql = str(statement.compile(dialect=postgresql.dialect()))
        assert "FROM entrepreneur_journey_responses" in sql
        assert sql.count("FILTER (WHERE") == 2
        for field in JOURNEY_RESPONSE_FIELDS:
            assert f"coalesce(entrepreneur_journey_responses.{field}" in sql
        assert "LIMIT" not in sql


class TestDashboardService:

    @pytest.fixture
    def service(self, mock_session):
        return DashboardService(mock_session)

    @pytest.mark.asyncio
    async def test_admin_analytics(self, service):
        service.profile_repo = Mock(count=AsyncMock(return_value=10))
        service.state_repo = Mock(count=AsyncMock(side_effect=[6, 2]))
        service.idea_repo = Mock(count=AsyncMock(side_effect=[8, 3, 2]))
        service.application_repo = Mock(count=AsyncMock(side_effect=[6, 1, 2]))
        service.journey_response_repo = Mock(
            count=AsyncMock(return_value=3),
            count_by_completion=AsyncMock(return_value=(1, 1)),
        )

        analytics = await service.get_admin_analytics()

        assert analytics.total_users == 10
        assert analytics.approved_users == 6
        assert analytics.pending_approvals == 2
        assert analytics.total_ideas == 8
        assert analytics.approved_ideas == 3
        assert analytics.pending_ideas == 2
        assert analytics.total_applications == 6
        assert analytics.pending_applications == 1
        assert analytics.accepted_applications == 2
        assert analytics.total_journey_responses == 3
        assert analytics.completed_journeys == 1
        assert analytics.in_progress_journeys == 1
        assert analytics.journey_completion_rate == 33
        assert analytics.idea_approval_rate == 38
        assert analytics.application_acceptance_rate == 33

    @pytest.mark.asyncio
    async def test_admin_analytics_on_empty_platform(self, service):
        service.profile_repo = Mock(count=AsyncMock(return_value=0))
        service.state_repo = Mock(count=AsyncMock(return_value=0))
        service.idea_repo = Mock(count=AsyncMock(return_value=0))
        service.application_repo = Mock(count=AsyncMock(return_value=0))
        service.journey_response_repo = Mock(
            count=AsyncMock(return_value=0),
            count_by_completion=AsyncMock(return_value=(0, 0)),
        )

        analytics = await service.get_admin_analytics()

        assert analytics.journey_completion_rate == 0
        assert analytics.idea_approval_rate == 0
        assert analytics.application_acceptance_rate == 0

    @pytest.mark.asyncio
    async def test_journey_totals_are_not_capped_by_a_page(self, service):
        service.profile_repo = Mock(count=AsyncMock(return_value=0))
        service.state_repo = Mock(count=AsyncMock(return_value=0))
        service.idea_repo = Mock(count=AsyncMock(return_value=0))
        service.application_repo = Mock(count=AsyncMock(return_value=0))
        service.journey_response_repo = Mock(
            count=AsyncMock(return_value=12_500),
            count_by_completion=AsyncMock(return_value=(10_000, 2_000)),
        )

        analytics = await service.get_admin_analytics()

        assert analytics.total_journey_responses == 12_500
        assert analytics.completed_journeys == 10_000
        assert analytics.in_progress_journeys == 2_000
        assert analytics.journey_completion_rate == 80
        service.journey_response_repo.count_by_completion.assert_awaited_once_with(
            JOURNEY_RESPONSE_FIELDS
        )

    @pytest.mark.asyncio
    async def test_user_dashboard_for_new_user(self, service):
        service.state_repo = Mock(get_by_user=AsyncMock(return_value=None))
        service.certification_repo = Mock(list_for_user=AsyncMock(return_value=[
            SimpleNamespace(certification_type="skill_ptc", display_label="Skill PTC", verified=True),
        ]))
        service.learning_journey_repo = Mock(list_for_user=AsyncMock(return_value=[]))
        service.idea_repo = Mock(list_by_creator=AsyncMock(return_value=[]))
        service.user_notification_repo = Mock(count_unread=AsyncMock(return_value=4))

        dashboard = await service.get_user_dashboard("user-1")

        assert dashboard.onboarding is None
        assert dashboard.certifications[0].certification_type == "skill_ptc"
        assert dashboard.certifications[0].verified is True
        assert dashboard.journeys == []
        assert dashboard.ideas == []
        assert dashboard.unread_notifications == 4
