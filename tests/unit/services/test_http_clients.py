"""Unit tests for the Resend, Supabase Storage and Supabase Auth admin clients."""

from unittest.mock import AsyncMock, patch

import httpx
import pytest

from b4_platform.core.exceptions import (
    APIClientError,
    APITimeoutError,
    AppError,
    ConfigurationError,
)
from b4_platform.services.email_service import (
    ACCOUNT_DELETION_CODE,
    OPPORTUNITY_APPROVED,
    EmailService,
    render_email,
)
from b4_platform.services.storage_service import StorageService
from b4_platform.services.supabase_admin import SupabaseAdminClient


class TestRenderEmail:

    def test_opportunity_approved(self):
        subject, html = render_email(OPPORTUNITY_APPROVED, "Ava", {"idea_title": "Brewbot"})

        assert "Approved" in subject
        assert "Brewbot" in html
        assert "Congratulations, Ava!" in html

    def test_values_are_escaped(self):
        _, html = render_email(OPPORTUNITY_APPROVED, "<b>Ava</b>", {"idea_title": "<script>"})

        assert "<script>" not in html
        assert "&lt;b&gt;Ava&lt;/b&gt;" in html

    def test_deletion_code(self):
        subject, html = render_email(ACCOUNT_DELETION_CODE, "Ava", {"code": "123456", "ttl_minutes": 15})

        assert subject == "Account Deletion Confirmation Code"
        assert "123456" in html
        assert "15 minutes" in html

    def test_unknown_type_falls_back(self):
        assert render_email("mystery", "Ava")[0] == "B4 Platform Update"


class TestEmailService:

    @pytest.fixture
    def service(self):
        service = EmailService()
        service.api_key = "re_test"
        return service

    @pytest.mark.asyncio
    async def test_not_configured(self):
        service = EmailService()
        service.api_key = ""

        with pytest.raises(ConfigurationError):
            await service.send("ava@example.com", "Hi", "<p>Hi</p>")

    @pytest.mark.asyncio
    async def test_send(self, service):
        post = AsyncMock(return_value=httpx.Response(200, json={"id": "email-1"}))
        with patch("httpx.AsyncClient.post", new=post):
            result = await service.send("ava@example.com", "Hi", "<p>Hi</p>")

        assert result == {"id": "email-1"}
        kwargs = post.await_args.kwargs
        assert kwargs["headers"] == {"Authorization": "Bearer re_test"}
        assert kwargs["json"]["to"] == ["ava@example.com"]

    @pytest.mark.asyncio
    async def test_rejected_by_provider(self, service):
        post = AsyncMock(return_value=httpx.Response(422, text="invalid recipient"))
        with patch("httpx.AsyncClient.post", new=post):
            with pytest.raises(APIClientError, match="invalid recipient"):
                await service.send("not-an-email", "Hi", "<p>Hi</p>")

    @pytest.mark.asyncio
    async def test_timeout(self, service):
        post = AsyncMock(side_effect=httpx.ReadTimeout("slow"))
        with patch("httpx.AsyncClient.post", new=post):
            with pytest.raises(APITimeoutError):
                await service.send("ava@example.com", "Hi", "<p>Hi</p>")


class TestStorageService:

    @pytest.mark.asyncio
    async def test_upload_with_upsert(self):
        post = AsyncMock(return_value=httpx.Response(200, json={"Key": "journey-documents/a/b.pdf"}))
        with patch("httpx.AsyncClient.post", new=post):
            await StorageService().upload_bytes("a/b.pdf", b"%PDF", "application/pdf", upsert=True)

        url = post.await_args.args[0]
        headers = post.await_args.kwargs["headers"]
        assert url.endswith("/storage/v1/object/journey-documents/a/b.pdf")
        assert headers["x-upsert"] == "true"
        assert headers["Content-Type"] == "application/pdf"

    @pytest.mark.asyncio
    async def test_upload_failure(self):
        post = AsyncMock(return_value=httpx.Response(400, text="bucket not found"))
        with patch("httpx.AsyncClient.post", new=post):
            with pytest.raises(AppError):
                await StorageService().upload_bytes("a/b.pdf", b"%PDF")

    @pytest.mark.asyncio
    async def test_signed_url_is_made_absolute(self):
        post = AsyncMock(return_value=httpx.Response(
            200, json={"signedURL": "/object/sign/journey-documents/a/b.pdf?token=t"}
        ))
        with patch("httpx.AsyncClient.post", new=post):
            url = await StorageService().get_signed_url("a/b.pdf", expires_in=60)

        assert url == (
            "https://project.supabase.co/storage/v1/object/sign/journey-documents/a/b.pdf?token=t"
        )
        assert post.await_args.kwargs["json"] == {"expiresIn": 60}

    @pytest.mark.asyncio
    async def test_signed_url_missing(self):
        post = AsyncMock(return_value=httpx.Response(200, json={}))
        with patch("httpx.AsyncClient.post", new=post):
            with pytest.raises(AppError):
                await StorageService().get_signed_url("a/b.pdf")


class TestSupabaseAdminClient:

    @pytest.mark.asyncio
    async def test_contact_uses_full_name(self):
        get = AsyncMock(return_value=httpx.Response(200, json={
            "id": "user-1",
            "email": "ava@example.com",
            "user_metadata": {"full_name": "Ava Stone"},
        }))
        with patch("httpx.AsyncClient.get", new=get):
            contact = await SupabaseAdminClient().get_user_contact("user-1")

        assert contact == {"email": "ava@example.com", "name": "Ava Stone"}
        assert get.await_args.args[0].endswith("/auth/v1/admin/users/user-1")

    @pytest.mark.asyncio
    async def test_unknown_user_has_no_contact(self):
        get = AsyncMock(return_value=httpx.Response(404, json={"msg": "User not found"}))
        with patch("httpx.AsyncClient.get", new=get):
            assert await SupabaseAdminClient().get_user_contact("ghost") is None

    @pytest.mark.asyncio
    async def test_delete_refused(self):
        delete = AsyncMock(return_value=httpx.Response(500, text="boom"))
        with patch("httpx.AsyncClient.delete", new=delete):
            with pytest.raises(APIClientError):
                await SupabaseAdminClient().delete_user("user-1")
