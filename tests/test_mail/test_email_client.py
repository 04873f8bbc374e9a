"""
Tests for the outbound email client.
"""

import json

import httpx

from mail.client import EmailServiceClient
from shared.models import ChatInvitation


def _client(settings, handler) -> EmailServiceClient:
    return EmailServiceClient(settings, http_client=httpx.Client(transport=httpx.MockTransport(handler)))


class TestSendShareEmail:
    """Tests for send_share_email."""

    def test_posts_to_share_function(self, settings, share_request):
        requests = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(200, json={"success": True, "status": "delivered"})

        response = _client(settings, handler).send_share_email(share_request)

        assert response.success is True
        request = requests[0]
        assert str(request.url) == "https://project.supabase.co/functions/v1/send-share-email"
        assert request.headers["Authorization"] == "Bearer anon-key"
        assert request.headers["apikey"] == "anon-key"
        body = json.loads(request.content)
        assert body["recipientEmail"] == "friend@example.com"
        assert body["contentType"] == "page"
        assert body["senderName"] == "Ada"

    def test_http_error_becomes_failed_response(self, settings, share_request):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(500, json={"success": False, "error": "Internal server error"})

        response = _client(settings, handler).send_share_email(share_request)

        assert response.success is False
        assert response.error == "Email service error: 500 - Internal server error"

    def test_non_json_error_body(self, settings, share_request):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(502, text="Bad gateway")

        response = _client(settings, handler).send_share_email(share_request)

        assert response.success is False
        assert response.error == "Email service error: 502 - Unknown error"

    def test_unconfirmed_delivery_is_not_success(self, settings, share_request):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(202, json={
                "success": False,
                "status": "logged_only",
                "error": "Email delivery unconfirmed: no provider accepted the message",
            })

        response = _client(settings, handler).send_share_email(share_request)

        assert response.success is False
        assert "unconfirmed" in response.error

    def test_transport_error(self, settings, share_request):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused")

        response = _client(settings, handler).send_share_email(share_request)

        assert response.success is False
        assert "connection refused" in response.error


class TestSendChatInvitation:
    """Tests for send_chat_invitation."""

    def test_posts_rendered_email(self, settings):
        requests = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(200, json={"success": True})

        invitation = ChatInvitation(
            recipient_email="bob@example.com",
            sender_name="Ada",
            sender_email="ada@example.com",
            chat_url="https://notel.app/chat/1",
        )

        response = _client(settings, handler).send_chat_invitation(invitation)

        assert response.success is True
        assert str(requests[0].url) == "https://api.notel.app/api/send-share-email"
        body = json.loads(requests[0].content)
        assert body["to"] == "bob@example.com"
        assert body["subject"] == "Ada wants to chat with you on Notel"
        assert "https://notel.app/chat/1" in body["html"]
        assert "https://notel.app/chat/1" in body["text"]
