import base64
import email

import pytest
import requests

from utils import mailer


class FakeResponse:
    def __init__(self, status_code=200, payload=None, text=""):
        self.status_code = status_code
        self._payload = payload or {}
        self.text = text

    def json(self):
        return self._payload


@pytest.fixture
def gmail(monkeypatch):
    monkeypatch.setattr(mailer, "MAIL_BACKEND", "gmail")
    monkeypatch.setattr(mailer, "GMAIL_CLIENT_ID", "client-id")
    monkeypatch.setattr(mailer, "GMAIL_CLIENT_SECRET", "client-secret")
    monkeypatch.setattr(mailer, "GMAIL_REFRESH_TOKEN", "refresh-token")
    monkeypatch.setattr(mailer, "MAIL_FROM", "noreply@cookmate.app")

    calls = []
    responses = {
        mailer.GOOGLE_TOKEN_ENDPOINT: FakeResponse(payload={"access_token": "at-123"}),
        mailer.GMAIL_SEND_ENDPOINT: FakeResponse(payload={"id": "msg-1"}),
    }

    def fake_post(url, **kwargs):
        calls.append((url, kwargs))
        return responses[url]

    monkeypatch.setattr(mailer.requests, "post", fake_post)
    return {"calls": calls, "responses": responses}


def _decode(raw):
    padded = raw + "=" * (-len(raw) % 4)
    return email.message_from_bytes(base64.urlsafe_b64decode(padded))


def test_verification_mail_goes_through_gmail(gmail):
    mailer.send_verification_email("bob@x.com", "123456")

    (token_url, token_call), (send_url, send_call) = gmail["calls"]
    assert token_url == mailer.GOOGLE_TOKEN_ENDPOINT
    assert token_call["data"]["grant_type"] == "refresh_token"
    assert token_call["data"]["refresh_token"] == "refresh-token"
    assert send_url == mailer.GMAIL_SEND_ENDPOINT
    assert send_call["headers"]["Authorization"] == "Bearer at-123"

    message = _decode(send_call["json"]["raw"])
    assert message["To"] == "bob@x.com"
    assert "noreply@cookmate.app" in message["From"]
    assert "123456" in message.get_payload(decode=True).decode()


def test_every_provider_call_has_a_timeout(gmail):
    mailer.send_email("bob@x.com", "Hi", "Hello")
    assert [kwargs["timeout"] for _, kwargs in gmail["calls"]] == [mailer.MAIL_TIMEOUT_SECONDS] * 2


def test_raw_message_has_no_padding():
    assert not mailer.build_raw_message("bob@x.com", "Hi", "Hello").endswith("=")


def test_rejected_token_refresh_raises(gmail):
    gmail["responses"][mailer.GOOGLE_TOKEN_ENDPOINT] = FakeResponse(
        status_code=400, text='{"error": "invalid_grant"}'
    )
    with pytest.raises(mailer.MailDeliveryError):
        mailer.send_email("bob@x.com", "Hi", "Hello")
    assert len(gmail["calls"]) == 1


def test_rejected_send_raises(gmail):
    gmail["responses"][mailer.GMAIL_SEND_ENDPOINT] = FakeResponse(status_code=500, text="boom")
    with pytest.raises(mailer.MailDeliveryError):
        mailer.send_email("bob@x.com", "Hi", "Hello")


def test_unreachable_provider_raises(gmail, monkeypatch):
    def down(url, **kwargs):
        raise requests.ConnectTimeout("timed out")

    monkeypatch.setattr(mailer.requests, "post", down)
    with pytest.raises(mailer.MailDeliveryError):
        mailer.send_email("bob@x.com", "Hi", "Hello")


def test_missing_credentials_raise_before_any_request(gmail, monkeypatch):
    monkeypatch.setattr(mailer, "GMAIL_REFRESH_TOKEN", None)
    with pytest.raises(mailer.MailDeliveryError):
        mailer.send_email("bob@x.com", "Hi", "Hello")
    assert gmail["calls"] == []


def test_console_backend_only_logs(monkeypatch, caplog):
    monkeypatch.setattr(mailer, "MAIL_BACKEND", "console")
    monkeypatch.setattr(mailer.requests, "post", lambda *a, **k: pytest.fail("network used"))

    with caplog.at_level("INFO", logger="utils.mailer"):
        mailer.send_verification_email("bob@x.com", "654321")
    assert "654321" in caplog.text


def test_consent_url_asks_for_offline_send_scope(monkeypatch):
    monkeypatch.setattr(mailer, "GMAIL_CLIENT_ID", "client-id")
    url = mailer.build_consent_url()
    assert url.startswith(mailer.GOOGLE_AUTH_ENDPOINT)
    assert "access_type=offline" in url
    assert "client_id=client-id" in url


def test_mask_hides_local_part():
    assert mailer._mask("bob@x.com") == "b***@x.com"
