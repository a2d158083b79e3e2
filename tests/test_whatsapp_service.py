import json

import httpx

from services.whatsapp_service import FonnteWhatsAppClient, registration_otp_message

PHONE = "6285157300793"


def client_for(handler, token="fonnte-token"):
    return FonnteWhatsAppClient(token=token, transport=httpx.MockTransport(handler))


async def test_successful_send_posts_to_fonnte():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["auth"] = request.headers.get("authorization")
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"status": True, "id": ["123"]})

    result = await client_for(handler).send_text(PHONE, "halo")

    assert result.ok
    assert seen["url"] == "https://api.fonnte.com/send"
    assert seen["auth"] == "fonnte-token"
    assert seen["body"] == {"target": PHONE, "message": "halo", "countryCode": "62"}


async def test_provider_rejection_is_reported():
    def handler(request):
        return httpx.Response(200, json={"status": False, "reason": "invalid token"})

    result = await client_for(handler).send_text(PHONE, "halo")
    assert not result.ok
    assert result.detail == "invalid token"


async def test_http_error_is_reported():
    result = await client_for(lambda request: httpx.Response(500, text="boom")).send_text(PHONE, "halo")
    assert not result.ok
    assert result.detail == "HTTP 500"


async def test_network_error_is_reported():
    def handler(request):
        raise httpx.ConnectTimeout("timed out", request=request)

    result = await client_for(handler).send_text(PHONE, "halo")
    assert not result.ok
    assert result.detail == "ConnectTimeout"


async def test_missing_token_does_not_call_the_api():
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(200, json={"status": True})

    result = await client_for(handler, token=None).send_text(PHONE, "halo")
    assert not result.ok
    assert calls == []


def test_registration_message_contains_code_and_ttl():
    message = registration_otp_message("482913", 5)
    assert "482913" in message
    assert "5 menit" in message
