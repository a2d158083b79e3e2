import re

from core.config import settings
from models.account import AccountRole, AccountStatus
from tests.conftest import make_account

PHONE = "6285157300793"


def last_code(messaging, phone=PHONE):
    return re.search(r"\*(\d{6})\*", messaging.messages_to(phone)[-1]).group(1)


async def login(client, identifier, password="rahasia123"):
    response = await client.post("/api/v1/auth/login", json={"identifier": identifier, "password": password})
    assert response.status_code == 200, response.text
    return response.json()["data"]


async def test_registration_to_dashboard(client, messaging, session_factory):
    await make_account(
        session_factory, "6281200000001", full_name="Admin Galeri", role=AccountRole.ADMIN
    )

    response = await client.post(
        "/api/v1/auth/register",
        json={"full_name": "Budi Santoso", "phone": "0851-5730-0793", "password": "rahasia123"},
    )
    assert response.status_code == 201, response.text
    assert settings.SESSION_COOKIE_NAME in response.cookies

    response = await client.get("/dashboard")
    assert response.status_code == 303
    assert response.headers["location"] == "/verify-otp"

    response = await client.post(
        "/api/v1/auth/verify-otp", json={"phone": "0851-5730-0793", "otp": last_code(messaging)}
    )
    assert response.status_code == 200, response.text
    assert response.json()["data"] == {"status": "pending_approval", "next_route": "/waiting-room"}

    response = await client.get("/dashboard")
    assert response.headers["location"] == "/waiting-room"
    assert (await client.get("/waiting-room")).json()["page"] == "waiting-room"

    # switch to the admin
    await client.post("/api/v1/auth/logout")
    assert (await login(client, "081200000001"))["next_route"] == "/dashboard"

    pending = (await client.get("/api/v1/admin/users/pending")).json()["data"]
    assert [account["phone_number"] for account in pending] == [PHONE]

    response = await client.post(f"/api/v1/admin/users/{pending[0]['id']}/approve")
    assert response.status_code == 200, response.text
    assert response.json()["data"]["status"] == "active"
    assert "Budi Santoso" in messaging.messages_to(PHONE)[-1]

    await client.post("/api/v1/auth/logout")
    data = await login(client, "Budi Santoso")
    assert data["next_route"] == "/dashboard"
    assert data["needs_approval"] is False

    response = await client.get("/dashboard")
    assert response.status_code == 200
    assert response.json()["account"]["status"] == "active"

    response = await client.get("/admin")
    assert response.status_code == 303
    assert response.headers["location"] == "/dashboard"


async def test_wrong_code_reports_attempts(client, messaging):
    await client.post(
        "/api/v1/auth/register",
        json={"full_name": "Budi Santoso", "phone": "0851-5730-0793", "password": "rahasia123"},
    )
    code = last_code(messaging)
    wrong = "000000" if code != "000000" else "111111"

    response = await client.post("/api/v1/auth/verify-otp", json={"phone": PHONE, "otp": wrong})
    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    assert body["error"] == "code_mismatch"
    assert body["detail"] == {"attempts_remaining": settings.MAX_ATTEMPTS - 1}


async def test_resend_inside_cooldown_is_429(client, messaging):
    await client.post(
        "/api/v1/auth/register",
        json={"full_name": "Budi Santoso", "phone": "0851-5730-0793", "password": "rahasia123"},
    )
    response = await client.post("/api/v1/auth/request-otp", json={"phone": PHONE})

    assert response.status_code == 429
    assert response.json()["error"] == "rate_limited"
    assert response.headers["retry-after"] == str(settings.OTP_RESEND_COOLDOWN_SECONDS)


async def test_invalid_phone_on_register(client, messaging):
    response = await client.post(
        "/api/v1/auth/register",
        json={"full_name": "Budi Santoso", "phone": "abc", "password": "rahasia123"},
    )
    assert response.status_code == 400
    assert response.json()["error"] == "invalid_phone_format"
    assert messaging.sent == []


async def test_rejected_account_is_sent_to_login_and_logged_out(client, session_factory):
    await make_account(
        session_factory, "6281200000001", full_name="Admin Galeri", role=AccountRole.ADMIN
    )
    member = await make_account(session_factory, PHONE, status=AccountStatus.PENDING_APPROVAL)

    await login(client, PHONE)
    assert (await client.get("/dashboard")).headers["location"] == "/waiting-room"
    member_cookie = client.cookies.get(settings.SESSION_COOKIE_NAME)

    client.cookies.clear()
    await login(client, "081200000001")
    response = await client.post(f"/api/v1/admin/users/{member.id}/reject")
    assert response.json()["data"]["status"] == "rejected"

    client.cookies.clear()
    member_header = {"cookie": f"{settings.SESSION_COOKIE_NAME}={member_cookie}"}
    response = await client.get("/dashboard", headers=member_header)
    assert response.status_code == 303
    assert response.headers["location"] == "/login"

    client.cookies.clear()
    response = await client.get("/api/v1/auth/session", headers=member_header)
    assert response.json()["data"]["is_authenticated"] is False


async def test_member_cannot_use_admin_api(client, session_factory):
    await make_account(session_factory, PHONE)
    await login(client, PHONE)

    response = await client.get("/api/v1/admin/users")
    assert response.status_code == 303
    assert response.headers["location"] == "/dashboard"


async def test_anonymous_is_sent_to_login(client):
    response = await client.get("/api/v1/profile")
    assert response.status_code == 303
    assert response.headers["location"] == "/login"
    assert (await client.get("/login")).json()["page"] == "login"


async def test_profile_update(client, session_factory):
    await make_account(session_factory, PHONE, full_name="Budi Santoso")
    await login(client, PHONE)

    response = await client.patch(
        "/api/v1/profile",
        json={"full_name": "Budi S.", "profile_attributes": {"kamera": "Fujifilm X-T4"}},
    )
    assert response.status_code == 200, response.text
    data = response.json()["data"]
    assert data["full_name"] == "Budi S."
    assert data["profile_attributes"] == {"kamera": "Fujifilm X-T4"}

    response = await client.patch("/api/v1/profile", json={"profile_attributes": {"kamera": None}})
    assert response.json()["data"]["profile_attributes"] == {}


async def test_password_reset_over_http(client, messaging, session_factory):
    await make_account(session_factory, PHONE)

    response = await client.post(
        "/api/v1/auth/request-otp", json={"phone": "0851-5730-0793", "purpose": "reset_password"}
    )
    assert response.status_code == 200, response.text

    response = await client.post(
        "/api/v1/auth/reset-password",
        json={"phone": PHONE, "otp": last_code(messaging), "new_password": "passwordbaru"},
    )
    assert response.status_code == 200, response.text

    failed = await client.post("/api/v1/auth/login", json={"identifier": PHONE, "password": "rahasia123"})
    assert failed.status_code == 401
    await login(client, PHONE, password="passwordbaru")


async def test_admin_tools(client, messaging, session_factory):
    admin = await make_account(
        session_factory, "6281200000001", full_name="Admin Galeri", role=AccountRole.ADMIN
    )
    member = await make_account(session_factory, PHONE)
    await login(client, "081200000001")

    stats = (await client.get("/api/v1/admin/stats")).json()["data"]
    assert stats["total_accounts"] == 2
    assert stats["admins"] == 1

    response = await client.post(f"/api/v1/admin/users/{member.id}/role", json={"role": "admin"})
    assert response.json()["data"]["role"] == "admin"

    response = await client.post(f"/api/v1/admin/users/{admin.id}/role", json={"role": "member"})
    assert response.status_code == 303
    assert response.headers["location"] == "/dashboard"

    response = await client.post("/api/v1/admin/messaging/test", json={"phone": "0851-5730-0793"})
    assert response.json()["data"]["delivered"] is True
    assert messaging.sent[-1][0] == PHONE

    session = (await client.get("/api/v1/auth/session")).json()["data"]
    assert session["is_authenticated"] is True
    assert session["role"] == "admin"


async def test_failed_delivery_on_register_still_opens_a_session(client, messaging, clock):
    messaging.fail_with = "HTTP 500"
    response = await client.post(
        "/api/v1/auth/register",
        json={"full_name": "Budi Santoso", "phone": "0851-5730-0793", "password": "rahasia123"},
    )
    assert response.status_code == 502
    assert response.json()["error"] == "messaging_delivery_failure"
    assert settings.SESSION_COOKIE_NAME in response.cookies

    response = await client.get("/dashboard")
    assert response.status_code == 303
    assert response.headers["location"] == "/verify-otp"

    messaging.fail_with = None
    clock.advance(seconds=settings.OTP_RESEND_COOLDOWN_SECONDS)
    response = await client.post("/api/v1/auth/request-otp", json={"phone": PHONE})
    assert response.status_code == 200, response.text

    response = await client.post("/api/v1/auth/verify-otp", json={"phone": PHONE, "otp": last_code(messaging)})
    assert response.status_code == 200, response.text
    assert response.json()["data"]["status"] == "pending_approval"


async def test_photo_trash_lifecycle_over_http(client, session_factory):
    await make_account(
        session_factory, "6281200000001", full_name="Admin Galeri", role=AccountRole.ADMIN
    )
    member = await make_account(session_factory, PHONE, full_name="Budi Santoso")
    await login(client, PHONE)

    response = await client.post(
        "/api/v1/photos",
        json={
            "storage_path": f"{member.id}/pantai.jpg",
            "display_url": "https://cdn.example.com/pantai.jpg",
            "file_name": "pantai.jpg",
            "file_size": 2048,
            "mime_type": "image/jpeg",
        },
        headers={"user-agent": "Mozilla/5.0 (Android) Mobile"},
    )
    assert response.status_code == 201, response.text
    photo_id = response.json()["data"]["id"]

    listing = (await client.get("/api/v1/photos", params={"q": "pantai"})).json()["data"]
    assert listing["total"] == 1
    assert listing["photos"][0]["id"] == photo_id

    response = await client.delete(f"/api/v1/photos/{photo_id}")
    assert response.status_code == 200, response.text
    assert (await client.get("/api/v1/photos")).json()["data"]["total"] == 0

    # the trash is for admins
    response = await client.get("/api/v1/photos/trash")
    assert response.status_code == 303
    assert response.headers["location"] == "/dashboard"

    await client.post("/api/v1/auth/logout")
    await login(client, "081200000001")
    trash = (await client.get("/api/v1/photos/trash")).json()["data"]
    assert [photo["id"] for photo in trash["photos"]] == [photo_id]

    response = await client.post(f"/api/v1/photos/{photo_id}/restore")
    assert response.json()["data"]["is_deleted"] is False

    response = await client.delete(f"/api/v1/photos/{photo_id}/permanent")
    assert response.json()["data"]["storage_path"] == f"{member.id}/pantai.jpg"

    response = await client.delete(f"/api/v1/photos/{photo_id}/permanent")
    assert response.status_code == 404
    assert response.json()["error"] == "photo_not_found"


async def test_app_settings_are_public_and_admin_editable(client, session_factory):
    await make_account(
        session_factory, "6281200000001", full_name="Admin Galeri", role=AccountRole.ADMIN
    )
    response = await client.get("/api/v1/settings")
    assert response.status_code == 200
    assert response.json()["data"]["app_name"] == settings.APP_NAME

    response = await client.put("/api/v1/admin/settings", json={"app_name": "Galeri Komunitas"})
    assert response.status_code == 303
    assert response.headers["location"] == "/login"

    await login(client, "081200000001")
    response = await client.put(
        "/api/v1/admin/settings", json={"app_name": "Galeri Komunitas", "theme_color": "#0f766e"}
    )
    assert response.status_code == 200, response.text

    client.cookies.clear()
    data = (await client.get("/api/v1/settings")).json()["data"]
    assert data["app_name"] == "Galeri Komunitas"
    assert data["theme_color"] == "#0f766e"
