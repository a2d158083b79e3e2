import pytest

from core.config import settings
from core.exceptions import Forbidden
from models.app_settings import AppSettings
from services.settings_service import AppSettingsService
from tests.conftest import make_account


async def test_defaults_before_any_update(db, clock):
    values = await AppSettingsService(db, clock).get()
    assert values["app_name"] == settings.APP_NAME
    assert values["logo_url"] is None


async def test_admin_update_creates_then_edits_one_row(db, clock, admin, session_factory):
    service = AppSettingsService(db, clock)

    await service.update(admin, {"app_name": "Galeri Komunitas", "theme_color": "#0f766e"})
    values = await service.update(admin, {"theme_color": "", "logo_url": "https://cdn.example.com/logo.png"})

    assert values["app_name"] == "Galeri Komunitas"
    assert values["theme_color"] is None
    assert values["logo_url"] == "https://cdn.example.com/logo.png"
    async with session_factory() as check:
        [row] = (await check.execute(AppSettings.__table__.select())).all()
        assert row.updated_by_id == admin.id


async def test_unknown_fields_are_ignored(db, clock, admin):
    values = await AppSettingsService(db, clock).update(admin, {"favicon": "x", "keywords": "foto, komunitas"})
    assert values["keywords"] == "foto, komunitas"
    assert "favicon" not in values


async def test_members_cannot_update(db, clock, session_factory):
    member = await make_account(session_factory, "6281200000050")
    with pytest.raises(Forbidden):
        await AppSettingsService(db, clock).update(member, {"app_name": "Diambil alih"})
