"""Tests for container wiring."""

from club_portal.config import Settings
from club_portal.containers import build_container


def test_build_container_creates_services(settings, fake_client) -> None:
    container = build_container(settings, client=fake_client)

    assert container.session_service.group_service is container.group_service
    assert container.group_service.cache is container.cache
    assert container.auth_service.identity is fake_client.auth


def test_helpers_use_configured_ttls_and_timeout(fake_client) -> None:
    settings = Settings(
        supabase_url="https://example.supabase.co",
        supabase_key="header.payload.signature",
        admin_token="admin-token",
        cache_ttl_seconds=120,
        list_cache_ttl_seconds=15,
        database_timeout_seconds=2.5,
    )

    container = build_container(settings, client=fake_client)
    groups = container.group_service.repository

    assert groups.groups.ttl_seconds == 15
    assert groups.members.ttl_seconds == 120
    assert groups.group_members.ttl_seconds == 0
    assert groups.groups.timeout_seconds == 2.5
    assert container.group_service.details_ttl_seconds == 120


def test_settings_read_environment(monkeypatch) -> None:
    monkeypatch.setenv("SUPABASE_URL", "https://env.supabase.co")
    monkeypatch.setenv("SUPABASE_KEY", "env.key.value")
    monkeypatch.setenv("ADMIN_TOKEN", "env-token")
    monkeypatch.setenv("DATABASE_TIMEOUT_SECONDS", "3")

    settings = Settings()

    assert settings.supabase_url == "https://env.supabase.co"
    assert settings.database_timeout_seconds == 3.0
    assert settings.cache_ttl_seconds == 300
