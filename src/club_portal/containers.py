"""Dependency container wiring for the application."""

from collections.abc import Callable
from dataclasses import dataclass

from supabase import Client, ClientOptions, create_client

from club_portal.adapters.supabase_appointment_repository import (
    SupabaseAppointmentRepository,
)
from club_portal.adapters.supabase_database_helper import DatabaseHelper
from club_portal.adapters.supabase_group_repository import SupabaseGroupRepository
from club_portal.adapters.supabase_profile_repository import SupabaseProfileRepository
from club_portal.adapters.supabase_session_repository import (
    SupabaseTrainingSessionRepository,
)
from club_portal.config import Settings
from club_portal.services.appointments import AppointmentService
from club_portal.services.auth import AuthService
from club_portal.services.cache import InMemoryCache
from club_portal.services.cache_invalidation import CacheInvalidator
from club_portal.services.groups import GroupService
from club_portal.services.sessions import TrainingSessionService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    cache: InMemoryCache
    invalidator: CacheInvalidator
    auth_service: AuthService
    group_service: GroupService
    session_service: TrainingSessionService
    appointment_service: AppointmentService


def build_container(
    settings: Settings | None = None,
    client: Client | None = None,
    session_client_factory: Callable[[], Client] | None = None,
) -> AppContainer:
    """Create the default dependency container.

    ``session_client_factory`` builds the short-lived clients used to sign
    users in, keeping user sessions off the shared ``client``.
    """
    resolved_settings = settings or Settings()
    supabase_client = client or create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_key
    )

    def session_client() -> Client:
        return create_client(
            resolved_settings.supabase_url,
            resolved_settings.supabase_key,
            options=ClientOptions(persist_session=False, auto_refresh_token=False),
        )

    make_session_client = session_client_factory or session_client
    cache = InMemoryCache()
    invalidator = CacheInvalidator(cache)

    def helper(table: str, ttl_seconds: float) -> DatabaseHelper:
        return DatabaseHelper(
            table=table,
            client=supabase_client,
            cache=cache,
            ttl_seconds=ttl_seconds,
            timeout_seconds=resolved_settings.database_timeout_seconds,
        )

    record_ttl = resolved_settings.cache_ttl_seconds
    list_ttl = resolved_settings.list_cache_ttl_seconds

    group_repository = SupabaseGroupRepository(
        groups=helper("groups", list_ttl),
        group_members=helper("group_members", 0),
        members=helper("members", record_ttl),
    )
    session_repository = SupabaseTrainingSessionRepository(
        sessions=helper("sessions", list_ttl),
        attendance=helper("attendance", 0),
    )
    appointment_repository = SupabaseAppointmentRepository(
        appointments=helper("appointments", list_ttl),
        requests=helper("appointment_requests", 0),
    )
    profile_repository = SupabaseProfileRepository(users=helper("users", record_ttl))

    group_service = GroupService(
        repository=group_repository,
        cache=cache,
        invalidator=invalidator,
        details_ttl_seconds=record_ttl,
    )
    session_service = TrainingSessionService(
        repository=session_repository,
        group_service=group_service,
        cache=cache,
        invalidator=invalidator,
    )
    appointment_service = AppointmentService(
        repository=appointment_repository,
        cache=cache,
        invalidator=invalidator,
    )
    auth_service = AuthService(
        identity=supabase_client.auth,
        profiles=profile_repository,
        new_identity=lambda: make_session_client().auth,
    )

    return AppContainer(
        settings=resolved_settings,
        cache=cache,
        invalidator=invalidator,
        auth_service=auth_service,
        group_service=group_service,
        session_service=session_service,
        appointment_service=appointment_service,
    )
