"""ASGI entrypoint for the club portal API."""

from club_portal.api.app import create_app
from club_portal.containers import build_container

app = create_app(build_container())
