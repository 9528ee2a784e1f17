"""ASGI entrypoint for the raid planner bot."""

from raid_planner.api.app import create_app
from raid_planner.containers import build_container

app = create_app(build_container())
