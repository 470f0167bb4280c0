from __future__ import annotations

from dataclasses import dataclass, field

from flask import current_app

from ..config import Settings
from .store import DraftStore


@dataclass
class ServiceContainer:
    store: DraftStore
    settings: Settings = field(default_factory=Settings)


def init_services(app, store: DraftStore, settings: Settings | None = None) -> ServiceContainer:
    container = ServiceContainer(store=store, settings=settings or Settings())
    app.extensions["services"] = container
    return container


def get_services() -> ServiceContainer:
    container = current_app.extensions.get("services")
    if container is None:
        raise RuntimeError("services not initialised; build the app with create_app()")
    return container


def current_settings() -> Settings:
    """Settings of the running app, or the defaults for a bare Flask app."""
    container = current_app.extensions.get("services")
    return container.settings if container is not None else Settings()
