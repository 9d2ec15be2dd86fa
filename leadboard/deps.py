"""
Service wiring: one instance of each service per app, built from the app's
settings and database and handed to routes through ``get_services``.
"""

from __future__ import annotations

from dataclasses import dataclass

from fastapi import Request

from .config import Settings
from .db import Database
from .oauth import GoogleOAuth
from .ordering import ListLocks
from .services.activities import ActivityService
from .services.cards import CardService
from .services.fields import FieldService
from .services.keys import KeyService
from .services.lists import ListService
from .services.tags import TagService
from .services.users import UserService


@dataclass
class Services:
    cards: CardService
    lists: ListService
    tags: TagService
    fields: FieldService
    activities: ActivityService
    keys: KeyService
    users: UserService
    google: GoogleOAuth


def build_services(database: Database, settings: Settings) -> Services:
    locks = ListLocks()
    return Services(
        cards=CardService(database, locks),
        lists=ListService(database, locks),
        tags=TagService(database),
        fields=FieldService(database),
        activities=ActivityService(database),
        keys=KeyService(database, settings),
        users=UserService(database),
        google=GoogleOAuth(settings),
    )


def get_services(request: Request) -> Services:
    return request.app.state.services
