from __future__ import annotations

import logging

from sqlalchemy import select

from ..db import Database, User
from ..errors import NotFoundError
from ..guard import Principal
from ..schemas import GoogleProfile, UserOut
from ..views import user_out
from .lists import seed_default_lists
from .tags import seed_starter_tags

logger = logging.getLogger(__name__)


class UserService:
    def __init__(self, database: Database) -> None:
        self.db = database

    def me(self, principal: Principal) -> UserOut:
        with self.db.transaction("load user") as session:
            user = session.get(User, principal.user_id)
            if user is None or user.deleted_at is not None:
                raise NotFoundError("user not found")
            return user_out(user)

    def sign_in_google(self, profile: GoogleProfile) -> UserOut:
        """Find or create the user behind a Google profile.

        A first sign-in also gets the default pipeline lists and starter tags.
        """
        with self.db.transaction("sign in user") as session:
            user = session.scalars(
                select(User).where(User.email == profile.email, User.deleted_at.is_(None))
            ).first()
            if user is not None:
                user.profile_picture = profile.picture
                session.flush()
                return user_out(user)

            user = User(name=profile.name, email=profile.email, profile_picture=profile.picture)
            session.add(user)
            session.flush()
            seed_default_lists(session, user.id)
            seed_starter_tags(session, user.id)
            logger.info("created user %s with default lists", user.id)
            return user_out(user)
