from __future__ import annotations

import logging

from sqlalchemy import select

from ..config import Settings
from ..crypto import decrypt_value, encrypt_value, generate_api_key, sha256_hex
from ..db import APIKey, Database
from ..errors import NotFoundError
from ..guard import Principal
from ..schemas import APIKeyOut

logger = logging.getLogger(__name__)

DEFAULT_KEY_NAME = "API"


class KeyService:
    """API keys are stored AES encrypted and looked up by the sha256 of the secret."""

    def __init__(self, database: Database, settings: Settings) -> None:
        self.db = database
        self.secret = settings.enc_secret

    def _find(self, session, principal: Principal) -> APIKey | None:
        return session.scalars(
            select(APIKey).where(
                APIKey.user_id == principal.user_id,
                APIKey.name == DEFAULT_KEY_NAME,
                APIKey.deleted_at.is_(None),
            )
        ).first()

    def create_api_key(self, principal: Principal) -> str:
        """Return the user's key, creating it on first use."""
        with self.db.transaction("create api key") as session:
            key = self._find(session, principal)
            if key is not None:
                logger.warning("api key already exists for user %s", principal.user_id)
                return decrypt_value(self.secret, key.value)

            logger.info("creating api key for user %s", principal.user_id)
            value = generate_api_key()
            session.add(
                APIKey(
                    name=DEFAULT_KEY_NAME,
                    value=encrypt_value(self.secret, value),
                    hash=sha256_hex(value),
                    user_id=principal.user_id,
                )
            )
            return value

    def get_api_key(self, principal: Principal) -> APIKeyOut:
        with self.db.transaction("get api key") as session:
            key = self._find(session, principal)
            if key is None:
                raise NotFoundError("api key not found")
            return APIKeyOut(
                id=key.id,
                key=decrypt_value(self.secret, key.value),
                name=key.name,
                created_at=key.created_at,
            )
