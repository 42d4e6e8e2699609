# chatterlite/infrastructure/security.py
import datetime
import secrets
from typing import Optional

import jwt
from jwt import ExpiredSignatureError, InvalidTokenError
from passlib.context import CryptContext

from chatterlite.config import AppConfig
from chatterlite.domain.errors import ConfigurationError


class SecurityService:
    def __init__(self, config: AppConfig):
        self.config = config
        self.pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

    def _require_keys(self) -> tuple[str, str]:
        if not self.config.auth_configured:
            raise ConfigurationError("Authentication service is not properly configured")
        return self.config.SECRET_KEY, self.config.REFRESH_SECRET_KEY or self.config.SECRET_KEY

    def ensure_configured(self) -> None:
        self._require_keys()

    def verify_password(self, plain_password: str, hashed_password: str) -> bool:
        return self.pwd_context.verify(plain_password, hashed_password)

    def get_password_hash(self, password: str) -> str:
        return self.pwd_context.hash(password)

    def create_access_token(
        self, data: dict, expires_delta: Optional[datetime.timedelta] = None
    ) -> tuple[str, datetime.datetime]:
        secret_key, _ = self._require_keys()
        to_encode = data.copy()
        to_encode.update({"nonce": secrets.token_hex(8)})
        expire = datetime.datetime.now(datetime.timezone.utc) + (
            expires_delta
            or datetime.timedelta(minutes=self.config.ACCESS_TOKEN_EXPIRE_MINUTES)
        )
        to_encode.update({"exp": expire})
        encoded_jwt = jwt.encode(to_encode, secret_key, algorithm=self.config.ALGORITHM)
        return encoded_jwt, expire

    def create_refresh_token(self, data: dict) -> tuple[str, datetime.datetime]:
        _, refresh_key = self._require_keys()
        to_encode = data.copy()
        to_encode.update({"nonce": secrets.token_hex(8)})
        expire = datetime.datetime.now(datetime.timezone.utc) + datetime.timedelta(
            days=self.config.REFRESH_TOKEN_EXPIRE_DAYS
        )
        to_encode.update({"exp": expire})
        encoded_jwt = jwt.encode(to_encode, refresh_key, algorithm=self.config.ALGORITHM)
        return encoded_jwt, expire

    def _decode(self, token: str, key: str) -> Optional[str]:
        try:
            payload = jwt.decode(token, key, algorithms=[self.config.ALGORITHM])
        except (ExpiredSignatureError, InvalidTokenError):
            return None
        return payload.get("sub")

    def decode_access_token(self, token: str) -> Optional[str]:
        """Return the user id carried by a valid access token."""
        secret_key, _ = self._require_keys()
        return self._decode(token, secret_key)

    def decode_refresh_token(self, token: str) -> Optional[str]:
        _, refresh_key = self._require_keys()
        return self._decode(token, refresh_key)
