# chatterlite/tests/unit/test_security.py
import datetime

import pytest

from chatterlite.config import AppConfig
from chatterlite.domain.errors import ConfigurationError
from chatterlite.infrastructure.security import SecurityService


@pytest.fixture
def security_service():
    config = AppConfig(
        _env_file=None,
        SECRET_KEY="test_secret",
        ALGORITHM="HS256",
        REFRESH_SECRET_KEY="test_refresh_secret",
    )
    return SecurityService(config)


def test_password_hashing(security_service):
    password = "testpassword"
    hashed = security_service.get_password_hash(password)
    assert hashed != password
    assert security_service.verify_password(password, hashed)
    assert not security_service.verify_password("wrongpassword", hashed)


def test_token_decoding(security_service):
    data = {"sub": "user-1"}
    access_token, access_expire = security_service.create_access_token(data)
    refresh_token, refresh_expire = security_service.create_refresh_token(data)

    assert security_service.decode_access_token(access_token) == "user-1"
    assert security_service.decode_refresh_token(refresh_token) == "user-1"
    assert refresh_expire > access_expire


def test_tokens_are_unique(security_service):
    first, _ = security_service.create_access_token({"sub": "user-1"})
    second, _ = security_service.create_access_token({"sub": "user-1"})
    assert first != second


def test_keys_are_not_interchangeable(security_service):
    access_token, _ = security_service.create_access_token({"sub": "user-1"})
    refresh_token, _ = security_service.create_refresh_token({"sub": "user-1"})

    assert security_service.decode_refresh_token(access_token) is None
    assert security_service.decode_access_token(refresh_token) is None


def test_expired_token(security_service):
    token, _ = security_service.create_access_token(
        {"sub": "user-1"}, expires_delta=datetime.timedelta(seconds=-1)
    )
    assert security_service.decode_access_token(token) is None


def test_invalid_token(security_service):
    assert security_service.decode_access_token("not-a-token") is None


def test_unconfigured_service_refuses_tokens():
    service = SecurityService(AppConfig(_env_file=None, SECRET_KEY=None))
    with pytest.raises(ConfigurationError) as exc_info:
        service.create_access_token({"sub": "user-1"})
    assert exc_info.value.status_code == 503
    assert exc_info.value.message == "Authentication service is not properly configured"
    with pytest.raises(ConfigurationError):
        service.ensure_configured()
