"""
Shared fixtures. Environment is pointed at a throwaway SQLite database and
log directory before the service is imported.
"""
import os
import tempfile

_TMP_DIR = tempfile.mkdtemp(prefix="account-platform-tests-")
os.environ.setdefault("DATABASE_URL", f"sqlite:///{os.path.join(_TMP_DIR, 'test.db')}")
os.environ.setdefault("LOG_DIR", os.path.join(_TMP_DIR, "logs"))
os.environ.setdefault("SECRET_KEY", "test-secret-key-with-enough-bytes-for-hs256-signing")
os.environ.setdefault("PASSWORD_HASH_ROUNDS", "1000")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from account_platform.account_platform.auth_service.main import app
from account_platform.account_platform.auth_service.db import Base, engine
from account_platform.account_platform.auth_service.config import settings
from account_platform.account_platform.auth_service.auth import (
    PasswordHasher,
    TokenCodec,
    create_password_reset_token,
)
from account_platform.account_platform.auth_service.models import Account, ACCOUNT_TYPES, USER


@pytest.fixture(autouse=True)
def reset_database():
    # Drop all tables and recreate them before each test
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    app.dependency_overrides.clear()


@pytest.fixture
def client():
    with TestClient(app) as c:
        yield c


@pytest.fixture
def db_session():
    session = Session(bind=engine)
    yield session
    session.close()


@pytest.fixture
def codec():
    return TokenCodec(settings.SECRET_KEY, settings.ALGORITHM)


@pytest.fixture
def hasher():
    return PasswordHasher(settings.PASSWORD_HASH_ROUNDS)


@pytest.fixture
def create_account(hasher):
    """
    Insert an account and return stable scalar values for it.
    """
    def _create(
        username="alice",
        email=None,
        password="correct",
        account_type=USER,
        is_email_verified=True,
        **fields
    ):
        session = Session(bind=engine)
        try:
            account = ACCOUNT_TYPES[account_type](
                username=username,
                email=email or f"{username}@example.com",
                password=hasher.hash(password),
                is_email_verified=is_email_verified,
                **fields
            )
            session.add(account)
            session.commit()
            session.refresh(account)
            return {
                "id": account.id,
                "username": account.username,
                "email": account.email,
                "auth_key": account.auth_key,
                "password": password,
            }
        finally:
            session.close()

    return _create


@pytest.fixture
def load_account():
    def _load(account_id):
        session = Session(bind=engine)
        try:
            account = session.get(Account, account_id)
            if account is not None:
                session.expunge(account)
            return account
        finally:
            session.close()

    return _load


@pytest.fixture
def start_reset(codec):
    """Mint a reset token for an account and store it as the pending reset."""
    def _start(account_id, identifier=None):
        token = create_password_reset_token(
            codec, identifier or account_id, settings.RESET_TOKEN_EXPIRY_SECONDS
        )
        session = Session(bind=engine)
        try:
            account = session.get(Account, account_id)
            account.password_reset_token = token
            session.commit()
        finally:
            session.close()
        return token

    return _start
