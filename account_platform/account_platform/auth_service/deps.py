"""
FastAPI dependencies wiring settings into the auth collaborators.
"""
from fastapi import Depends
from sqlalchemy.orm import Session

from .auth import PasswordHasher, TokenCodec
from .config import Settings, get_settings
from .db import get_db
from .store import AccountStore


def get_token_codec(settings: Settings = Depends(get_settings)) -> TokenCodec:
    return TokenCodec(settings.SECRET_KEY, settings.ALGORITHM)


def get_password_hasher(settings: Settings = Depends(get_settings)) -> PasswordHasher:
    return PasswordHasher(settings.PASSWORD_HASH_ROUNDS)


def get_account_store(db: Session = Depends(get_db)) -> AccountStore:
    return AccountStore(db)
