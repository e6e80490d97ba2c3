"""
Session verification for protected routes.

``verify_account`` is used as a dependency in front of every protected
handler. It resolves the account behind the ``x-access-token`` header and
rejects the request when the token is bad, the account's auth key has been
rotated since the token was issued, or the account's email is unverified.
"""
import logging
from typing import Optional

from fastapi import Depends, Header, Request

from .auth import SESSION_CLAIMS, TokenCodec, TokenError
from .config import Settings, get_settings
from .deps import get_account_store, get_token_codec
from .errors import AccountLookupError, AuthFailed, EmailNotVerified, MissingToken, log_internal_error
from .models import Account
from .store import AccountNotFound, AccountStore, StoreError

logger = logging.getLogger(__name__)

TOKEN_HEADER = "x-access-token"


def authenticate_token(
    token: Optional[str], codec: TokenCodec, store: AccountStore, debug: bool = False
) -> Account:
    if not token:
        raise MissingToken()

    try:
        claims = codec.verify(token, required=SESSION_CLAIMS)
    except TokenError as e:
        # The specific codec failure stays out of the response
        logger.info("Session token rejected: %s (%s)", type(e).__name__, e)
        raise AuthFailed() from e

    try:
        account = store.find_one(Account.username == claims["username"])
    except AccountNotFound as e:
        logger.info("Session token for unknown account username=%s", claims["username"])
        raise AuthFailed() from e
    except StoreError as e:
        log_internal_error("Problem finding account during session verification", e, debug)
        raise AccountLookupError() from e

    if account.auth_key != claims["authkey"]:
        logger.info("Session token auth key is stale: account_id=%s", account.id)
        raise AuthFailed()

    if not account.is_email_verified:
        raise EmailNotVerified()

    return account


def verify_account(
    request: Request,
    token: Optional[str] = Header(default=None, alias=TOKEN_HEADER),
    codec: TokenCodec = Depends(get_token_codec),
    store: AccountStore = Depends(get_account_store),
    settings: Settings = Depends(get_settings),
) -> Account:
    account = authenticate_token(token, codec, store, settings.DEBUG)
    request.state.account = account
    return account
