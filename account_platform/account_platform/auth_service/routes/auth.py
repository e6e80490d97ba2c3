"""
Authentication routes: login and password reset.
"""
import logging
import secrets

from fastapi import APIRouter, Depends, Request, status

from ..auth import (
    RESET_CLAIMS,
    PasswordHasher,
    SigningError,
    TokenCodec,
    TokenError,
    create_session_token,
    generate_auth_key,
)
from ..config import Settings, get_settings
from ..deps import get_account_store, get_password_hasher, get_token_codec
from ..errors import (
    OK,
    BadRequest,
    InternalError,
    InvalidLogin,
    InvalidResetToken,
    LoginEmailNotVerified,
    ResetAccountNotFound,
    ResetBadRequest,
    ResetInternalError,
    ResetUnreadableRequest,
    UnreadableRequest,
    log_internal_error,
)
from ..schemas import ErrorResponse, LoginRequest, Message, ResetPasswordRequest, Token
from ..store import AccountNotFound, AccountStore, StoreError, account_query, login_criteria
from ..utils.event_logger import log_auth_event
from ..utils.request_decoder import request_body

router = APIRouter(prefix="/v1/auth", tags=["auth"])
logger = logging.getLogger(__name__)

login_body = request_body(LoginRequest, UnreadableRequest, BadRequest)
reset_body = request_body(ResetPasswordRequest, ResetUnreadableRequest, ResetBadRequest)

ERROR_RESPONSES = {
    status.HTTP_400_BAD_REQUEST: {"model": ErrorResponse},
    status.HTTP_500_INTERNAL_SERVER_ERROR: {"model": ErrorResponse},
}


@router.post("/login", response_model=Token, responses=ERROR_RESPONSES)
def login(
    request: Request,
    credentials: LoginRequest = Depends(login_body),
    settings: Settings = Depends(get_settings),
    codec: TokenCodec = Depends(get_token_codec),
    hasher: PasswordHasher = Depends(get_password_hasher),
    store: AccountStore = Depends(get_account_store),
):
    # Unknown identifiers and store failures look exactly like a wrong password
    try:
        account = store.find_first_match(login_criteria(credentials.username))
    except AccountNotFound as e:
        logger.info("[Login] Unknown identifier")
        log_auth_event(
            "login_failure", None, request,
            metadata={"reason": "unknown_identifier"}, identifier=credentials.username
        )
        raise InvalidLogin() from e
    except StoreError as e:
        log_internal_error("[Login] Problem finding account", e, settings.DEBUG)
        log_auth_event(
            "login_failure", None, request,
            metadata={"reason": "lookup_error"}, identifier=credentials.username
        )
        raise InvalidLogin() from e

    if not hasher.verify(credentials.password, account.password):
        log_auth_event("login_failure", account, request, metadata={"reason": "wrong_password"})
        raise InvalidLogin()

    # Only checked once the password is known to be right
    if not account.is_email_verified:
        raise LoginEmailNotVerified()

    try:
        token = create_session_token(codec, account, settings.TOKEN_EXPIRY_SECONDS)
    except SigningError as e:
        log_internal_error("[Login] Failed to sign session token", e, settings.DEBUG)
        raise InternalError() from e

    log_auth_event("login_success", account, request)
    return Token(token=token)


@router.post(
    "/reset-password",
    response_model=Message,
    responses={**ERROR_RESPONSES, status.HTTP_404_NOT_FOUND: {"model": ErrorResponse}},
)
def reset_password(
    request: Request,
    payload: ResetPasswordRequest = Depends(reset_body),
    settings: Settings = Depends(get_settings),
    codec: TokenCodec = Depends(get_token_codec),
    hasher: PasswordHasher = Depends(get_password_hasher),
    store: AccountStore = Depends(get_account_store),
):
    try:
        claims = codec.verify(payload.token, required=RESET_CLAIMS)
    except TokenError as e:
        logger.info("[Reset] Reset token rejected: %s (%s)", type(e).__name__, e)
        raise InvalidResetToken() from e

    try:
        account = store.find_by_identifier(claims["id"])
    except AccountNotFound as e:
        raise ResetAccountNotFound() from e
    except StoreError as e:
        log_internal_error("[Reset] Problem finding account", e, settings.DEBUG)
        raise ResetInternalError() from e

    # The token must still be the pending one stored on the account
    stored = account.password_reset_token or ""
    if not stored or not secrets.compare_digest(stored.encode("utf-8"), payload.token.encode("utf-8")):
        logger.info("[Reset] Reset token does not match pending reset: account_id=%s", account.id)
        raise InvalidResetToken()

    try:
        password_hash = hasher.hash(payload.password)
    except (TypeError, ValueError) as e:
        log_internal_error("[Reset] Failed to hash new password", e, settings.DEBUG)
        raise ResetInternalError() from e

    # Rotating the auth key logs out every existing session
    replacement = account.replaced(
        password=password_hash,
        auth_key=generate_auth_key(),
        password_reset_token=None,
    )

    try:
        store.update(account_query(account.id), replacement)
    except (AccountNotFound, StoreError) as e:
        log_internal_error("[Reset] Failed to save account", e, settings.DEBUG)
        raise ResetInternalError() from e

    log_auth_event("password_reset", account, request)
    return Message(message=OK)
