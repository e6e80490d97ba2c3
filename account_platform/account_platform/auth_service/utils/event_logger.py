"""
Event logger utility for authentication events.
"""
from datetime import datetime
from typing import Optional
from fastapi import Request
import sys
import logging
import os

from ..config import settings
from ..models import Account

logger = logging.getLogger(__name__)

# Try to add file handler, but continue without it if directory creation fails
try:
    os.makedirs(settings.LOG_DIR, exist_ok=True)
    file_handler = logging.FileHandler(os.path.join(settings.LOG_DIR, "auth_events.log"))
    file_handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s:%(message)s"))
    logger.addHandler(file_handler)
except OSError as e:
    print(f"WARNING: Could not set up file logging: {e}", file=sys.stderr)


ALLOWED_EVENT_TYPES = {
    "login_success",
    "login_failure",
    "password_reset"
}


def client_ip(request: Request) -> Optional[str]:
    ip_address = None
    if request.client:
        ip_address = request.client.host

    # X-Forwarded-For can contain multiple IPs, take the first one
    if not ip_address and request.headers.get("x-forwarded-for"):
        ip_address = request.headers.get("x-forwarded-for").split(",")[0].strip()
    return ip_address


def log_auth_event(
    event_type: str,
    account: Optional[Account],
    request: Request,
    metadata: dict = None,
    identifier: str = None
) -> None:
    """
    Log an authentication event.

    Args:
        event_type: One of: login_success, login_failure, password_reset
        account: Account the event is about, or None when no account matched
        request: FastAPI Request object
        metadata: Optional dictionary of additional context
        identifier: Submitted login identifier, logged when there is no account

    Raises:
        ValueError: If event_type is invalid
    """
    if event_type not in ALLOWED_EVENT_TYPES:
        raise ValueError(
            f"Invalid event_type '{event_type}'. Must be one of: {', '.join(sorted(ALLOWED_EVENT_TYPES))}"
        )

    logger.info(
        "AUTH %s account_id=%s username=%s type=%s ip=%s user_agent=%s timestamp=%s metadata=%s",
        event_type,
        account.id if account else None,
        account.username if account else identifier,
        account.type if account else None,
        client_ip(request),
        request.headers.get("user-agent"),
        datetime.utcnow().isoformat(),
        metadata or {}
    )
