from sqlalchemy import Column, String, Boolean, DateTime
from datetime import datetime
import uuid

from .db import Base
from .auth import generate_auth_key

USER = "user"
ORGANIZATION = "organization"


class Account(Base):
    """
    Shared auth fields of every account kind.

    Rows are discriminated on ``type``; each concrete kind lists the full set
    of fields that make up its record in ``RECORD_FIELDS``.
    """
    __tablename__ = "accounts"
    id = Column(String(32), primary_key=True, default=lambda: uuid.uuid4().hex)
    username = Column(String, unique=True, index=True, nullable=False)
    email = Column(String, unique=True, index=True, nullable=False)
    password = Column(String, nullable=False)
    # Rotated on every password change, embedded in each session token
    auth_key = Column(String, nullable=False, default=generate_auth_key)
    is_email_verified = Column(Boolean, default=False, nullable=False)
    password_reset_token = Column(String, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    type = Column(String(20), nullable=False)

    __mapper_args__ = {"polymorphic_on": type, "with_polymorphic": "*"}

    RECORD_FIELDS = (
        "id",
        "username",
        "email",
        "password",
        "auth_key",
        "is_email_verified",
        "password_reset_token",
        "created_at",
    )

    def to_record(self) -> dict:
        return {field: getattr(self, field) for field in self.RECORD_FIELDS}

    def replaced(self, **changes) -> "Account":
        """
        Build a detached copy of this account, in its own concrete shape,
        with ``changes`` applied. Used to write back a whole record.
        """
        model = ACCOUNT_TYPES.get(self.type)
        if model is None:
            raise ValueError(f"Unknown account type {self.type!r}")
        unknown = set(changes) - set(model.RECORD_FIELDS)
        if unknown:
            raise ValueError(f"Unknown {self.type} fields: {', '.join(sorted(unknown))}")
        record = {field: getattr(self, field) for field in model.RECORD_FIELDS}
        record.update(changes)
        return model(**record)


class User(Account):
    first_name = Column(String, nullable=True)
    last_name = Column(String, nullable=True)

    __mapper_args__ = {"polymorphic_identity": USER}

    RECORD_FIELDS = Account.RECORD_FIELDS + ("first_name", "last_name")


class Organization(Account):
    preferred_name = Column(String, nullable=True)
    # Set by staff once the organization itself is vetted
    is_verified = Column(Boolean, default=False, nullable=True)

    __mapper_args__ = {"polymorphic_identity": ORGANIZATION}

    RECORD_FIELDS = Account.RECORD_FIELDS + ("preferred_name", "is_verified")


ACCOUNT_TYPES = {
    USER: User,
    ORGANIZATION: Organization,
}
