"""
Account lookups and whole-record updates on top of a SQLAlchemy session.
"""
from sqlalchemy import case, or_
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError

from .models import Account


class AccountNotFound(Exception):
    pass


class StoreError(Exception):
    pass


def parse_encoded_email(value: str) -> str:
    return value.replace("%40", "@")


def is_email_identifier(identifier: str) -> bool:
    return "@" in identifier or "%40" in identifier


def account_query(identifier: str):
    """Criterion matching an account by email or by id, depending on the identifier's shape."""
    if is_email_identifier(identifier):
        return Account.email == parse_encoded_email(identifier)
    return Account.id == identifier


def login_criteria(identifier: str) -> list:
    """
    Criteria a login identifier may match, most specific first: email then
    username for email-shaped identifiers, username then id otherwise.
    """
    if is_email_identifier(identifier):
        return [Account.email == parse_encoded_email(identifier), Account.username == identifier]
    return [Account.username == identifier, Account.id == identifier]


class AccountStore:
    def __init__(self, db: Session):
        self.db = db

    def find_one(self, criterion) -> Account:
        try:
            account = self.db.query(Account).filter(criterion).first()
        except SQLAlchemyError as e:
            raise StoreError("Account lookup failed") from e
        if account is None:
            raise AccountNotFound()
        return account

    def find_first_match(self, criteria: list) -> Account:
        """
        Single lookup for the account matching any of ``criteria``; when
        several accounts match, the one matching the earliest criterion wins.
        """
        rank = case(*[(criterion, i) for i, criterion in enumerate(criteria)], else_=len(criteria))
        try:
            account = self.db.query(Account).filter(or_(*criteria)).order_by(rank).first()
        except SQLAlchemyError as e:
            raise StoreError("Account lookup failed") from e
        if account is None:
            raise AccountNotFound()
        return account

    def find_by_id(self, account_id: str) -> Account:
        try:
            account = self.db.get(Account, account_id)
        except SQLAlchemyError as e:
            raise StoreError("Account lookup failed") from e
        if account is None:
            raise AccountNotFound()
        return account

    def find_by_identifier(self, identifier: str) -> Account:
        if is_email_identifier(identifier):
            return self.find_one(account_query(identifier))
        return self.find_by_id(identifier)

    def update(self, criterion, record: Account) -> None:
        """
        Replace the matching row with every field of ``record``.

        The record's concrete class decides which columns are written, so a
        user and an organization each persist their own full shape.
        """
        values = record.to_record()
        values.pop("id", None)
        try:
            matched = (
                self.db.query(type(record))
                .filter(criterion)
                .update(values, synchronize_session="fetch")
            )
            if not matched:
                self.db.rollback()
                raise AccountNotFound()
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise StoreError("Account update failed") from e
