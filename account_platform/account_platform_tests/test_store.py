"""
Tests for account lookups and whole-record updates.
"""
from unittest.mock import Mock

import pytest
from sqlalchemy.exc import OperationalError

from account_platform.account_platform.auth_service.models import Account, Organization, User, ORGANIZATION
from account_platform.account_platform.auth_service.store import (
    AccountNotFound,
    AccountStore,
    StoreError,
    account_query,
    is_email_identifier,
    login_criteria,
    parse_encoded_email,
)


def test_identifier_detection():
    assert is_email_identifier("alice@example.com")
    assert is_email_identifier("alice%40example.com")
    assert not is_email_identifier("4f1c2a")
    assert parse_encoded_email("alice%40example.com") == "alice@example.com"


def test_find_by_identifier(db_session, create_account):
    acc = create_account()
    store = AccountStore(db_session)

    assert store.find_by_identifier(acc["id"]).username == "alice"
    assert store.find_by_identifier("alice@example.com").id == acc["id"]
    assert store.find_by_identifier("alice%40example.com").id == acc["id"]


def test_find_by_login_identifier(db_session, create_account):
    acc = create_account()
    store = AccountStore(db_session)

    assert store.find_first_match(login_criteria("alice")).id == acc["id"]
    assert store.find_first_match(login_criteria("alice@example.com")).id == acc["id"]
    assert store.find_first_match(login_criteria("alice%40example.com")).id == acc["id"]
    assert store.find_first_match(login_criteria(acc["id"])).id == acc["id"]


def test_login_identifier_prefers_email_over_username(db_session, create_account):
    owner = create_account(username="owner", email="shared@example.com")
    create_account(username="shared@example.com", email="other@example.com")
    store = AccountStore(db_session)

    for _ in range(3):
        assert store.find_first_match(login_criteria("shared@example.com")).id == owner["id"]


def test_login_identifier_prefers_username_over_id(db_session, create_account):
    first = create_account(username="first")
    # Username equal to the other account's id
    second = create_account(username=first["id"], email="second@example.com")
    store = AccountStore(db_session)

    assert store.find_first_match(login_criteria(first["id"])).id == second["id"]


def test_find_first_match_not_found(db_session):
    with pytest.raises(AccountNotFound):
        AccountStore(db_session).find_first_match(login_criteria("nobody"))


def test_lookups_return_concrete_types(db_session, create_account):
    user = create_account()
    org = create_account(username="acme", account_type=ORGANIZATION)
    store = AccountStore(db_session)

    assert isinstance(store.find_by_id(user["id"]), User)
    assert isinstance(store.find_by_id(org["id"]), Organization)


def test_not_found(db_session):
    store = AccountStore(db_session)

    with pytest.raises(AccountNotFound):
        store.find_one(Account.username == "nobody")
    with pytest.raises(AccountNotFound):
        store.find_by_id("missing")
    with pytest.raises(AccountNotFound):
        store.find_by_identifier("nobody@example.com")


def test_database_errors_are_wrapped():
    db = Mock()
    db.query.side_effect = OperationalError("SELECT", {}, Exception("database is locked"))
    db.get.side_effect = OperationalError("SELECT", {}, Exception("database is locked"))
    store = AccountStore(db)

    with pytest.raises(StoreError):
        store.find_one(Account.username == "alice")
    with pytest.raises(StoreError):
        store.find_by_id("abc")
    with pytest.raises(StoreError):
        store.find_first_match(login_criteria("alice"))


def test_update_replaces_whole_record(db_session, create_account, load_account):
    acc = create_account(first_name="Alice", last_name="Liddell")
    store = AccountStore(db_session)
    account = store.find_by_id(acc["id"])

    replacement = account.replaced(auth_key="new-key", first_name="Alicia", password_reset_token=None)
    store.update(account_query(acc["id"]), replacement)

    saved = load_account(acc["id"])
    assert saved.auth_key == "new-key"
    assert saved.first_name == "Alicia"
    assert saved.last_name == "Liddell"
    assert saved.email == "alice@example.com"


def test_update_organization(db_session, create_account, load_account):
    acc = create_account(username="acme", account_type=ORGANIZATION, preferred_name="Acme")
    store = AccountStore(db_session)
    account = store.find_by_id(acc["id"])

    store.update(account_query(acc["id"]), account.replaced(preferred_name="Acme Inc."))

    saved = load_account(acc["id"])
    assert isinstance(saved, Organization)
    assert saved.preferred_name == "Acme Inc."


def test_update_missing_account(db_session, create_account):
    acc = create_account()
    store = AccountStore(db_session)
    replacement = store.find_by_id(acc["id"]).replaced(auth_key="x")

    with pytest.raises(AccountNotFound):
        store.update(account_query("0" * 32), replacement)


def test_replaced_keeps_concrete_shape(db_session, create_account):
    acc = create_account(username="acme", account_type=ORGANIZATION, preferred_name="Acme")
    account = AccountStore(db_session).find_by_id(acc["id"])

    copy = account.replaced(auth_key="k2")
    assert isinstance(copy, Organization)
    assert copy.id == account.id
    assert copy.preferred_name == "Acme"
    assert copy.auth_key == "k2"


def test_replaced_rejects_fields_of_other_kinds(db_session, create_account):
    acc = create_account()
    account = AccountStore(db_session).find_by_id(acc["id"])

    with pytest.raises(ValueError):
        account.replaced(preferred_name="Not a user field")
