from __future__ import annotations

import logging
from datetime import date

import pytest
from argon2 import PasswordHasher

import accounts.core.mailer as mailer
from accounts.domain.errors import (
    EmailBelongsToDeletedAccount,
    EmailInUse,
    InvalidDateOfBirth,
    InvalidName,
    InvalidPhoneFormat,
    NotificationFailed,
    PasswordContainsIdentifier,
    PhoneBelongsToDeletedAccount,
    PhoneInUse,
    UnderageUser,
    UserNotFound,
)
from accounts.domain.users import RegisterRequest, UpdateRequest
from accounts.domain.validators import AgeValidator
from accounts.repositories.sql_repository import SQLUserRepository
from accounts.services.notifier import WelcomeNotifier
from accounts.services.user_service import UserService


def _request(**overrides) -> RegisterRequest:
    data = dict(
        username="jdoe",
        email="JOHN@Example.com",
        phone_number="01711223344",
        first_name="John",
        last_name="Doe",
        password="Password123!",
        dob="2000-01-01",
    )
    data.update(overrides)
    return RegisterRequest(**data)


class _RecordingNotifier:
    def __init__(self, error: Exception | None = None):
        self.sent = []
        self.error = error

    def send_welcome(self, to_address, display_name):
        self.sent.append((to_address, display_name))
        if self.error:
            raise self.error


@pytest.fixture()
def repo(db_env):
    return SQLUserRepository()


@pytest.fixture()
def svc(repo):
    return UserService(repo)


# -------------------------------------- register --------------------------------------
def test_register_normalizes_and_hides_password(svc, repo):
    user = svc.register(_request())

    assert user.id
    assert user.email == "john@example.com"
    assert user.phone_number == "+8801711223344"
    assert user.first_name == "John"
    assert user.is_enabled is True
    assert not hasattr(user, "password_hash")
    assert not hasattr(user, "password")

    stored = repo.find_by_id(user.id)
    assert stored.is_deleted is False
    assert stored.created_at is not None
    assert stored.dob == date(2000, 1, 1)
    assert stored.password_hash != "Password123!"
    assert stored.password_hash.startswith("$argon2id$")
    assert PasswordHasher().verify(stored.password_hash, "Password123!")


def test_register_trims_names(svc):
    user = svc.register(_request(first_name="  John ", last_name=" Doe  "))
    assert (user.first_name, user.last_name) == ("John", "Doe")


def test_register_same_email_twice_fails(svc):
    svc.register(_request())
    with pytest.raises(EmailInUse):
        svc.register(_request())
    with pytest.raises(EmailInUse):
        svc.register(_request(email="  john@EXAMPLE.com", phone_number="01811223344"))


def test_register_after_soft_delete_reports_deleted_account(svc):
    first = svc.register(_request())
    assert svc.delete(first.id) is True
    with pytest.raises(EmailBelongsToDeletedAccount):
        svc.register(_request(email="john@example.com"))


def test_register_phone_conflicts(svc):
    first = svc.register(_request())
    with pytest.raises(PhoneInUse):
        svc.register(_request(email="other@example.com", phone_number="+880 1711-223344"))
    svc.delete(first.id)
    with pytest.raises(PhoneBelongsToDeletedAccount):
        svc.register(_request(email="third@example.com"))


def test_register_without_optional_fields(svc):
    user = svc.register(_request(phone_number=None, dob=None))
    assert user.phone_number is None


@pytest.mark.parametrize(
    "overrides, error",
    [
        ({"first_name": "John123"}, InvalidName),
        ({"dob": "2020-01-01"}, UnderageUser),
        ({"phone_number": "12345"}, InvalidPhoneFormat),
        ({"email": "password1@x.com", "password": "Password1!"}, PasswordContainsIdentifier),
    ],
)
def test_register_validation_failures_persist_nothing(svc, repo, overrides, error):
    with pytest.raises(error):
        svc.register(_request(**overrides))
    assert repo.find_all() == []


def test_register_password_rule_depends_on_email(svc):
    user = svc.register(_request(email="other@x.com", password="Password1!"))
    assert user.email == "other@x.com"


def test_register_uses_injected_clock_for_age(repo):
    svc = UserService(repo, age_validator=AgeValidator(today=lambda: date(2026, 10, 18)))
    svc.register(_request(dob="2013-10-18"))
    with pytest.raises(UnderageUser):
        svc.register(_request(email="kid@example.com", phone_number="01811223344", dob="2013-10-19"))


# -------------------------------------- notifications --------------------------------------
def test_register_sends_welcome(repo):
    notifier = _RecordingNotifier()
    svc = UserService(repo, notifier)
    svc.register(_request(display_name="Johnny"))
    assert notifier.sent == [("john@example.com", "Johnny")]


def test_welcome_failure_does_not_fail_registration(repo, caplog):
    svc = UserService(repo, _RecordingNotifier(NotificationFailed("smtp down")))
    with caplog.at_level(logging.WARNING, logger="accounts.services.user_service"):
        user = svc.register(_request())
    assert svc.get_by_id(user.id) is not None
    assert "Welcome notification failed" in caplog.text


def test_unexpected_notifier_error_is_logged_not_raised(repo, caplog):
    svc = UserService(repo, _RecordingNotifier(RuntimeError("boom")))
    with caplog.at_level(logging.ERROR, logger="accounts.services.user_service"):
        user = svc.register(_request())
    assert user.id
    assert "Unexpected error sending welcome notification" in caplog.text


def test_smtp_failure_through_welcome_notifier_is_swallowed(repo, monkeypatch):
    monkeypatch.setattr(mailer, "send_email", lambda *a, **kw: False)
    svc = UserService(repo, WelcomeNotifier())
    user = svc.register(_request())
    assert svc.get_by_id(user.id).email == "john@example.com"


# -------------------------------------- update --------------------------------------
def test_update_invalid_name_fails(svc):
    user = svc.register(_request())
    with pytest.raises(InvalidName) as excinfo:
        svc.update(user.id, UpdateRequest(first_name="J1"))
    assert excinfo.value.field == "first_name"


def test_update_is_sparse(svc):
    user = svc.register(_request())
    updated = svc.update(user.id, UpdateRequest(first_name="  Jonathan "))
    assert updated.first_name == "Jonathan"
    assert updated.last_name == "Doe"
    assert updated.phone_number == "+8801711223344"
    assert updated.username == "jdoe"


def test_update_ignores_identity_and_lifecycle_fields(svc, repo):
    user = svc.register(_request())
    before = repo.find_by_id(user.id)
    updated = svc.update(
        user.id,
        UpdateRequest(
            email="hijack@example.com",
            id="other-id",
            created_at="1999-01-01",
            is_deleted=True,
            is_enabled=False,
            password="Another123!",
            last_name="Smith",
        ),
    )
    after = repo.find_by_id(user.id)
    assert updated.id == user.id
    assert updated.email == "john@example.com"
    assert updated.last_name == "Smith"
    assert after.created_at == before.created_at
    assert after.password_hash == before.password_hash
    assert after.is_enabled is True and after.is_deleted is False


def test_update_with_only_forbidden_fields_changes_nothing(svc):
    user = svc.register(_request())
    assert svc.update(user.id, UpdateRequest(email="x@example.com")) == user


def test_update_phone_rules(svc):
    first = svc.register(_request())
    second = svc.register(_request(email="jane@example.com", phone_number="01811223344", first_name="Jane"))

    same = svc.update(first.id, UpdateRequest(phone_number="+880-1711-223344"))
    assert same.phone_number == "+8801711223344"

    with pytest.raises(PhoneInUse):
        svc.update(second.id, UpdateRequest(phone_number="01711223344"))

    moved = svc.update(second.id, UpdateRequest(phone_number="01911223344"))
    assert moved.phone_number == "+8801911223344"

    cleared = svc.update(second.id, UpdateRequest(phone_number=None))
    assert cleared.phone_number is None


def test_update_phone_owned_by_deleted_account(svc):
    first = svc.register(_request())
    second = svc.register(_request(email="jane@example.com", phone_number="01811223344"))
    svc.delete(first.id)
    with pytest.raises(PhoneBelongsToDeletedAccount):
        svc.update(second.id, UpdateRequest(phone_number="01711223344"))


def test_update_dob_is_age_checked(svc, repo):
    user = svc.register(_request())
    with pytest.raises(UnderageUser):
        svc.update(user.id, UpdateRequest(dob="2020-05-05"))
    svc.update(user.id, UpdateRequest(dob="1990-05-05"))
    assert repo.find_by_id(user.id).dob == date(1990, 5, 5)


def test_update_rejects_unparsable_dob(svc, repo):
    user = svc.register(_request())
    with pytest.raises(InvalidDateOfBirth):
        svc.update(user.id, UpdateRequest(dob="1990-05-05junk"))
    assert repo.find_by_id(user.id).dob == date(2000, 1, 1)


def test_update_missing_or_deleted_user(svc):
    with pytest.raises(UserNotFound):
        svc.update("missing", UpdateRequest(first_name="Jane"))
    user = svc.register(_request())
    svc.delete(user.id)
    with pytest.raises(UserNotFound):
        svc.update(user.id, UpdateRequest(first_name="Jane"))


# -------------------------------------- reads & lifecycle --------------------------------------
def test_get_by_id_hides_deleted_users(svc):
    user = svc.register(_request())
    assert svc.get_by_id(user.id) == user
    svc.delete(user.id)
    assert svc.get_by_id(user.id) is None
    assert svc.get_by_id("no-such-id") is None


def test_list_users_excludes_deleted(svc):
    first = svc.register(_request())
    second = svc.register(_request(email="jane@example.com", phone_number="01811223344"))
    svc.delete(first.id)
    assert [u.id for u in svc.list_users()] == [second.id]


def test_toggle_status_flips_enabled_flag(svc):
    user = svc.register(_request())
    assert svc.toggle_status(user.id) is True
    assert svc.get_by_id(user.id).is_enabled is False
    assert svc.toggle_status(user.id) is True
    assert svc.get_by_id(user.id).is_enabled is True


def test_toggle_status_on_missing_or_removed_user(svc):
    with pytest.raises(UserNotFound):
        svc.toggle_status("missing")
    user = svc.register(_request())
    svc.delete(user.id)
    with pytest.raises(UserNotFound):
        svc.toggle_status(user.id)


def test_delete_soft_deletes_and_disables(svc, repo):
    user = svc.register(_request())
    svc.toggle_status(user.id)
    assert svc.delete(user.id) is True

    stored = repo.find_by_id(user.id)
    assert stored is not None
    assert stored.is_deleted is True
    assert stored.is_enabled is False

    with pytest.raises(UserNotFound):
        svc.delete(user.id)
    with pytest.raises(UserNotFound):
        svc.delete("missing")
