from __future__ import annotations

import dataclasses
from datetime import datetime
from typing import Optional

import pytest
from werkzeug.security import generate_password_hash

from src.ustabul.ustabul.core.enums import Role
from src.ustabul.ustabul.core.exceptions import AuthenticationError, AuthorizationError, ValidationError
from src.ustabul.ustabul.masters.model import MasterProfile
from src.ustabul.ustabul.users.model import CustomerProfile, User
from src.ustabul.ustabul.users.service import AuthService, detect_device


class InMemoryUsers:
    def __init__(self):
        self.users: dict[int, User] = {}
        self.customers: dict[int, CustomerProfile] = {}
        self.masters: dict[int, MasterProfile] = {}

    def get_by_id(self, user_id: int) -> Optional[User]:
        return self.users.get(user_id)

    def get_by_email(self, email: str) -> Optional[User]:
        return next((u for u in self.users.values() if u.email == email), None)

    def get_by_phone(self, phone: str) -> Optional[User]:
        return next((u for u in self.users.values() if u.phone == phone), None)

    def create_user(self, *, email, phone, password_hash, role, first_name, last_name) -> int:
        user_id = len(self.users) + 1
        self.users[user_id] = User(user_id=user_id, email=email, phone=phone, password_hash=password_hash, role=role)
        if role == Role.MASTER:
            self.masters[user_id] = MasterProfile(
                master_id=user_id * 10, user_id=user_id, first_name=first_name, last_name=last_name
            )
        else:
            self.customers[user_id] = CustomerProfile(
                customer_id=user_id * 10, user_id=user_id, first_name=first_name, last_name=last_name
            )
        return user_id

    def get_customer_profile(self, user_id: int) -> Optional[CustomerProfile]:
        return self.customers.get(user_id)

    def get_by_user_id(self, user_id: int) -> Optional[MasterProfile]:
        return self.masters.get(user_id)


@pytest.fixture
def repo():
    return InMemoryUsers()


@pytest.fixture
def auth(repo):
    return AuthService(repo, repo)


def register(auth, **overrides):
    values = dict(email="Aysel@Mail.az", password="secret1", first_name="Aysel", last_name="Məmmədova")
    values.update(overrides)
    return auth.register(**values)


def test_register_customer_and_login(auth):
    user_id = register(auth, phone="050 123 45 67")

    session_user = auth.authenticate("aysel@mail.az", "secret1")

    assert session_user.user_id == user_id
    assert session_user.role == Role.CUSTOMER
    assert session_user.customer_id == user_id * 10
    assert session_user.master_id is None
    assert session_user.full_name == "Aysel Məmmədova"


def test_register_as_master_creates_master_profile(auth):
    user_id = register(auth, role="master")

    session_user = auth.session_user(user_id)

    assert session_user.role == Role.MASTER
    assert session_user.master_id == user_id * 10


def test_admin_role_cannot_be_self_assigned(auth):
    user_id = register(auth, role="ADMIN")

    assert auth.session_user(user_id).role == Role.CUSTOMER


def test_duplicate_email_rejected(auth):
    register(auth)

    with pytest.raises(ValidationError):
        register(auth, email="aysel@mail.az")


@pytest.mark.parametrize(
    "overrides",
    [{"email": ""}, {"password": "123"}, {"email": "not-an-email"}, {"first_name": ""}],
)
def test_register_validation(auth, overrides):
    with pytest.raises(ValidationError):
        register(auth, **overrides)


def test_wrong_password(auth):
    register(auth)

    with pytest.raises(AuthenticationError):
        auth.authenticate("aysel@mail.az", "wrong-password")


def test_unknown_email(auth):
    with pytest.raises(AuthenticationError):
        auth.authenticate("ghost@mail.az", "secret1")


def test_blocked_user_cannot_login(auth, repo):
    user_id = register(auth)
    repo.users[user_id] = dataclasses.replace(repo.users[user_id], is_active=False)

    with pytest.raises(AuthorizationError):
        auth.authenticate("aysel@mail.az", "secret1")


def test_unverified_email_blocks_login_when_required(repo):
    strict = AuthService(repo, repo, require_verified_email=True)
    repo.users[1] = User(
        user_id=1, email="a@mail.az", phone=None, password_hash=generate_password_hash("secret1"), role=Role.CUSTOMER
    )

    with pytest.raises(AuthenticationError):
        strict.authenticate("a@mail.az", "secret1")

    repo.users[1] = dataclasses.replace(repo.users[1], email_verified_at=datetime(2025, 3, 1))
    assert strict.authenticate("a@mail.az", "secret1").user_id == 1


def test_corrupted_hash_is_a_failed_login(repo, auth):
    repo.users[1] = User(user_id=1, email="a@mail.az", phone=None, password_hash="plain", role=Role.CUSTOMER)

    with pytest.raises(AuthenticationError):
        auth.authenticate("a@mail.az", "plain")


@pytest.mark.parametrize(
    "agent, device",
    [
        ("Mozilla/5.0 (iPhone; CPU iPhone OS 17_0)", "Mobile"),
        ("Mozilla/5.0 (iPad; CPU OS 17_0)", "Tablet"),
        ("Mozilla/5.0 (Windows NT 10.0; Win64; x64)", "Desktop"),
        ("", "Desktop"),
    ],
)
def test_detect_device(agent, device):
    assert detect_device(agent) == device
