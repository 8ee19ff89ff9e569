"""Shared fixtures: throwaway SQLite database, accounts and an app client."""

from __future__ import annotations

import os

# Settings are read at import time; tests never touch a real database.
os.environ.setdefault("DATABASE_URL", "sqlite://")

from dataclasses import dataclass
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from vetclinic.api.v1.routes.deps import get_db
from vetclinic.core.identity import Caller, create_identity, resolve_caller
from vetclinic.core.security import issue_token
from vetclinic.db.init_db import init_db
from vetclinic.db.models.owner import Owner
from vetclinic.db.models.pet import Pet
from vetclinic.db.models.treatment import Treatment
from vetclinic.db.models.user import ROLE_ADMIN, ROLE_STANDARD, User
from vetclinic.db.models.vet import Vet
from vetclinic.main import app
from vetclinic.services.notifications import get_notification_service


@dataclass
class Account:
    user: User
    owner: Owner | None
    caller: Caller
    headers: dict[str, str]


class RecordingNotifier:
    """Stands in for the notification service; remembers every send."""

    def __init__(self, result: bool = True, error: Exception | None = None):
        self.result = result
        self.error = error
        self.sent: list[tuple[str | None, str, dict[str, str]]] = []

    async def send_notification(self, recipient, template_name, parameters):
        self.sent.append((recipient, template_name, dict(parameters)))
        if self.error is not None:
            raise self.error
        return self.result


@pytest.fixture
def session_factory(tmp_path):
    engine = create_engine(
        f"sqlite:///{tmp_path / 'clinic.db'}",
        connect_args={"check_same_thread": False},
    )
    init_db(bind=engine)
    yield sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)
    engine.dispose()


@pytest.fixture
def db(session_factory) -> Session:
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def client(session_factory, notifier):
    def _get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_notification_service] = lambda: notifier
    yield TestClient(app)
    app.dependency_overrides.clear()


def make_account(
    db: Session,
    username: str,
    *,
    admin: bool = False,
    with_owner: bool = True,
    phone_number: str | None = "555-0100",
) -> Account:
    roles = (ROLE_ADMIN,) if admin else (ROLE_STANDARD,)
    user = create_identity(db, username, f"{username}@example.com", "secret123", roles)
    owner = None
    if with_owner:
        owner = Owner(
            first_name=username.title(),
            last_name="Tester",
            email=f"{username}@example.com",
            phone_number=phone_number,
            user_id=user.user_id,
        )
        db.add(owner)
    db.commit()
    return Account(
        user=user,
        owner=owner,
        caller=resolve_caller(db, user),
        headers={"Authorization": f"Bearer {issue_token(user.user_id)}"},
    )


def make_pet(db: Session, owner: Owner, name: str = "Rex", species: str = "Dog") -> Pet:
    pet = Pet(owner_id=owner.owner_id, name=name, species=species, age=3)
    db.add(pet)
    db.commit()
    return pet


@pytest.fixture
def admin(db) -> Account:
    return make_account(db, "admin", admin=True, with_owner=False)


@pytest.fixture
def alice(db) -> Account:
    return make_account(db, "alice", phone_number="555-0101")


@pytest.fixture
def bob(db) -> Account:
    return make_account(db, "bob", phone_number="555-0102")


@pytest.fixture
def vet(db) -> Vet:
    vet = Vet(first_name="Gregory", last_name="House", years_of_experience=20)
    db.add(vet)
    db.commit()
    return vet


@pytest.fixture
def treatment(db) -> Treatment:
    treatment = Treatment(name="General Checkup", cost=Decimal("50.00"))
    db.add(treatment)
    db.commit()
    return treatment
