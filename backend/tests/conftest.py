import os

# Must be set before config/database are imported anywhere
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["OPENROUTER_API_KEY"] = ""

from datetime import datetime, timedelta

import pytest
from fastapi.testclient import TestClient

from auth import create_token, hash_password
from database import Base, SessionLocal, engine
import models  # noqa: F401
from models.user import User

NOW = datetime(2025, 3, 12, 10, 30)  # a Wednesday
YESTERDAY = NOW - timedelta(days=1)


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def make_user(db):
    counter = {"n": 0}

    def _make(username=None, **fields):
        counter["n"] += 1
        user = User(
            username=username or f"player{counter['n']}",
            hashed_password=hash_password("secret"),
            mission_requests=[],
            **fields,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make


@pytest.fixture
def client(db):
    from main import app

    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


def auth_headers(user) -> dict:
    return {"Authorization": f"Bearer {create_token({'user_id': user.id, 'username': user.username})}"}
