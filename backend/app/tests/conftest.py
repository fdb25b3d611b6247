from collections.abc import Generator

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlmodel import Session

from app.core.db import Store
from app.main import create_app


@pytest.fixture
def store(tmp_path) -> Generator[Store, None, None]:
    db_store = Store(f"sqlite:///{tmp_path / 'prompts.db'}")
    db_store.init()
    yield db_store
    db_store.close()


@pytest.fixture
def session(store: Store) -> Generator[Session, None, None]:
    with store.session() as db_session:
        yield db_session


@pytest.fixture
def app(store: Store) -> FastAPI:
    return create_app(store=store)


@pytest.fixture
def client(app: FastAPI) -> TestClient:
    return TestClient(app)
