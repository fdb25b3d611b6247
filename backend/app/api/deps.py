from collections.abc import Generator
from typing import Annotated

from fastapi import Depends, Request
from sqlmodel import Session

from app.core.db import Store


def get_store(request: Request) -> Store:
    return request.app.state.store


def get_db(store: Annotated[Store, Depends(get_store)]) -> Generator[Session, None, None]:
    with store.session() as session:
        yield session


SessionDep = Annotated[Session, Depends(get_db)]
