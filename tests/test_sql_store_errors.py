import asyncio
from contextlib import asynccontextmanager
from uuid import uuid4

import pytest
from sqlalchemy.exc import OperationalError

from quizplay.db.store import SqlQuizStore
from quizplay.game.sessions.errors import PersistenceError


class _UnreachableDatabase:
    def __init__(self, exc: Exception) -> None:
        self.exc = exc

    @asynccontextmanager
    async def begin(self):
        raise self.exc
        yield


@pytest.mark.parametrize(
    "failure",
    [
        ConnectionRefusedError("connection refused"),
        OSError("network unreachable"),
        asyncio.TimeoutError(),
        OperationalError("SELECT 1", {}, Exception("server closed the connection")),
    ],
)
@pytest.mark.asyncio
async def test_driver_failures_surface_as_persistence_errors(failure: Exception) -> None:
    store = SqlQuizStore(_UnreachableDatabase(failure))

    with pytest.raises(PersistenceError) as exc_info:
        await store.load_quiz(uuid4())

    assert exc_info.value.__cause__ is failure
