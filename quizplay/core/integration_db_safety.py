from __future__ import annotations

import re
from dataclasses import dataclass

from sqlalchemy.engine import make_url

TEST_DB_NAME_RE = re.compile(r"test", re.IGNORECASE)
ALLOWED_LOCAL_HOSTS = frozenset({"localhost", "127.0.0.1", "::1", "postgres", "quizplay_postgres"})


@dataclass(frozen=True, slots=True)
class IntegrationDbSafetyResult:
    is_safe: bool
    reason: str
    database_name: str
    host: str


def assess_integration_db_safety(database_url: str) -> IntegrationDbSafetyResult:
    parsed = make_url(database_url)
    db_name = (parsed.database or "").strip()
    host = (parsed.host or "").strip().lower()

    checks: tuple[tuple[bool, str], ...] = (
        (
            parsed.get_backend_name() == "postgresql",
            "Integration tests run only against PostgreSQL.",
        ),
        (bool(db_name), "Database name is empty."),
        (
            TEST_DB_NAME_RE.search(db_name) is not None,
            "Database name must contain 'test'.",
        ),
        (host in ALLOWED_LOCAL_HOSTS, "Host is not an allowed local test host."),
    )
    for passed, reason in checks:
        if not passed:
            return IntegrationDbSafetyResult(
                is_safe=False,
                reason=reason,
                database_name=db_name,
                host=host,
            )
    return IntegrationDbSafetyResult(is_safe=True, reason="ok", database_name=db_name, host=host)


def assert_safe_integration_db(database_url: str) -> None:
    result = assess_integration_db_safety(database_url)
    if result.is_safe:
        return

    raise RuntimeError(
        "Refusing to truncate tables for integration tests.\n"
        f"Reason: {result.reason}\n"
        f"Resolved DB: name='{result.database_name}' host='{result.host}'\n"
        "Use a dedicated local PostgreSQL test DB, e.g. 'quizplay_test'."
    )
