import pytest

from rapidworker.actions import build_action
from rapidworker.context import Context

pytest.importorskip("aiosqlite")


@pytest.fixture
def sqlite_url(tmp_path):
    return f"sqlite:///{tmp_path / 'worker.db'}"


async def _run(sqlite_url, query, context, **extra):
    action = build_action(
        "Database.query",
        {"dialect": "sqlite", "connection": sqlite_url, "query": query, **extra},
    )
    return await action.evaluate(context)


@pytest.mark.asyncio
async def test_query_rows_land_in_response_and_context(sqlite_url):
    context = Context({})
    assert (await _run(sqlite_url, "CREATE TABLE users (id INTEGER, name TEXT)", context)).success
    assert (await _run(sqlite_url, "INSERT INTO users VALUES (1, 'Ann'), (2, 'Bob')", context)).success

    outcome = await _run(
        sqlite_url,
        "SELECT id, name FROM users WHERE id >= :min ORDER BY id",
        context,
        params={"min": 1},
        variable="users",
    )
    assert outcome.success
    assert outcome.response["data"] == [{"id": 1, "name": "Ann"}, {"id": 2, "name": "Bob"}]
    assert context.get("users") == outcome.response["data"]
    assert outcome.action_reports[0].short_summary == "sqlite query returned 2 row(s)"


@pytest.mark.asyncio
async def test_bad_sql_is_a_failure_report(sqlite_url):
    outcome = await _run(sqlite_url, "SELECT * FROM does_not_exist", Context({}))
    assert len(outcome.action_reports) == 1
    report = outcome.action_reports[0]
    assert report.success is False
    assert report.short_summary.startswith("sqlite query failed")
    assert report.time >= 0


@pytest.mark.asyncio
async def test_missing_query_fails_fast(sqlite_url):
    action = build_action("Database.query", {"dialect": "sqlite", "connection": sqlite_url})
    outcome = await action.evaluate(Context({}))
    assert outcome.action_reports[0].short_summary == "Query must be provided, got none"
