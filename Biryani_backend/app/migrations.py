from datetime import datetime, timezone
from sqlalchemy import text


async def table_columns(conn, table: str) -> set[str]:
    result = await conn.execute(text(f"PRAGMA table_info({table})"))
    return {row["name"] for row in result.mappings()}


async def add_created_at_to_reports(conn):
    # 旧库的 reports 表没有 created_at
    if "created_at" not in await table_columns(conn, "reports"):
        await conn.execute(text("ALTER TABLE reports ADD COLUMN created_at DATETIME"))


MIGRATIONS = [
    ("202410_add_created_at_to_reports", add_created_at_to_reports),
]


async def run_migrations(conn):
    """Apply every migration in ``MIGRATIONS`` that ``schema_migrations`` has not recorded yet."""
    await conn.execute(text(
        "CREATE TABLE IF NOT EXISTS schema_migrations (name TEXT PRIMARY KEY, applied_at TEXT)"
    ))
    applied = {name for (name,) in await conn.execute(text("SELECT name FROM schema_migrations"))}
    for name, handler in MIGRATIONS:
        if name in applied:
            continue
        await handler(conn)
        await conn.execute(
            text("INSERT INTO schema_migrations (name, applied_at) VALUES (:name, :applied_at)"),
            {"name": name, "applied_at": datetime.now(timezone.utc).isoformat()},
        )
