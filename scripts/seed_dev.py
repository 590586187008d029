#!/usr/bin/env python
"""Seed development database with fixture data.

Seeds one team with an admin, a viewer, a group, a collection and a
published document, for trying mention suggestions locally.

Constraints:
- Refuses to run in staging or prod (LOOM_ENV check)
- Idempotent via ON CONFLICT DO NOTHING
- Never runs automatically (manual invocation only)

Usage:
    cd python && DATABASE_URL=... uv run python ../scripts/seed_dev.py
"""

import asyncio
import json
import os
import sys


async def seed(database_url: str) -> dict[str, bool]:
    from sqlalchemy import text
    from sqlalchemy.ext.asyncio import create_async_engine

    from tests.fixtures import (
        FIXTURE_ADMIN_EMAIL,
        FIXTURE_ADMIN_ID,
        FIXTURE_ADMIN_NAME,
        FIXTURE_COLLECTION_ID,
        FIXTURE_COLLECTION_NAME,
        FIXTURE_DOCUMENT_ID,
        FIXTURE_DOCUMENT_TITLE,
        FIXTURE_DOCUMENT_URL_ID,
        FIXTURE_GROUP_ID,
        FIXTURE_GROUP_NAME,
        FIXTURE_TEAM_ID,
        FIXTURE_TEAM_NAME,
        FIXTURE_VIEWER_EMAIL,
        FIXTURE_VIEWER_ID,
        FIXTURE_VIEWER_NAME,
    )

    statements = [
        (
            "team",
            """
            INSERT INTO teams (id, name, preferences)
            VALUES (:id, :name, CAST(:preferences AS jsonb))
            ON CONFLICT (id) DO NOTHING
            RETURNING id
            """,
            {
                "id": FIXTURE_TEAM_ID,
                "name": FIXTURE_TEAM_NAME,
                "preferences": json.dumps({"restrictExternalDirectory": True}),
            },
        ),
        (
            "admin",
            """
            INSERT INTO users (id, team_id, name, email, role)
            VALUES (:id, :team_id, :name, :email, 'admin')
            ON CONFLICT (id) DO NOTHING
            RETURNING id
            """,
            {
                "id": FIXTURE_ADMIN_ID,
                "team_id": FIXTURE_TEAM_ID,
                "name": FIXTURE_ADMIN_NAME,
                "email": FIXTURE_ADMIN_EMAIL,
            },
        ),
        (
            "viewer",
            """
            INSERT INTO users (id, team_id, name, email, role)
            VALUES (:id, :team_id, :name, :email, 'viewer')
            ON CONFLICT (id) DO NOTHING
            RETURNING id
            """,
            {
                "id": FIXTURE_VIEWER_ID,
                "team_id": FIXTURE_TEAM_ID,
                "name": FIXTURE_VIEWER_NAME,
                "email": FIXTURE_VIEWER_EMAIL,
            },
        ),
        (
            "group",
            """
            INSERT INTO groups (id, team_id, name)
            VALUES (:id, :team_id, :name)
            ON CONFLICT (id) DO NOTHING
            RETURNING id
            """,
            {"id": FIXTURE_GROUP_ID, "team_id": FIXTURE_TEAM_ID, "name": FIXTURE_GROUP_NAME},
        ),
        (
            "group membership",
            """
            INSERT INTO group_users (group_id, user_id)
            VALUES (:group_id, :admin_id), (:group_id, :viewer_id)
            ON CONFLICT (group_id, user_id) DO NOTHING
            RETURNING group_id
            """,
            {
                "group_id": FIXTURE_GROUP_ID,
                "admin_id": FIXTURE_ADMIN_ID,
                "viewer_id": FIXTURE_VIEWER_ID,
            },
        ),
        (
            "collection",
            """
            INSERT INTO collections (id, team_id, name, permission)
            VALUES (:id, :team_id, :name, 'read_write')
            ON CONFLICT (id) DO NOTHING
            RETURNING id
            """,
            {
                "id": FIXTURE_COLLECTION_ID,
                "team_id": FIXTURE_TEAM_ID,
                "name": FIXTURE_COLLECTION_NAME,
            },
        ),
        (
            "document",
            """
            INSERT INTO documents
                (id, team_id, collection_id, created_by_id, title, url_id, published_at)
            VALUES (:id, :team_id, :collection_id, :created_by_id, :title, :url_id, now())
            ON CONFLICT (id) DO NOTHING
            RETURNING id
            """,
            {
                "id": FIXTURE_DOCUMENT_ID,
                "team_id": FIXTURE_TEAM_ID,
                "collection_id": FIXTURE_COLLECTION_ID,
                "created_by_id": FIXTURE_ADMIN_ID,
                "title": FIXTURE_DOCUMENT_TITLE,
                "url_id": FIXTURE_DOCUMENT_URL_ID,
            },
        ),
    ]

    engine = create_async_engine(database_url)
    created: dict[str, bool] = {}
    try:
        async with engine.begin() as conn:
            for label, sql, params in statements:
                result = await conn.execute(text(sql), params)
                created[label] = result.first() is not None
    finally:
        await engine.dispose()
    return created


def main():
    # 1. Environment check (hard fail in staging/prod)
    loom_env = os.getenv("LOOM_ENV", "local")
    if loom_env not in ("local", "test"):
        print(f"ERROR: seed_dev.py refuses to run in LOOM_ENV={loom_env}")
        sys.exit(1)

    # 2. Check DATABASE_URL
    database_url = os.getenv("DATABASE_URL")
    if not database_url:
        print("ERROR: DATABASE_URL environment variable must be set")
        sys.exit(1)

    # 3. Idempotent seeding
    created = asyncio.run(seed(database_url))

    # 4. Report
    db_display = database_url.split("@")[1] if "@" in database_url else database_url
    print(f"Database: {db_display}")
    print(f"LOOM_ENV: {loom_env}")
    print()
    for label, was_created in created.items():
        print(f"{'✓ Created' if was_created else '• Exists'}: {label}")


if __name__ == "__main__":
    main()
