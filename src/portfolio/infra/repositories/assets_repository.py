"""Profile photo and resume storage.

Each asset type is an append-only table; the most recent row is the current
asset. Values are stored as the data URL the browser uploaded.
"""

from __future__ import annotations

from typing import Literal

from psycopg2.extensions import cursor as PgCursor

from portfolio.infra.db import fetchone

AssetKind = Literal["photo", "resume"]

# kind -> (table, column). Identifiers are fixed here, never user input.
_ASSET_TABLES: dict[str, tuple[str, str]] = {
    "photo": ("profile_photos", "photo"),
    "resume": ("resumes", "resume"),
}


def _table_for(kind: AssetKind) -> tuple[str, str]:
    try:
        return _ASSET_TABLES[kind]
    except KeyError:
        raise ValueError(f"unknown asset kind: {kind}") from None


def insert_asset(cur: PgCursor, kind: AssetKind, data: str) -> None:
    """Store a new version of an asset. Older versions are kept."""
    table, column = _table_for(kind)
    cur.execute(
        f"INSERT INTO {table} ({column}) VALUES (%s)",
        (data,),
    )


def get_latest_asset(cur: PgCursor, kind: AssetKind) -> str | None:
    """Return the most recently stored asset, or None if none was uploaded."""
    table, column = _table_for(kind)
    row = fetchone(
        cur,
        f"""
        SELECT {column}
        FROM {table}
        ORDER BY created_at DESC, id DESC
        LIMIT 1
        """,
    )
    if row is None:
        return None
    return row[0]


def to_pdf_data_url(stored: str) -> str:
    """Re-wrap a stored resume data URL as application/pdf.

    The payload is everything after the first comma; a value without a
    comma is treated as a bare base64 payload.
    """
    _, sep, payload = stored.partition(",")
    if not sep:
        payload = stored
    return f"data:application/pdf;base64,{payload}"
