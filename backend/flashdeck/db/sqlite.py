import json
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import AsyncIterator

import aiosqlite

from flashdeck.config import settings
from flashdeck.models.card import Card, CardCreate, CardUpdate, ReviewLogEntry
from flashdeck.models.deck import Deck
from flashdeck.models.review import ReviewState

_db_path: Path | None = None

DEFAULT_TAGS = ["Manual"]

SCHEMA_SQL = """
PRAGMA journal_mode=WAL;
PRAGMA foreign_keys=ON;

CREATE TABLE IF NOT EXISTS decks (
    id          TEXT PRIMARY KEY,
    name        TEXT NOT NULL,
    created_at  TEXT NOT NULL,
    updated_at  TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS cards (
    id               TEXT PRIMARY KEY,
    deck_id          TEXT NOT NULL REFERENCES decks(id) ON DELETE CASCADE,
    position         INTEGER NOT NULL,
    question         TEXT NOT NULL,
    answer           TEXT NOT NULL,
    tags             TEXT NOT NULL DEFAULT '[]',
    status           TEXT NOT NULL DEFAULT 'new',
    interval_minutes REAL NOT NULL DEFAULT 0,
    ease             REAL NOT NULL DEFAULT 2.5,
    next_review_at   TEXT,
    review_count     INTEGER NOT NULL DEFAULT 0,
    last_rating      TEXT,
    streak           INTEGER NOT NULL DEFAULT 0,
    created_at       TEXT NOT NULL,
    updated_at       TEXT NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_cards_deck ON cards(deck_id, position);

CREATE TABLE IF NOT EXISTS review_log (
    id               TEXT PRIMARY KEY,
    card_id          TEXT NOT NULL REFERENCES cards(id) ON DELETE CASCADE,
    rating           TEXT NOT NULL,
    status_before    TEXT NOT NULL,
    status_after     TEXT NOT NULL,
    interval_minutes REAL NOT NULL,
    ease             REAL NOT NULL,
    reviewed_at      TEXT NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_review_log_card ON review_log(card_id, reviewed_at);

CREATE TABLE IF NOT EXISTS schema_version (
    version    INTEGER PRIMARY KEY,
    applied_at TEXT NOT NULL DEFAULT (datetime('now'))
);
INSERT OR IGNORE INTO schema_version(version) VALUES (1);

CREATE TABLE IF NOT EXISTS settings (
    key        TEXT PRIMARY KEY,
    value      TEXT NOT NULL DEFAULT '',
    updated_at TEXT NOT NULL DEFAULT (datetime('now'))
);
INSERT OR IGNORE INTO settings(key, value) VALUES ('current_deck', '');
"""


async def init_sqlite(data_dir: Path) -> None:
    global _db_path
    _db_path = data_dir / settings.sqlite_filename
    async with aiosqlite.connect(_db_path) as db:
        await db.executescript(SCHEMA_SQL)
        await db.commit()


async def get_db() -> AsyncIterator[aiosqlite.Connection]:
    assert _db_path is not None, "SQLite not initialized"
    async with aiosqlite.connect(_db_path) as db:
        db.row_factory = aiosqlite.Row
        await db.execute("PRAGMA foreign_keys=ON")
        yield db


def _format_dt(value: datetime | None) -> str | None:
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat()


def _now() -> str:
    return _format_dt(datetime.now(timezone.utc))  # type: ignore[return-value]


# --- Decks ---

_DECK_SELECT = """
    SELECT d.id, d.name, d.created_at, d.updated_at, COUNT(c.id) AS card_count
    FROM decks d
    LEFT JOIN cards c ON c.deck_id = d.id
"""


def _row_to_deck(row: aiosqlite.Row) -> Deck:
    return Deck(**dict(row))


async def create_deck(db: aiosqlite.Connection, name: str) -> Deck:
    deck_id = str(uuid.uuid4())
    now = _now()
    await db.execute(
        "INSERT INTO decks (id, name, created_at, updated_at) VALUES (?, ?, ?, ?)",
        (deck_id, name, now, now),
    )
    await db.commit()
    return await get_deck(db, deck_id)  # type: ignore[return-value]


async def get_deck(db: aiosqlite.Connection, deck_id: str) -> Deck | None:
    cursor = await db.execute(
        _DECK_SELECT + " WHERE d.id = ? GROUP BY d.id", (deck_id,)
    )
    row = await cursor.fetchone()
    return _row_to_deck(row) if row else None


async def list_decks(db: aiosqlite.Connection) -> list[Deck]:
    """All decks, oldest first, with their card counts."""
    cursor = await db.execute(
        _DECK_SELECT + " GROUP BY d.id ORDER BY d.created_at ASC, d.rowid ASC"
    )
    rows = await cursor.fetchall()
    return [_row_to_deck(r) for r in rows]


async def rename_deck(
    db: aiosqlite.Connection, deck_id: str, name: str
) -> Deck | None:
    cursor = await db.execute(
        "UPDATE decks SET name = ?, updated_at = ? WHERE id = ?",
        (name, _now(), deck_id),
    )
    await db.commit()
    if (cursor.rowcount or 0) == 0:
        return None
    return await get_deck(db, deck_id)


async def delete_deck(db: aiosqlite.Connection, deck_id: str) -> bool:
    """Delete a deck and, through the foreign key cascade, all of its cards."""
    cursor = await db.execute("DELETE FROM decks WHERE id = ?", (deck_id,))
    await db.execute(
        "UPDATE settings SET value = '' WHERE key = 'current_deck' AND value = ?",
        (deck_id,),
    )
    await db.commit()
    return (cursor.rowcount or 0) > 0


async def get_current_deck(db: aiosqlite.Connection) -> Deck | None:
    """The selected deck, or the first deck when nothing valid is selected."""
    deck_id = await get_setting(db, "current_deck")
    if deck_id:
        deck = await get_deck(db, deck_id)
        if deck:
            return deck
    decks = await list_decks(db)
    return decks[0] if decks else None


async def set_current_deck(db: aiosqlite.Connection, deck_id: str) -> None:
    await set_setting(db, "current_deck", deck_id)


# --- Cards ---


def _row_to_card(row: aiosqlite.Row) -> Card:
    d = dict(row)
    review = ReviewState(
        status=d.pop("status"),
        interval_minutes=d.pop("interval_minutes"),
        ease=d.pop("ease"),
        next_review_at=d.pop("next_review_at"),
        review_count=d.pop("review_count"),
        last_rating=d.pop("last_rating"),
        streak=d.pop("streak"),
        created_at=d["created_at"],
    )
    d.pop("position", None)
    d["tags"] = json.loads(d["tags"] or "[]")
    return Card(**d, review=review)


async def create_card(
    db: aiosqlite.Connection, deck_id: str, card: CardCreate
) -> Card:
    """Insert a card at the end of *deck_id* with a fresh NEW review state."""
    card_id = str(uuid.uuid4())
    now = _now()
    state = ReviewState.new()
    cursor = await db.execute(
        "SELECT COALESCE(MAX(position), -1) + 1 FROM cards WHERE deck_id = ?",
        (deck_id,),
    )
    position = (await cursor.fetchone())[0]
    await db.execute(
        """INSERT INTO cards
           (id, deck_id, position, question, answer, tags, status,
            interval_minutes, ease, next_review_at, review_count, last_rating,
            streak, created_at, updated_at)
           VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)""",
        (
            card_id,
            deck_id,
            position,
            card.question,
            card.answer,
            json.dumps(card.tags or DEFAULT_TAGS),
            state.status.value,
            state.interval_minutes,
            state.ease,
            None,
            state.review_count,
            None,
            state.streak,
            now,
            now,
        ),
    )
    await db.execute("UPDATE decks SET updated_at = ? WHERE id = ?", (now, deck_id))
    await db.commit()
    return await get_card(db, card_id)  # type: ignore[return-value]


async def get_card(db: aiosqlite.Connection, card_id: str) -> Card | None:
    cursor = await db.execute("SELECT * FROM cards WHERE id = ?", (card_id,))
    row = await cursor.fetchone()
    return _row_to_card(row) if row else None


async def list_cards_for_deck(db: aiosqlite.Connection, deck_id: str) -> list[Card]:
    """Cards of a deck in insertion order."""
    cursor = await db.execute(
        "SELECT * FROM cards WHERE deck_id = ? ORDER BY position ASC", (deck_id,)
    )
    rows = await cursor.fetchall()
    return [_row_to_card(r) for r in rows]


async def update_card_content(
    db: aiosqlite.Connection,
    card_id: str,
    update: CardUpdate,
) -> Card | None:
    card = await get_card(db, card_id)
    if not card:
        return None
    new_q = update.question if update.question is not None else card.question
    new_a = update.answer if update.answer is not None else card.answer
    new_tags = update.tags if update.tags is not None else card.tags
    await db.execute(
        "UPDATE cards SET question = ?, answer = ?, tags = ?, updated_at = ? WHERE id = ?",
        (new_q, new_a, json.dumps(new_tags), _now(), card_id),
    )
    await db.commit()
    return await get_card(db, card_id)


async def delete_card(db: aiosqlite.Connection, card_id: str) -> bool:
    cursor = await db.execute("DELETE FROM cards WHERE id = ?", (card_id,))
    await db.commit()
    return (cursor.rowcount or 0) > 0


async def save_review_state(
    db: aiosqlite.Connection,
    card_id: str,
    state: ReviewState,
    *,
    commit: bool = True,
) -> None:
    await db.execute(
        """UPDATE cards
           SET status = ?, interval_minutes = ?, ease = ?, next_review_at = ?,
               review_count = ?, last_rating = ?, streak = ?, updated_at = ?
           WHERE id = ?""",
        (
            state.status.value,
            state.interval_minutes,
            state.ease,
            _format_dt(state.next_review_at),
            state.review_count,
            state.last_rating.value if state.last_rating else None,
            state.streak,
            _now(),
            card_id,
        ),
    )
    if commit:
        await db.commit()


# --- Review log ---


async def record_review(
    db: aiosqlite.Connection,
    card_id: str,
    before: ReviewState,
    after: ReviewState,
    reviewed_at: datetime,
) -> None:
    """Store the new review state and its log row in one commit."""
    await save_review_state(db, card_id, after, commit=False)
    await db.execute(
        """INSERT INTO review_log
           (id, card_id, rating, status_before, status_after,
            interval_minutes, ease, reviewed_at)
           VALUES (?, ?, ?, ?, ?, ?, ?, ?)""",
        (
            str(uuid.uuid4()),
            card_id,
            after.last_rating.value if after.last_rating else "",
            before.status.value,
            after.status.value,
            after.interval_minutes,
            after.ease,
            _format_dt(reviewed_at),
        ),
    )
    await db.commit()


async def list_review_log(
    db: aiosqlite.Connection, card_id: str, limit: int = 50
) -> list[ReviewLogEntry]:
    cursor = await db.execute(
        """SELECT * FROM review_log WHERE card_id = ?
           ORDER BY reviewed_at DESC, rowid DESC LIMIT ?""",
        (card_id, limit),
    )
    rows = await cursor.fetchall()
    return [ReviewLogEntry(**dict(r)) for r in rows]


# --- Settings key-value store ---


async def get_setting(db: aiosqlite.Connection, key: str) -> str | None:
    cursor = await db.execute("SELECT value FROM settings WHERE key = ?", (key,))
    row = await cursor.fetchone()
    return row[0] if row else None


async def set_setting(db: aiosqlite.Connection, key: str, value: str) -> None:
    now = _now()
    await db.execute(
        "INSERT INTO settings(key, value, updated_at) VALUES (?, ?, ?) "
        "ON CONFLICT(key) DO UPDATE SET value = excluded.value, updated_at = excluded.updated_at",
        (key, value, now),
    )
    await db.commit()
