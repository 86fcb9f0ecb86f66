"""SQLite database connection and schema management.

Provides connection management and schema initialization for the tracker.
"""

from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Generator

import structlog

logger = structlog.get_logger(__name__)

# Default database location
DEFAULT_DB_PATH = Path("db/preptrack.db")

# Current database (module-level, set by init_db)
_db_path: Path | None = None


def init_db(db_path: Path | None = None) -> None:
    """Initialize database with schema.

    Creates the database file and all required tables if they don't exist.

    Args:
        db_path: Path to database file. Defaults to db/preptrack.db
    """
    global _db_path
    _db_path = Path(db_path) if db_path else DEFAULT_DB_PATH

    _db_path.parent.mkdir(parents=True, exist_ok=True)

    with get_db() as conn:
        _create_schema(conn)

    logger.info("database.initialized", path=str(_db_path))


def get_db_path() -> Path:
    """Path of the active database."""
    return _db_path or DEFAULT_DB_PATH


def _connect() -> sqlite3.Connection:
    db_path = get_db_path()
    db_path.parent.mkdir(parents=True, exist_ok=True)

    conn = sqlite3.connect(db_path, timeout=10)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")
    return conn


@contextmanager
def get_db() -> Generator[sqlite3.Connection, None, None]:
    """Get database connection as context manager.

    Commits on success, rolls back if the block raises.

    Yields:
        SQLite connection with row factory set to sqlite3.Row

    Example:
        with get_db() as conn:
            rows = conn.execute("SELECT * FROM users").fetchall()
    """
    conn = _connect()
    try:
        yield conn
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


@contextmanager
def transaction() -> Generator[sqlite3.Connection, None, None]:
    """Connection holding the write lock for a read-modify-write sequence.

    Starts with BEGIN IMMEDIATE so concurrent writers serialize on the
    database lock instead of interleaving between the read and the write.
    """
    conn = _connect()
    try:
        conn.execute("BEGIN IMMEDIATE")
        yield conn
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def _create_schema(conn: sqlite3.Connection) -> None:
    """Create database schema.

    Uses IF NOT EXISTS for idempotency.
    """
    conn.executescript(
        """
        -- Profiles and credentials
        CREATE TABLE IF NOT EXISTS users (
            uid TEXT PRIMARY KEY,
            display_name TEXT NOT NULL,
            email TEXT NOT NULL UNIQUE,
            photo_url TEXT,
            password_hash TEXT,
            pattern_hash TEXT,
            class_level TEXT,
            target_year INTEGER,
            exam TEXT CHECK(exam IN ('NEET', 'JEE')),
            onboarding_completed INTEGER NOT NULL DEFAULT 0,
            role TEXT NOT NULL DEFAULT 'user' CHECK(role IN ('admin', 'subadmin', 'user')),
            is_banned INTEGER NOT NULL DEFAULT 0,
            ban_expires_at TEXT,
            has_pending_unban_request INTEGER NOT NULL DEFAULT 0,
            is_deleted INTEGER NOT NULL DEFAULT 0,
            theme TEXT NOT NULL DEFAULT 'default',
            font TEXT NOT NULL DEFAULT 'poppins',
            dark_mode INTEGER NOT NULL DEFAULT 1,
            current_streak INTEGER NOT NULL DEFAULT 0,
            longest_streak INTEGER NOT NULL DEFAULT 0,
            last_goal_completed_date TEXT,
            total_points INTEGER NOT NULL DEFAULT 0,
            is_premium INTEGER NOT NULL DEFAULT 0,
            access_code TEXT,
            account_status TEXT CHECK(account_status IN ('pending_approval', 'active', 'demo')),
            login_code TEXT,
            spectate_status TEXT NOT NULL DEFAULT 'none' CHECK(spectate_status IN ('granted', 'none')),
            spectate_granted_at TEXT,
            spectate_expires_at TEXT,
            spectating_admin_id TEXT,
            created_at TEXT NOT NULL
        );

        CREATE TABLE IF NOT EXISTS auth_tokens (
            token TEXT PRIMARY KEY,
            uid TEXT NOT NULL REFERENCES users(uid) ON DELETE CASCADE,
            created_at TEXT NOT NULL,
            expires_at TEXT NOT NULL
        );

        -- Editable syllabus, one row per (exam, subject)
        CREATE TABLE IF NOT EXISTS syllabuses (
            id TEXT PRIMARY KEY,
            exam TEXT NOT NULL CHECK(exam IN ('NEET', 'JEE')),
            subject TEXT NOT NULL,
            chapters TEXT NOT NULL DEFAULT '[]',
            updated_at TEXT NOT NULL
        );

        CREATE TABLE IF NOT EXISTS chapter_progress (
            uid TEXT NOT NULL REFERENCES users(uid) ON DELETE CASCADE,
            subject TEXT NOT NULL,
            chapter TEXT NOT NULL,
            completed INTEGER NOT NULL DEFAULT 0,
            questions INTEGER NOT NULL DEFAULT 0,
            confidence INTEGER NOT NULL DEFAULT 50,
            revisions TEXT NOT NULL DEFAULT '[]',
            PRIMARY KEY (uid, subject, chapter)
        );

        CREATE TABLE IF NOT EXISTS subject_revisions (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            uid TEXT NOT NULL REFERENCES users(uid) ON DELETE CASCADE,
            subject TEXT NOT NULL,
            timestamp INTEGER NOT NULL,
            questions INTEGER NOT NULL DEFAULT 0
        );

        CREATE TABLE IF NOT EXISTS daily_goals (
            uid TEXT NOT NULL REFERENCES users(uid) ON DELETE CASCADE,
            date TEXT NOT NULL,
            goals TEXT NOT NULL DEFAULT '[]',
            completed INTEGER NOT NULL DEFAULT 0,
            updated_at TEXT NOT NULL,
            PRIMARY KEY (uid, date)
        );

        CREATE TABLE IF NOT EXISTS mistakes (
            mistake_id TEXT PRIMARY KEY,
            uid TEXT NOT NULL REFERENCES users(uid) ON DELETE CASCADE,
            subject TEXT NOT NULL,
            chapter TEXT NOT NULL,
            question TEXT NOT NULL,
            my_mistake TEXT NOT NULL,
            correct_concept TEXT NOT NULL,
            tags TEXT NOT NULL DEFAULT '[]',
            status TEXT NOT NULL DEFAULT 'active' CHECK(status IN ('active', 'reviewed')),
            created_at TEXT NOT NULL
        );

        -- Study groups
        CREATE TABLE IF NOT EXISTS study_groups (
            group_id TEXT PRIMARY KEY,
            name TEXT NOT NULL,
            description TEXT NOT NULL DEFAULT '',
            admin_id TEXT NOT NULL,
            created_at TEXT NOT NULL,
            last_message TEXT,
            last_message_at TEXT NOT NULL
        );

        CREATE TABLE IF NOT EXISTS group_members (
            group_id TEXT NOT NULL REFERENCES study_groups(group_id) ON DELETE CASCADE,
            uid TEXT NOT NULL,
            joined_at TEXT NOT NULL,
            PRIMARY KEY (group_id, uid)
        );

        CREATE TABLE IF NOT EXISTS group_messages (
            message_id TEXT PRIMARY KEY,
            group_id TEXT NOT NULL REFERENCES study_groups(group_id) ON DELETE CASCADE,
            sender_id TEXT NOT NULL,
            sender_name TEXT NOT NULL,
            sender_photo_url TEXT,
            text TEXT NOT NULL,
            created_at TEXT NOT NULL
        );

        -- Photo feed
        CREATE TABLE IF NOT EXISTS posts (
            post_id TEXT PRIMARY KEY,
            uid TEXT NOT NULL,
            user_display_name TEXT NOT NULL,
            user_photo_url TEXT,
            image_url TEXT NOT NULL,
            caption TEXT NOT NULL DEFAULT '',
            likes TEXT NOT NULL DEFAULT '[]',
            created_at TEXT NOT NULL
        );

        CREATE TABLE IF NOT EXISTS follows (
            follower_id TEXT NOT NULL,
            followed_id TEXT NOT NULL,
            created_at TEXT NOT NULL,
            PRIMARY KEY (follower_id, followed_id)
        );

        -- Admin console
        CREATE TABLE IF NOT EXISTS premium_codes (
            code TEXT PRIMARY KEY,
            created_at TEXT NOT NULL,
            created_by TEXT NOT NULL
        );

        CREATE TABLE IF NOT EXISTS unban_requests (
            request_id TEXT PRIMARY KEY,
            uid TEXT NOT NULL,
            user_name TEXT NOT NULL,
            user_email TEXT NOT NULL,
            reason TEXT NOT NULL,
            status TEXT NOT NULL DEFAULT 'pending' CHECK(status IN ('pending', 'reviewed')),
            created_at TEXT NOT NULL,
            reviewed_at TEXT
        );

        CREATE TABLE IF NOT EXISTS spectate_logs (
            log_id TEXT PRIMARY KEY,
            admin_id TEXT NOT NULL,
            admin_name TEXT NOT NULL,
            uid TEXT NOT NULL,
            user_name TEXT NOT NULL,
            started_at TEXT NOT NULL,
            ended_at TEXT
        );

        CREATE TABLE IF NOT EXISTS contact_submissions (
            submission_id TEXT PRIMARY KEY,
            name TEXT NOT NULL,
            email TEXT NOT NULL,
            message TEXT NOT NULL,
            created_at TEXT NOT NULL,
            is_read INTEGER NOT NULL DEFAULT 0
        );

        -- Indices
        CREATE INDEX IF NOT EXISTS idx_users_access_code ON users(access_code);
        CREATE INDEX IF NOT EXISTS idx_auth_tokens_uid ON auth_tokens(uid);
        CREATE INDEX IF NOT EXISTS idx_mistakes_uid ON mistakes(uid, created_at);
        CREATE INDEX IF NOT EXISTS idx_group_members_uid ON group_members(uid);
        CREATE INDEX IF NOT EXISTS idx_group_messages_group ON group_messages(group_id, created_at);
        CREATE INDEX IF NOT EXISTS idx_posts_created ON posts(created_at);
        CREATE INDEX IF NOT EXISTS idx_unban_requests_status ON unban_requests(status, created_at);
        """
    )
