"""Pytest configuration for phased testing.

Tests are organized by phase (f1, f2, ..., f6).
Only tests for the current phase and completed phases should run.
Future phase tests are automatically skipped.

Shared fixtures give every test its own SQLite file and cheap bcrypt
hashing.
"""

from datetime import date

import pytest

from preptrack.config.app_config import clear_config_cache, load_app_config
from preptrack.core import syllabus, users
from preptrack.db.database import init_db

# Current implementation phase
CURRENT_PHASE = 6


def pytest_collection_modifyitems(config, items):
    """Skip tests from phases that haven't been implemented yet."""
    for item in items:
        # Extract phase from path (tests/f2/... -> 2)
        parts = item.fspath.strpath.split("/")
        for part in parts:
            if part.startswith("f") and part[1:].isdigit():
                test_phase = int(part[1:])
                if test_phase > CURRENT_PHASE:
                    item.add_marker(
                        pytest.mark.skip(
                            reason=f"Phase F{test_phase} not yet implemented (current: F{CURRENT_PHASE})"
                        )
                    )
                break


@pytest.fixture(autouse=True)
def fast_config(monkeypatch):
    """Fresh config per test with minimum bcrypt cost."""
    monkeypatch.delenv("PREPTRACK_DB", raising=False)
    clear_config_cache()
    load_app_config().auth.bcrypt_rounds = 4
    yield
    clear_config_cache()


@pytest.fixture
def db(tmp_path):
    """Initialized empty database in tmp_path."""
    path = tmp_path / "test.db"
    init_db(path)
    return path


@pytest.fixture
def seeded_db(db):
    """Database with the default syllabus."""
    syllabus.seed_default_syllabus()
    return db


@pytest.fixture
def student(seeded_db):
    """Onboarded NEET student in demo status."""
    profile = users.create_user("Asha Rao", "asha@example.com", "password123")
    return users.complete_onboarding(
        profile.uid, "NEET", "12", date.today().year + 1
    )


@pytest.fixture
def admin(seeded_db):
    """Admin account."""
    return users.create_staff_user("Root Admin", "admin@example.com", "adminpass1", role="admin")


@pytest.fixture
def subadmin(seeded_db):
    """Sub-admin account."""
    return users.create_staff_user("Sub Admin", "sub@example.com", "subpass123", role="subadmin")
