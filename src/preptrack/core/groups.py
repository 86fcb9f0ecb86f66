"""Study groups and group chat.

The creator of a group is its admin and first member. Only members read or
post messages; only the group admin manages membership or deletes it.
"""

from __future__ import annotations

import sqlite3
from dataclasses import dataclass, field
from typing import Any

import structlog

from preptrack.core.errors import NotFoundError, PermissionDeniedError, ValidationError
from preptrack.core.users import UserProfile, require_user
from preptrack.db.database import get_db, transaction
from preptrack.utils import clock
from preptrack.utils.validators import new_id, require_text

logger = structlog.get_logger(__name__)

MIN_NAME_LENGTH = 3
MAX_NAME_LENGTH = 50
MAX_DESCRIPTION_LENGTH = 150


@dataclass
class Group:
    """A study group."""

    group_id: str
    name: str
    description: str
    admin_id: str
    created_at: str
    last_message_at: str
    last_message: str | None = None
    member_ids: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "group_id": self.group_id,
            "name": self.name,
            "description": self.description,
            "admin_id": self.admin_id,
            "created_at": self.created_at,
            "last_message": self.last_message,
            "last_message_at": self.last_message_at,
            "member_ids": list(self.member_ids),
        }


@dataclass
class GroupMessage:
    """A chat message."""

    message_id: str
    group_id: str
    sender_id: str
    sender_name: str
    sender_photo_url: str | None
    text: str
    created_at: str

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "message_id": self.message_id,
            "group_id": self.group_id,
            "sender_id": self.sender_id,
            "sender_name": self.sender_name,
            "sender_photo_url": self.sender_photo_url,
            "text": self.text,
            "created_at": self.created_at,
        }


def _load_group(conn: sqlite3.Connection, group_id: str) -> Group:
    row = conn.execute(
        "SELECT * FROM study_groups WHERE group_id = ?", (group_id,)
    ).fetchone()
    if row is None:
        raise NotFoundError(f"Group '{group_id}' not found")
    members = conn.execute(
        "SELECT uid FROM group_members WHERE group_id = ? ORDER BY joined_at, rowid",
        (group_id,),
    ).fetchall()
    return Group(
        group_id=row["group_id"],
        name=row["name"],
        description=row["description"],
        admin_id=row["admin_id"],
        created_at=row["created_at"],
        last_message=row["last_message"],
        last_message_at=row["last_message_at"],
        member_ids=[m["uid"] for m in members],
    )


def create_group(creator: UserProfile, name: str, description: str = "") -> Group:
    """Create a group with the creator as admin and sole member.

    Raises:
        ValidationError: Name outside 3-50 chars or description over 150
    """
    name = require_text(name, "Group name", min_length=MIN_NAME_LENGTH, max_length=MAX_NAME_LENGTH)
    description = (description or "").strip()
    if len(description) > MAX_DESCRIPTION_LENGTH:
        raise ValidationError(
            f"Description must be {MAX_DESCRIPTION_LENGTH} characters or less.",
            {"field": "description"},
        )

    group_id = new_id("grp")
    now = clock.now_iso()
    with get_db() as conn:
        conn.execute(
            """
            INSERT INTO study_groups (group_id, name, description, admin_id, created_at, last_message_at)
            VALUES (?, ?, ?, ?, ?, ?)
            """,
            (group_id, name, description, creator.uid, now, now),
        )
        conn.execute(
            "INSERT INTO group_members (group_id, uid, joined_at) VALUES (?, ?, ?)",
            (group_id, creator.uid, now),
        )
        group = _load_group(conn, group_id)

    logger.info("groups.created", group_id=group_id, admin_id=creator.uid)
    return group


def list_groups(uid: str) -> list[Group]:
    """Groups the user belongs to, most recent activity first."""
    with get_db() as conn:
        rows = conn.execute(
            """
            SELECT g.group_id FROM study_groups g
            JOIN group_members m ON m.group_id = g.group_id
            WHERE m.uid = ?
            ORDER BY g.last_message_at DESC, g.rowid DESC
            """,
            (uid,),
        ).fetchall()
        return [_load_group(conn, row["group_id"]) for row in rows]


def get_group(uid: str, group_id: str) -> Group:
    """Load a group the user is a member of.

    Raises:
        NotFoundError: Unknown group
        PermissionDeniedError: User is not a member
    """
    with get_db() as conn:
        group = _load_group(conn, group_id)
    if uid not in group.member_ids:
        raise PermissionDeniedError("You are not a member of this group.")
    return group


def list_members(uid: str, group_id: str) -> list[UserProfile]:
    """Profiles of the group's members."""
    group = get_group(uid, group_id)
    return [require_user(member_id) for member_id in group.member_ids]


def list_messages(uid: str, group_id: str) -> list[GroupMessage]:
    """Messages in a group, oldest first."""
    get_group(uid, group_id)
    with get_db() as conn:
        rows = conn.execute(
            "SELECT * FROM group_messages WHERE group_id = ? ORDER BY created_at, rowid",
            (group_id,),
        ).fetchall()
    return [GroupMessage(**dict(row)) for row in rows]


def send_message(sender: UserProfile, group_id: str, text: str) -> GroupMessage:
    """Post a message and update the group's last-message preview.

    Both writes happen in one transaction.
    """
    text = require_text(text, "Message")
    get_group(sender.uid, group_id)

    message = GroupMessage(
        message_id=new_id("msg"),
        group_id=group_id,
        sender_id=sender.uid,
        sender_name=sender.display_name,
        sender_photo_url=sender.photo_url,
        text=text,
        created_at=clock.now_iso(),
    )
    with transaction() as conn:
        conn.execute(
            """
            INSERT INTO group_messages (
                message_id, group_id, sender_id, sender_name, sender_photo_url, text, created_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?)
            """,
            (
                message.message_id,
                group_id,
                sender.uid,
                sender.display_name,
                sender.photo_url,
                text,
                message.created_at,
            ),
        )
        conn.execute(
            "UPDATE study_groups SET last_message = ?, last_message_at = ? WHERE group_id = ?",
            (text, message.created_at, group_id),
        )

    logger.debug("groups.message_sent", group_id=group_id, sender_id=sender.uid)
    return message


def _require_group_admin(actor: UserProfile, group_id: str) -> Group:
    group = get_group(actor.uid, group_id)
    if group.admin_id != actor.uid:
        raise PermissionDeniedError("Only the group admin can do this.")
    return group


def add_member(actor: UserProfile, group_id: str, member_uid: str) -> Group:
    """Add a user to the group (group admin only)."""
    group = _require_group_admin(actor, group_id)
    member = require_user(member_uid)
    if member.is_deleted:
        raise NotFoundError(f"User '{member_uid}' not found")
    if member_uid in group.member_ids:
        return group

    with get_db() as conn:
        conn.execute(
            "INSERT INTO group_members (group_id, uid, joined_at) VALUES (?, ?, ?)",
            (group_id, member_uid, clock.now_iso()),
        )
        group = _load_group(conn, group_id)

    logger.info("groups.member_added", group_id=group_id, uid=member_uid)
    return group


def remove_member(actor: UserProfile, group_id: str, member_uid: str) -> Group:
    """Remove a member (group admin only, never the admin themself)."""
    _require_group_admin(actor, group_id)
    if member_uid == actor.uid:
        raise PermissionDeniedError("The group admin cannot be removed.")

    with get_db() as conn:
        cursor = conn.execute(
            "DELETE FROM group_members WHERE group_id = ? AND uid = ?",
            (group_id, member_uid),
        )
        if cursor.rowcount == 0:
            raise NotFoundError(f"User '{member_uid}' is not a member of this group")
        group = _load_group(conn, group_id)

    logger.info("groups.member_removed", group_id=group_id, uid=member_uid)
    return group


def delete_group(actor: UserProfile, group_id: str) -> None:
    """Delete a group with its members and messages (group admin only)."""
    _require_group_admin(actor, group_id)
    with get_db() as conn:
        conn.execute("DELETE FROM study_groups WHERE group_id = ?", (group_id,))
    logger.info("groups.deleted", group_id=group_id, by=actor.uid)
