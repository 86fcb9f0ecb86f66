"""Photo feed posts, likes and follows."""

from __future__ import annotations

import json
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

MAX_CAPTION_LENGTH = 2200


@dataclass
class Post:
    """A feed post."""

    post_id: str
    uid: str
    user_display_name: str
    user_photo_url: str | None
    image_url: str
    caption: str
    likes: list[str] = field(default_factory=list)
    created_at: str = ""

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "post_id": self.post_id,
            "uid": self.uid,
            "user_display_name": self.user_display_name,
            "user_photo_url": self.user_photo_url,
            "image_url": self.image_url,
            "caption": self.caption,
            "likes": list(self.likes),
            "like_count": len(self.likes),
            "created_at": self.created_at,
        }


def _row_to_post(row: sqlite3.Row) -> Post:
    data = dict(row)
    data["likes"] = json.loads(data["likes"])
    return Post(**data)


def create_post(author: UserProfile, image_url: str, caption: str = "") -> Post:
    """Publish a post.

    Raises:
        ValidationError: Missing image URL or caption over 2200 chars
    """
    image_url = require_text(image_url, "Image")
    caption = (caption or "").strip()
    if len(caption) > MAX_CAPTION_LENGTH:
        raise ValidationError(
            f"Caption must be {MAX_CAPTION_LENGTH} characters or less.", {"field": "caption"}
        )

    post = Post(
        post_id=new_id("pst"),
        uid=author.uid,
        user_display_name=author.display_name,
        user_photo_url=author.photo_url,
        image_url=image_url,
        caption=caption,
        created_at=clock.now_iso(),
    )
    with get_db() as conn:
        conn.execute(
            """
            INSERT INTO posts (post_id, uid, user_display_name, user_photo_url, image_url, caption, likes, created_at)
            VALUES (?, ?, ?, ?, ?, ?, '[]', ?)
            """,
            (
                post.post_id,
                post.uid,
                post.user_display_name,
                post.user_photo_url,
                post.image_url,
                post.caption,
                post.created_at,
            ),
        )

    logger.info("social.post_created", post_id=post.post_id, uid=author.uid)
    return post


def list_feed(uid: str | None = None) -> list[Post]:
    """All posts newest first, or only one author's posts."""
    query = "SELECT * FROM posts"
    params: tuple[Any, ...] = ()
    if uid is not None:
        query += " WHERE uid = ?"
        params = (uid,)
    query += " ORDER BY created_at DESC, rowid DESC"

    with get_db() as conn:
        rows = conn.execute(query, params).fetchall()
    return [_row_to_post(row) for row in rows]


def get_post(post_id: str) -> Post:
    """Load a post or raise NotFoundError."""
    with get_db() as conn:
        row = conn.execute("SELECT * FROM posts WHERE post_id = ?", (post_id,)).fetchone()
    if row is None:
        raise NotFoundError(f"Post '{post_id}' not found")
    return _row_to_post(row)


def toggle_like(uid: str, post_id: str) -> Post:
    """Like the post, or remove the like if already present."""
    with transaction() as conn:
        row = conn.execute("SELECT * FROM posts WHERE post_id = ?", (post_id,)).fetchone()
        if row is None:
            raise NotFoundError(f"Post '{post_id}' not found")
        post = _row_to_post(row)
        if uid in post.likes:
            post.likes.remove(uid)
        else:
            post.likes.append(uid)
        conn.execute(
            "UPDATE posts SET likes = ? WHERE post_id = ?", (json.dumps(post.likes), post_id)
        )
    return post


def delete_post(actor: UserProfile, post_id: str) -> None:
    """Delete a post (author only)."""
    post = get_post(post_id)
    if post.uid != actor.uid:
        raise PermissionDeniedError("You can only delete your own posts.")
    with get_db() as conn:
        conn.execute("DELETE FROM posts WHERE post_id = ?", (post_id,))
    logger.info("social.post_deleted", post_id=post_id)


def follow(follower_uid: str, followed_uid: str) -> None:
    """Follow another user. Following twice is a no-op."""
    if follower_uid == followed_uid:
        raise ValidationError("You cannot follow yourself.", {"field": "uid"})
    require_user(followed_uid)
    with get_db() as conn:
        conn.execute(
            """
            INSERT OR IGNORE INTO follows (follower_id, followed_id, created_at)
            VALUES (?, ?, ?)
            """,
            (follower_uid, followed_uid, clock.now_iso()),
        )
    logger.debug("social.followed", follower=follower_uid, followed=followed_uid)


def unfollow(follower_uid: str, followed_uid: str) -> None:
    """Stop following a user."""
    with get_db() as conn:
        conn.execute(
            "DELETE FROM follows WHERE follower_id = ? AND followed_id = ?",
            (follower_uid, followed_uid),
        )


def is_following(follower_uid: str, followed_uid: str) -> bool:
    """True if the first user follows the second."""
    with get_db() as conn:
        row = conn.execute(
            "SELECT 1 FROM follows WHERE follower_id = ? AND followed_id = ?",
            (follower_uid, followed_uid),
        ).fetchone()
    return row is not None
