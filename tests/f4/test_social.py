"""Tests for the photo feed and follows (F4)."""

import pytest

from preptrack.core import social, users
from preptrack.core.errors import NotFoundError, PermissionDeniedError, ValidationError


class TestPosts:
    """Tests for posts and likes."""

    def test_create_and_feed(self, student, admin):
        first = social.create_post(student, "https://img/1.jpg", "Day 1")
        second = social.create_post(admin, "https://img/2.jpg")
        assert [p.post_id for p in social.list_feed()] == [second.post_id, first.post_id]
        assert [p.post_id for p in social.list_feed(student.uid)] == [first.post_id]
        assert first.user_display_name == "Asha Rao"

    def test_image_required(self, student):
        with pytest.raises(ValidationError):
            social.create_post(student, "  ")

    def test_caption_limit(self, student):
        with pytest.raises(ValidationError):
            social.create_post(student, "https://img/1.jpg", "c" * 2201)

    def test_toggle_like(self, student, admin):
        post = social.create_post(student, "https://img/1.jpg")
        liked = social.toggle_like(admin.uid, post.post_id)
        assert liked.likes == [admin.uid]
        assert liked.to_dict()["like_count"] == 1
        assert social.toggle_like(admin.uid, post.post_id).likes == []

    def test_like_missing_post(self, student):
        with pytest.raises(NotFoundError):
            social.toggle_like(student.uid, "pst_missing")

    def test_delete_own_only(self, student, admin):
        post = social.create_post(student, "https://img/1.jpg")
        with pytest.raises(PermissionDeniedError):
            social.delete_post(admin, post.post_id)
        social.delete_post(student, post.post_id)
        assert social.list_feed() == []


class TestFollows:
    """Tests for follow and unfollow."""

    def test_follow_cycle(self, student, admin):
        social.follow(student.uid, admin.uid)
        social.follow(student.uid, admin.uid)
        assert social.is_following(student.uid, admin.uid)
        assert not social.is_following(admin.uid, student.uid)
        social.unfollow(student.uid, admin.uid)
        assert not social.is_following(student.uid, admin.uid)

    def test_cannot_follow_self(self, student):
        with pytest.raises(ValidationError):
            social.follow(student.uid, student.uid)

    def test_follow_unknown_user(self, student):
        with pytest.raises(NotFoundError):
            social.follow(student.uid, "usr_missing")
        assert users.get_user("usr_missing") is None
