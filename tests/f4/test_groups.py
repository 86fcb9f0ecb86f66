"""Tests for study groups and chat (F4)."""

import pytest

from preptrack.core import groups, users
from preptrack.core.errors import NotFoundError, PermissionDeniedError, ValidationError


@pytest.fixture
def friend(seeded_db):
    return users.create_user("Bina", "bina@example.com", "password123")


class TestCreateGroup:
    """Tests for create_group."""

    def test_creator_is_admin_and_member(self, student):
        group = groups.create_group(student, "  Physics Squad ", "daily MCQs")
        assert group.name == "Physics Squad"
        assert group.admin_id == student.uid
        assert group.member_ids == [student.uid]
        assert group.last_message is None

    def test_name_length(self, student):
        with pytest.raises(ValidationError):
            groups.create_group(student, "ab")
        with pytest.raises(ValidationError):
            groups.create_group(student, "x" * 51)

    def test_description_length(self, student):
        with pytest.raises(ValidationError):
            groups.create_group(student, "Valid name", "d" * 151)


class TestMembership:
    """Tests for member management and visibility."""

    def test_non_member_cannot_view(self, student, friend):
        group = groups.create_group(student, "Squad")
        with pytest.raises(PermissionDeniedError):
            groups.get_group(friend.uid, group.group_id)

    def test_add_and_list(self, student, friend):
        group = groups.create_group(student, "Squad")
        groups.add_member(student, group.group_id, friend.uid)
        assert [g.group_id for g in groups.list_groups(friend.uid)] == [group.group_id]
        names = {p.display_name for p in groups.list_members(friend.uid, group.group_id)}
        assert names == {"Asha Rao", "Bina"}

    def test_add_twice_is_noop(self, student, friend):
        group = groups.create_group(student, "Squad")
        groups.add_member(student, group.group_id, friend.uid)
        again = groups.add_member(student, group.group_id, friend.uid)
        assert again.member_ids.count(friend.uid) == 1

    def test_only_group_admin_manages(self, student, friend, admin):
        group = groups.create_group(student, "Squad")
        groups.add_member(student, group.group_id, friend.uid)
        with pytest.raises(PermissionDeniedError):
            groups.add_member(friend, group.group_id, admin.uid)
        with pytest.raises(PermissionDeniedError):
            groups.delete_group(friend, group.group_id)

    def test_remove_member(self, student, friend):
        group = groups.create_group(student, "Squad")
        groups.add_member(student, group.group_id, friend.uid)
        updated = groups.remove_member(student, group.group_id, friend.uid)
        assert updated.member_ids == [student.uid]
        with pytest.raises(NotFoundError):
            groups.remove_member(student, group.group_id, friend.uid)

    def test_admin_cannot_remove_self(self, student):
        group = groups.create_group(student, "Squad")
        with pytest.raises(PermissionDeniedError):
            groups.remove_member(student, group.group_id, student.uid)

    def test_delete_group(self, student):
        group = groups.create_group(student, "Squad")
        groups.send_message(student, group.group_id, "hi")
        groups.delete_group(student, group.group_id)
        assert groups.list_groups(student.uid) == []
        with pytest.raises(NotFoundError):
            groups.get_group(student.uid, group.group_id)


class TestMessages:
    """Tests for send_message and list_messages."""

    def test_send_updates_preview(self, student):
        group = groups.create_group(student, "Squad")
        groups.send_message(student, group.group_id, "first")
        groups.send_message(student, group.group_id, "second")
        assert [m.text for m in groups.list_messages(student.uid, group.group_id)] == [
            "first",
            "second",
        ]
        assert groups.get_group(student.uid, group.group_id).last_message == "second"

    def test_blank_message(self, student):
        group = groups.create_group(student, "Squad")
        with pytest.raises(ValidationError):
            groups.send_message(student, group.group_id, "   ")

    def test_non_member_cannot_send(self, student, friend):
        group = groups.create_group(student, "Squad")
        with pytest.raises(PermissionDeniedError):
            groups.send_message(friend, group.group_id, "let me in")

    def test_most_recent_activity_first(self, student):
        older = groups.create_group(student, "Older")
        groups.create_group(student, "Newer")
        groups.send_message(student, older.group_id, "bump")
        assert [g.name for g in groups.list_groups(student.uid)] == ["Older", "Newer"]
