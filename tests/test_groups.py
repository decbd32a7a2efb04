"""
Group service: creation, membership management and visibility
"""
import pytest

from socialnet.core.errors import ConstraintViolation, NotFound, PolicyDenied, ValidationFailed
from socialnet.modules.groups.schemas import GroupCreate, GroupMemberAdd, GroupUpdate
from socialnet.modules.groups.service import GroupService


@pytest.fixture
def groups_for(gateway_for):
    return lambda uid: GroupService(gateway_for(uid))


@pytest.fixture
def book_club(groups_for, alice):
    return groups_for(alice).create_group(GroupCreate(name="Book club"))


def test_creator_becomes_admin_member(db, book_club, alice):
    assert book_club.creator_id == alice
    member = db.find("group_members", group_id=book_club.id)
    assert [(m["user_id"], m["is_admin"]) for m in member] == [(alice, True)]


def test_create_group_keeps_media(groups_for, alice):
    group = groups_for(alice).create_group(GroupCreate(name="Art", avatar_url="a.png"))
    assert group.avatar_url == "a.png"
    assert group.banner_url == ""


def test_admin_adds_member_who_then_sees_group(groups_for, book_club, alice, bob):
    added = groups_for(alice).add_member(book_club.id, GroupMemberAdd(user_id=bob))
    assert added.is_admin is False

    assert groups_for(bob).get_group(book_club.id).name == "Book club"
    assert [g.id for g in groups_for(bob).list_my_groups()] == [book_club.id]


def test_non_admin_cannot_add_members(groups_for, book_club, alice, bob, carol):
    groups_for(alice).add_member(book_club.id, GroupMemberAdd(user_id=bob))
    with pytest.raises(PolicyDenied):
        groups_for(bob).add_member(book_club.id, GroupMemberAdd(user_id=carol))


def test_adding_member_twice_is_a_conflict(groups_for, book_club, alice, bob):
    groups_for(alice).add_member(book_club.id, GroupMemberAdd(user_id=bob))
    with pytest.raises(ConstraintViolation):
        groups_for(alice).add_member(book_club.id, GroupMemberAdd(user_id=bob))


def test_adding_unknown_profile(groups_for, book_club, alice):
    with pytest.raises(NotFound):
        groups_for(alice).add_member(book_club.id, GroupMemberAdd(user_id="no-such-user"))


def test_outsider_cannot_see_group(groups_for, book_club, carol):
    with pytest.raises(NotFound):
        groups_for(carol).get_group(book_club.id)
    assert groups_for(carol).list_my_groups() == []


def test_promoted_admin_can_manage_but_not_self_demote(groups_for, book_club, alice, bob, carol):
    groups_for(alice).add_member(book_club.id, GroupMemberAdd(user_id=bob))
    promoted = groups_for(alice).set_member_role(book_club.id, bob, True)
    assert promoted.is_admin is True

    groups_for(bob).add_member(book_club.id, GroupMemberAdd(user_id=carol))
    with pytest.raises(PolicyDenied):
        groups_for(bob).set_member_role(book_club.id, bob, False)


def test_set_role_of_non_member(groups_for, book_club, alice, carol):
    with pytest.raises(NotFound):
        groups_for(alice).set_member_role(book_club.id, carol, True)


def test_membership_is_self_only(groups_for, book_club, alice, bob):
    groups_for(alice).add_member(book_club.id, GroupMemberAdd(user_id=bob))
    assert groups_for(bob).my_membership(book_club.id).user_id == bob
    assert groups_for(alice).my_membership(book_club.id).is_admin is True


def test_member_leaves(db, groups_for, book_club, alice, bob):
    groups_for(alice).add_member(book_club.id, GroupMemberAdd(user_id=bob))
    groups_for(bob).leave_group(book_club.id)

    assert groups_for(bob).my_membership(book_club.id) is None
    with pytest.raises(NotFound):
        groups_for(bob).get_group(book_club.id)


def test_admin_removes_member(db, groups_for, book_club, alice, bob):
    groups_for(alice).add_member(book_club.id, GroupMemberAdd(user_id=bob))
    groups_for(alice).remove_member(book_club.id, bob)
    assert db.find("group_members", user_id=bob) == []


def test_update_group(groups_for, book_club, alice, bob):
    updated = groups_for(alice).update_group(book_club.id, GroupUpdate(name="Readers"))
    assert updated.name == "Readers"

    groups_for(alice).add_member(book_club.id, GroupMemberAdd(user_id=bob))
    with pytest.raises(PolicyDenied):
        groups_for(bob).update_group(book_club.id, GroupUpdate(name="Mine now"))
    with pytest.raises(ValidationFailed):
        groups_for(alice).update_group(book_club.id, GroupUpdate(name="  "))


def test_delete_group_cascades(db, groups_for, book_club, alice, bob):
    groups_for(alice).add_member(book_club.id, GroupMemberAdd(user_id=bob))
    with pytest.raises(PolicyDenied):
        groups_for(bob).delete_group(book_club.id)

    groups_for(alice).delete_group(book_club.id)
    assert db.find("groups") == []
    assert db.find("group_members") == []


def test_delete_missing_group(groups_for, alice):
    with pytest.raises(NotFound):
        groups_for(alice).delete_group("missing")
