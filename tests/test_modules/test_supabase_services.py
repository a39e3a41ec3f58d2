"""
Tests for the Supabase-backed services, run against a mocked client whose
query builders hand back canned rows.
"""
from unittest.mock import MagicMock

import httpx
import pytest

from daily_ideas.core.errors import (
    InvalidInviteCodeError, AlreadyMemberError, OwnerMembershipError, DefaultCategoryDeletionError, DomainError
)
from daily_ideas.core.ordering import OrderKeyClock
from daily_ideas.database.supabase_adapter import SupabaseDataAdapter
from daily_ideas.modules.categories.schemas import CategoryCreate
from daily_ideas.modules.categories.service import CategoryService
from daily_ideas.modules.completions.service import CompletionService, month_bounds, group_by_date
from daily_ideas.modules.groups.schemas import GroupCreate
from daily_ideas.modules.groups.service import (
    GroupService, generate_invite_code, normalize_invite_code, unique_invite_code, check_role_change
)
from daily_ideas.modules.ideas.schemas import IdeaUpdate
from daily_ideas.modules.ideas.service import IdeaService
from tests.conftest import fake_table, fake_client

CREATED_AT = "2024-05-01T10:00:00+00:00"


def idea_row(idea_id, sort_order, **fields):
    row = {
        "id": idea_id,
        "text": f"Idea {idea_id}",
        "created_at": CREATED_AT,
        "sort_order": sort_order,
        "group_id": "group-1",
        "created_by": "user-1",
        "completed": False,
    }
    row.update(fields)
    return row


def group_row(**fields):
    row = {
        "id": "group-1",
        "name": "Family",
        "owner_id": "owner-1",
        "invite_code": "ABC123",
        "color": "#3B82F6",
        "member_count": 1,
        "created_at": CREATED_AT,
    }
    row.update(fields)
    return row


# ======================================================================
# Invite codes and roles
# ======================================================================

class TestInviteCodes:
    def test_generated_codes(self):
        code = generate_invite_code()
        assert len(code) == 6
        assert all(ch.isdigit() or "A" <= ch <= "Z" for ch in code)

    @pytest.mark.parametrize("raw", ["abc123", " ABC123 ", "https://ideas.app/join/abc123", "/join/ABC123/"])
    def test_normalize(self, raw):
        assert normalize_invite_code(raw) == "ABC123"

    def test_unique_code_retries(self):
        taken = iter([True, True, False])
        assert len(unique_invite_code(lambda code: next(taken))) == 6

    def test_unique_code_gives_up(self):
        with pytest.raises(DomainError):
            unique_invite_code(lambda code: True)

    def test_role_rules(self):
        check_role_change("member", "admin")
        with pytest.raises(OwnerMembershipError):
            check_role_change("owner", "admin")
        with pytest.raises(OwnerMembershipError):
            check_role_change("admin", "owner")


# ======================================================================
# Groups
# ======================================================================

class TestGroupService:
    def test_join_with_unknown_code(self):
        groups = fake_table([])
        service = GroupService(fake_client(groups=groups))

        with pytest.raises(InvalidInviteCodeError):
            service.join_group("user-2", "https://ideas.app/join/abc123")
        groups.eq.assert_any_call("invite_code", "ABC123")

    def test_join_when_already_member(self):
        groups = fake_table([group_row()])
        members = fake_table([{"id": "m1", "role": "member"}])
        service = GroupService(fake_client(groups=groups, group_members=members))

        with pytest.raises(AlreadyMemberError):
            service.join_group("user-2", "ABC123")
        members.insert.assert_not_called()

    def test_join_adds_member_and_refreshes_count(self):
        groups = fake_table([group_row()], [group_row(member_count=2)])
        members = fake_table([], [{"id": "m2"}], [{"id": "m1"}, {"id": "m2"}])
        service = GroupService(fake_client(groups=groups, group_members=members))

        group = service.join_group("user-2", "ABC123")

        assert group.member_count == 2
        members.insert.assert_called_once_with({"group_id": "group-1", "user_id": "user-2", "role": "member"})
        groups.update.assert_called_once_with({"member_count": 2})

    def test_create_group_adds_owner_and_default_category(self):
        groups = fake_table([], [group_row(owner_id="user-1")])
        members = fake_table([{"id": "m1"}])
        categories = fake_table([{"id": "c1"}])
        service = GroupService(fake_client(groups=groups, group_members=members, categories=categories))

        group = service.create_group(GroupCreate(name="Family"), "user-1")

        assert group.owner_id == "user-1"
        members.insert.assert_called_once_with({"group_id": "group-1", "user_id": "user-1", "role": "owner"})
        category = categories.insert.call_args[0][0]
        assert category["is_default"] is True
        assert category["sort_order"] == 0

    def test_create_group_undone_when_owner_membership_fails(self):
        groups = fake_table([], [group_row(owner_id="user-1")], [])
        members = fake_table(httpx.ConnectError("Connection refused"))
        categories = fake_table()
        service = GroupService(fake_client(groups=groups, group_members=members, categories=categories))

        with pytest.raises(httpx.ConnectError):
            service.create_group(GroupCreate(name="Family"), "user-1")

        groups.delete.assert_called_once()
        groups.eq.assert_any_call("id", "group-1")
        categories.insert.assert_not_called()

    def test_create_group_kept_when_default_category_fails(self):
        groups = fake_table([], [group_row(owner_id="user-1")])
        members = fake_table([{"id": "m1"}])
        categories = fake_table(httpx.ConnectError("Connection refused"))
        service = GroupService(fake_client(groups=groups, group_members=members, categories=categories))

        group = service.create_group(GroupCreate(name="Family"), "user-1")

        assert group.id == "group-1"
        groups.delete.assert_not_called()

    def test_owner_cannot_be_removed(self):
        members = fake_table([{"id": "m1", "role": "owner"}])
        service = GroupService(fake_client(group_members=members))

        with pytest.raises(OwnerMembershipError):
            service.remove_member("group-1", "owner-1")
        members.delete.assert_not_called()

    def test_user_groups_with_members(self):
        memberships = [{"id": "m1", "group_id": "group-1", "user_id": "user-1", "role": "admin", "joined_at": CREATED_AT}]
        members = fake_table(memberships, memberships)
        groups = fake_table([group_row()])
        users = fake_table([{"id": "user-1", "email": "a@b.c", "name": "Ann", "created_at": CREATED_AT}])
        service = GroupService(fake_client(groups=groups, group_members=members, users=users))

        result = service.get_user_groups("user-1")

        assert len(result) == 1
        assert result[0].user_role == "admin"
        assert result[0].is_owner is False
        assert result[0].members[0].user.name == "Ann"

    def test_user_without_groups(self):
        service = GroupService(fake_client(group_members=fake_table([])))
        assert service.get_user_groups("user-1") == []


# ======================================================================
# Ideas
# ======================================================================

class TestIdeaService:
    def test_group_ideas_sorted_and_observed(self):
        ideas = fake_table([idea_row("b", 5000), idea_row("a", 3000)])
        users = fake_table([])
        clock = OrderKeyClock(clock=lambda: 0)
        service = IdeaService(fake_client(ideas=ideas, users=users), clock)

        result = service.get_group_ideas("group-1")

        assert [i.id for i in result] == ["a", "b"]
        assert clock.next_key("group-1") == 5001

    def test_import_is_a_single_insert(self):
        ideas = fake_table([])
        service = IdeaService(fake_client(ideas=ideas), OrderKeyClock(clock=lambda: 1000))

        count = service.import_ideas("user-1", "group-1", "1. Buy milk - for breakfast\n2. Call mom", "cat-1")

        assert count == 2
        ideas.insert.assert_called_once()
        rows = ideas.insert.call_args[0][0]
        assert [(r["text"], r["description"], r["sort_order"]) for r in rows] == [
            ("Buy milk", "for breakfast", 1000),
            ("Call mom", None, 1001),
        ]
        assert {r["category_id"] for r in rows} == {"cat-1"}

    def test_import_without_ideas_skips_the_backend(self):
        client = fake_client()
        service = IdeaService(client, OrderKeyClock())

        assert service.import_ideas("user-1", "group-1", "  \n") == 0
        client.table.assert_not_called()

    def test_reopening_clears_completed_at(self):
        ideas = fake_table([idea_row("a", 1)])
        service = IdeaService(fake_client(ideas=ideas), OrderKeyClock())

        service.update_idea("a", IdeaUpdate(completed=False))

        patch = ideas.update.call_args[0][0]
        assert patch["completed"] is False
        assert patch["completed_at"] is None
        assert isinstance(patch["updated_at"], str)

    def test_complete_records_completion(self):
        ideas = fake_table([idea_row("a", 1, completed=True)])
        completions = fake_table([{"id": "done-1"}])
        service = IdeaService(fake_client(ideas=ideas, completions=completions), OrderKeyClock())

        idea = service.complete_idea("user-2", "a", "2024-05-01")

        assert idea.completed is True
        row = completions.insert.call_args[0][0]
        assert row["idea_id"] == "a"
        assert row["date"] == "2024-05-01"
        assert row["completed_by"] == "user-2"

    def test_nulls_are_not_sent_for_required_fields(self):
        ideas = fake_table([idea_row("a", 1)])
        service = IdeaService(fake_client(ideas=ideas), OrderKeyClock())

        service.update_idea("a", IdeaUpdate(text=None, sort_order=None, description=None))

        patch = ideas.update.call_args[0][0]
        assert "text" not in patch
        assert "sort_order" not in patch
        assert patch["description"] is None

    def test_complete_survives_failed_ledger_insert(self):
        ideas = fake_table([idea_row("a", 1, completed=True)])
        completions = fake_table(httpx.ConnectError("Connection refused"))
        service = IdeaService(fake_client(ideas=ideas, completions=completions), OrderKeyClock())

        idea = service.complete_idea("user-2", "a", "2024-05-01")

        assert idea.id == "a"
        assert idea.completed is True
        completions.insert.assert_called_once()

    def test_complete_missing_idea(self):
        ideas = fake_table([])
        service = IdeaService(fake_client(ideas=ideas), OrderKeyClock())

        assert service.complete_idea("user-1", "missing", "2024-05-01") is None


# ======================================================================
# Categories
# ======================================================================

class TestCategoryService:
    def test_default_category_cannot_be_deleted(self):
        categories = fake_table([{"id": "c1", "is_default": True}])
        service = CategoryService(fake_client(categories=categories), OrderKeyClock())

        with pytest.raises(DefaultCategoryDeletionError):
            service.delete_category("c1")
        categories.delete.assert_not_called()

    def test_delete_detaches_ideas(self):
        categories = fake_table([{"id": "c2", "is_default": False}], [{"id": "c2"}])
        ideas = fake_table([])
        service = CategoryService(fake_client(categories=categories, ideas=ideas), OrderKeyClock())

        assert service.delete_category("c2") is True
        ideas.update.assert_called_once_with({"category_id": None})
        ideas.eq.assert_called_once_with("category_id", "c2")

    def test_create_uses_category_order_keys(self):
        categories = fake_table([{
            "id": "c9", "name": "Hobby", "color": "#3B82F6", "icon": "📁", "sort_order": 1000,
            "group_id": "group-1", "created_by": "user-1", "created_at": CREATED_AT,
        }])
        clock = OrderKeyClock(clock=lambda: 1000)
        clock.next_key("group-1", span=50)
        service = CategoryService(fake_client(categories=categories), clock)

        service.create_category(CategoryCreate(group_id="group-1", name="Hobby"), "user-1")

        assert categories.insert.call_args[0][0]["sort_order"] == 1000


# ======================================================================
# Completions
# ======================================================================

class TestCompletionService:
    @pytest.mark.parametrize("month, bounds", [
        ("2024-02", ("2024-02-01", "2024-02-29")),
        ("2023-12", ("2023-12-01", "2023-12-31")),
    ])
    def test_month_bounds(self, month, bounds):
        assert month_bounds(month) == bounds

    def test_calendar_grouped_by_day(self):
        rows = [
            {"id": "d1", "idea_id": "a", "date": "2024-05-01", "group_id": "group-1",
             "completed_by": "user-1", "completed_at": CREATED_AT},
            {"id": "d2", "idea_id": "b", "date": "2024-05-03", "group_id": "group-1",
             "completed_by": "user-1", "completed_at": CREATED_AT},
        ]
        completions = fake_table(rows)
        ideas = fake_table([idea_row("a", 1), idea_row("b", 2)])
        service = CompletionService(fake_client(completions=completions, ideas=ideas))

        calendar = service.get_calendar_data("group-1", "2024-05")

        assert sorted(calendar) == ["2024-05-01", "2024-05-03"]
        assert calendar["2024-05-03"][0].idea.id == "b"
        completions.gte.assert_called_once_with("date", "2024-05-01")
        completions.lte.assert_called_once_with("date", "2024-05-31")

    def test_group_by_date_empty(self):
        assert group_by_date([]) == {}


# ======================================================================
# Adapter
# ======================================================================

class TestAdapter:
    def test_client_created_on_first_call(self):
        provider = MagicMock(side_effect=RuntimeError("supabase_url is required"))
        adapter = SupabaseDataAdapter(client_provider=provider)

        provider.assert_not_called()
        with pytest.raises(RuntimeError):
            adapter.get_group_ideas("group-1")

    def test_remove_member_delegates(self):
        members = fake_table([{"id": "m2", "role": "member"}], [{"id": "m2"}], [])
        groups = fake_table([])
        adapter = SupabaseDataAdapter(client_provider=lambda: fake_client(group_members=members, groups=groups))

        assert adapter.remove_group_member("group-1", "user-2") is True
        members.delete.assert_called_once()
        groups.update.assert_called_once_with({"member_count": 0})
