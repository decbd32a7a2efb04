"""
Row-level security policy set.

Each policy carries the SQL that is installed in the database and a Python
predicate with the same meaning, so the backend can evaluate exactly what
Postgres evaluates. Sub-queries inside predicates go through
``PolicyContext.visible``, which applies the SELECT policies of the
sub-queried table, the same way Postgres expands RLS inside policy
sub-queries.

Layering for the group tables:

* ``group_members`` SELECT is self-only and performs no sub-query. It is the
  base case.
* ``groups`` SELECT and the group branch of ``messages`` SELECT query
  ``group_members`` and therefore stop at that base case.
* Admin checks on ``group_members`` use the ``gm`` alias sub-query, which
  again only reaches the base case.

A SELECT policy that re-enters its own table raises ``PolicyRecursionError``.
"""

from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Iterable, Iterator, List, Optional, Protocol, Tuple

from socialnet.config.settings import settings
from socialnet.core.errors import PolicyRecursionError

Row = Dict[str, Any]

PUBLIC = "public"
AUTHENTICATED = "authenticated"
STORAGE_OBJECTS = "storage.objects"


class Command(str, Enum):
    SELECT = "SELECT"
    INSERT = "INSERT"
    UPDATE = "UPDATE"
    DELETE = "DELETE"


class RowSource(Protocol):
    """Unfiltered row access used to resolve policy sub-queries."""

    def fetch(self, table: str, **match: Any) -> List[Row]:
        ...


@dataclass(frozen=True)
class Clause:
    sql: str
    test: Callable[["PolicyContext", Row], bool]


TRUE = Clause("true", lambda ctx, row: True)


@dataclass(frozen=True)
class Policy:
    name: str
    table: str
    command: Command
    using: Optional[Clause] = None
    check: Optional[Clause] = None
    roles: Tuple[str, ...] = (PUBLIC,)
    replaces: Tuple[str, ...] = ()

    def applies_to(self, ctx: "PolicyContext") -> bool:
        return AUTHENTICATED not in self.roles or ctx.uid is not None

    def render(self) -> str:
        drops = [f'DROP POLICY IF EXISTS "{name}" ON {self.table};' for name in self.replaces + (self.name,)]
        create = f'CREATE POLICY "{self.name}" ON {self.table} FOR {self.command.value}'
        if self.roles != (PUBLIC,):
            create += f" TO {', '.join(self.roles)}"
        if self.using is not None:
            create += f" USING ({self.using.sql})"
        if self.check is not None:
            create += f" WITH CHECK ({self.check.sql})"
        return "\n".join(drops + [create + ";"])


class PolicyContext:
    """Policy evaluation on behalf of one caller (``uid`` is None for anon)."""

    def __init__(self, uid: Optional[str], source: RowSource, policies: Optional["PolicySet"] = None):
        self.uid = uid
        self.source = source
        self.policies = policies or POLICY_SET
        self._expanding: List[str] = []

    @contextmanager
    def expanding(self, table: str) -> Iterator[None]:
        if table in self._expanding:
            raise PolicyRecursionError(table)
        self._expanding.append(table)
        try:
            yield
        finally:
            self._expanding.pop()

    def is_caller(self, value: Any) -> bool:
        return self.uid is not None and value == self.uid

    def visible(self, table: str, **match: Any) -> List[Row]:
        return self.policies.visible_rows(self, table, self.source.fetch(table, **match))

    def exists(self, table: str, **match: Any) -> bool:
        return len(self.visible(table, **match)) > 0


class PolicySet:
    def __init__(self, policies: Iterable[Policy], protected: Iterable[str]):
        self.policies = tuple(policies)
        self.protected = frozenset(protected)

    def for_command(self, table: str, command: Command) -> List[Policy]:
        return [p for p in self.policies if p.table == table and p.command == command]

    def _applicable(self, ctx: PolicyContext, table: str, command: Command) -> List[Policy]:
        return [p for p in self.for_command(table, command) if p.applies_to(ctx)]

    def allows_select(self, ctx: PolicyContext, table: str, row: Row) -> bool:
        if table not in self.protected:
            return True
        with ctx.expanding(table):
            return any(p.using.test(ctx, row) for p in self._applicable(ctx, table, Command.SELECT))

    def allows_insert(self, ctx: PolicyContext, table: str, row: Row) -> bool:
        if table not in self.protected:
            return True
        return any(p.check.test(ctx, row) for p in self._applicable(ctx, table, Command.INSERT))

    def allows_update(self, ctx: PolicyContext, table: str, old: Row, new: Row) -> bool:
        if table not in self.protected:
            return True
        policies = self._applicable(ctx, table, Command.UPDATE)
        if not any(p.using.test(ctx, old) for p in policies):
            return False
        return any((p.check or p.using).test(ctx, new) for p in policies)

    def allows_delete(self, ctx: PolicyContext, table: str, row: Row) -> bool:
        if table not in self.protected:
            return True
        return any(p.using.test(ctx, row) for p in self._applicable(ctx, table, Command.DELETE))

    def visible_rows(self, ctx: PolicyContext, table: str, rows: Iterable[Row]) -> List[Row]:
        return [row for row in rows if self.allows_select(ctx, table, row)]

    def render_sql(self) -> str:
        return "\n\n".join(p.render() for p in self.policies)


def owned_by(column: str) -> Clause:
    return Clause(f"auth.uid() = {column}", lambda ctx, row: ctx.is_caller(row.get(column)))


def first_folder(name: Optional[str]) -> Optional[str]:
    """Equivalent of ``(storage.foldername(name))[1]``."""
    folders = (name or "").split("/")[:-1]
    return folders[0] if folders else None


# --- predicates shared by the group-aware policies -------------------------

def _is_member(ctx: PolicyContext, group_id: Any) -> bool:
    return group_id is not None and ctx.exists("group_members", group_id=group_id, user_id=ctx.uid)


def _is_admin(ctx: PolicyContext, group_id: Any) -> bool:
    return group_id is not None and ctx.exists("group_members", group_id=group_id, user_id=ctx.uid, is_admin=True)


def _is_creator(ctx: PolicyContext, group_id: Any) -> bool:
    return group_id is not None and ctx.exists("groups", id=group_id, creator_id=ctx.uid)


def _direct_participant(ctx: PolicyContext, row: Row) -> bool:
    return (ctx.is_caller(row.get("sender_id")) or ctx.is_caller(row.get("recipient_id"))) \
        and row.get("group_id") is None


_GROUP_ADMIN_SQL = (
    "EXISTS (SELECT 1 FROM groups WHERE id = group_members.group_id AND creator_id = auth.uid()) "
    "OR EXISTS (SELECT 1 FROM group_members gm WHERE gm.group_id = group_members.group_id "
    "AND gm.user_id = auth.uid() AND gm.is_admin = true)"
)
_GROUPS_ADMIN_SQL = (
    "auth.uid() = creator_id OR EXISTS (SELECT 1 FROM group_members WHERE group_id = groups.id "
    "AND user_id = auth.uid() AND is_admin = true)"
)
_MEMBER_OF_MESSAGE_GROUP_SQL = (
    "EXISTS (SELECT 1 FROM group_members WHERE group_id = messages.group_id AND user_id = auth.uid())"
)

_group_manager = Clause(
    _GROUP_ADMIN_SQL,
    lambda ctx, row: _is_creator(ctx, row.get("group_id")) or _is_admin(ctx, row.get("group_id")),
)
_groups_manager = Clause(
    _GROUPS_ADMIN_SQL,
    lambda ctx, row: ctx.is_caller(row.get("creator_id")) or _is_admin(ctx, row.get("id")),
)


PROFILE_POLICIES = (
    Policy("Public profiles are viewable by everyone", "profiles", Command.SELECT, using=TRUE),
    Policy("Users can update own profile", "profiles", Command.UPDATE,
           using=owned_by("id"), check=owned_by("id"), roles=(AUTHENTICATED,)),
    Policy("Users can insert own profile", "profiles", Command.INSERT,
           check=owned_by("id"), roles=(AUTHENTICATED,)),
)

POST_POLICIES = (
    Policy("Posts are viewable by everyone", "posts", Command.SELECT, using=TRUE),
    Policy("Users can create own posts", "posts", Command.INSERT,
           check=owned_by("user_id"), roles=(AUTHENTICATED,)),
    Policy("Users can delete own posts", "posts", Command.DELETE,
           using=owned_by("user_id"), roles=(AUTHENTICATED,)),
)

FOLLOW_POLICIES = (
    Policy("Follows are viewable by everyone", "follows", Command.SELECT, using=TRUE),
    Policy("Users can follow others", "follows", Command.INSERT,
           check=owned_by("follower_id"), roles=(AUTHENTICATED,)),
    Policy("Users can unfollow", "follows", Command.DELETE,
           using=owned_by("follower_id"), roles=(AUTHENTICATED,)),
)

MESSAGE_POLICIES = (
    Policy("Users can view DMs", "messages", Command.SELECT, roles=(AUTHENTICATED,), using=Clause(
        "(auth.uid() = sender_id OR auth.uid() = recipient_id) AND group_id IS NULL",
        _direct_participant,
    )),
    Policy("Users can view group messages", "messages", Command.SELECT, roles=(AUTHENTICATED,), using=Clause(
        f"group_id IS NOT NULL AND {_MEMBER_OF_MESSAGE_GROUP_SQL}",
        lambda ctx, row: _is_member(ctx, row.get("group_id")),
    )),
    Policy("Users can send DMs", "messages", Command.INSERT, roles=(AUTHENTICATED,), check=Clause(
        "auth.uid() = sender_id AND group_id IS NULL",
        lambda ctx, row: ctx.is_caller(row.get("sender_id")) and row.get("group_id") is None,
    )),
    Policy("Users can send group messages", "messages", Command.INSERT, roles=(AUTHENTICATED,), check=Clause(
        f"group_id IS NOT NULL AND auth.uid() = sender_id AND {_MEMBER_OF_MESSAGE_GROUP_SQL}",
        lambda ctx, row: ctx.is_caller(row.get("sender_id")) and _is_member(ctx, row.get("group_id")),
    )),
    Policy("Users can mark DMs as read", "messages", Command.UPDATE, roles=(AUTHENTICATED,),
           using=Clause(
               "(auth.uid() = recipient_id) AND group_id IS NULL",
               lambda ctx, row: ctx.is_caller(row.get("recipient_id")) and row.get("group_id") is None,
           ),
           check=owned_by("recipient_id")),
)

GROUP_POLICIES = (
    Policy("Groups viewable by members", "groups", Command.SELECT, roles=(AUTHENTICATED,), using=Clause(
        "groups.creator_id = auth.uid() OR "
        "EXISTS (SELECT 1 FROM group_members WHERE group_id = groups.id AND user_id = auth.uid())",
        lambda ctx, row: ctx.is_caller(row.get("creator_id")) or _is_member(ctx, row.get("id")),
    )),
    Policy("Creators can create groups", "groups", Command.INSERT, check=owned_by("creator_id")),
    Policy("Admins and creators can update groups", "groups", Command.UPDATE,
           using=_groups_manager, check=_groups_manager),
    Policy("Admins and creators can delete groups", "groups", Command.DELETE, using=_groups_manager),
)

GROUP_MEMBER_POLICIES = (
    # Base case: no joins, so nothing that builds on it can recurse.
    Policy("Members viewable by self", "group_members", Command.SELECT, roles=(AUTHENTICATED,),
           using=Clause("group_members.user_id = auth.uid()", lambda ctx, row: ctx.is_caller(row.get("user_id"))),
           replaces=("Members viewable by members",)),
    Policy("Admins and creators can insert members", "group_members", Command.INSERT,
           roles=(AUTHENTICATED,), check=_group_manager),
    Policy("Admins and creators can update member roles", "group_members", Command.UPDATE,
           using=Clause(
               f"({_GROUP_ADMIN_SQL}) AND auth.uid() <> user_id",
               lambda ctx, row: _group_manager.test(ctx, row) and not ctx.is_caller(row.get("user_id")),
           ),
           check=TRUE),
    Policy("Admins, creators, and member can delete members", "group_members", Command.DELETE,
           using=Clause(
               f"auth.uid() = user_id OR {_GROUP_ADMIN_SQL}",
               lambda ctx, row: ctx.is_caller(row.get("user_id")) or _group_manager.test(ctx, row),
           )),
)

STORAGE_POLICIES = (
    Policy("Anyone can view media", STORAGE_OBJECTS, Command.SELECT, using=Clause(
        f"bucket_id = '{settings.media_bucket}'",
        lambda ctx, row: row.get("bucket_id") == settings.media_bucket,
    )),
    Policy("Users can upload", STORAGE_OBJECTS, Command.INSERT, roles=(AUTHENTICATED,), check=Clause(
        f"bucket_id = '{settings.media_bucket}'",
        lambda ctx, row: row.get("bucket_id") == settings.media_bucket,
    )),
    Policy("Users can delete own", STORAGE_OBJECTS, Command.DELETE, roles=(AUTHENTICATED,), using=Clause(
        f"bucket_id = '{settings.media_bucket}' AND (storage.foldername(name))[1] = auth.uid()::text",
        lambda ctx, row: row.get("bucket_id") == settings.media_bucket
        and ctx.uid is not None and first_folder(row.get("name")) == str(ctx.uid),
    )),
)

POLICY_SET = PolicySet(
    PROFILE_POLICIES + POST_POLICIES + FOLLOW_POLICIES + MESSAGE_POLICIES
    + GROUP_POLICIES + GROUP_MEMBER_POLICIES + STORAGE_POLICIES,
    protected=("profiles", "posts", "follows", "messages", "groups", "group_members", STORAGE_OBJECTS),
)
