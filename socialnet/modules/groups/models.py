# Supabase tables: groups, group_members
# This file declares the tables; the access rules for them live in
# socialnet.core.policies.

from socialnet.database.schema import CASCADE, SET_NULL, Column, ForeignKey, Index, Table

"""
groups:
- id: uuid (primary key, default gen_random_uuid())
- name: text (not null)
- creator_id: uuid (nullable, references profiles.id, set null on delete)
- created_at: timestamptz (default now())
- avatar_url, banner_url: text (default '')

group_members:
- group_id: uuid (references groups.id, cascade)
- user_id: uuid (references profiles.id, cascade)
- joined_at: timestamptz (default now())
- is_admin: boolean (default false)
- primary key (group_id, user_id)
"""

GROUPS = Table(
    name="groups",
    columns=(
        Column("id", "uuid", nullable=False, default="gen_random_uuid()"),
        Column("name", "text", nullable=False),
        Column("creator_id", "uuid", references=ForeignKey("profiles", "id", SET_NULL)),
        Column("created_at", "timestamptz", default="now()"),
        Column("avatar_url", "text", default="''"),
        Column("banner_url", "text", default="''"),
    ),
    primary_key=("id",),
)

GROUP_MEMBERS = Table(
    name="group_members",
    columns=(
        Column("group_id", "uuid", nullable=False, references=ForeignKey("groups", "id", CASCADE)),
        Column("user_id", "uuid", nullable=False, references=ForeignKey("profiles", "id", CASCADE)),
        Column("joined_at", "timestamptz", default="now()"),
        Column("is_admin", "boolean", default="false"),
    ),
    primary_key=("group_id", "user_id"),
    indexes=(
        Index("group_members_group_id_idx", ("group_id",)),
        Index("group_members_user_id_idx", ("user_id",)),
    ),
)
