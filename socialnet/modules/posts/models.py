# Supabase table: posts
# Rows are removed together with the owning profile (ON DELETE CASCADE).

from socialnet.database.schema import CASCADE, Column, ForeignKey, Index, Table

"""
posts:
- id: uuid (primary key, default gen_random_uuid())
- user_id: uuid (not null, references profiles.id)
- content: text (not null)
- media_url: text (default '')
- media_type: text (default 'image')
- created_at: timestamptz (default now())
"""

POSTS = Table(
    name="posts",
    columns=(
        Column("id", "uuid", nullable=False, default="gen_random_uuid()"),
        Column("user_id", "uuid", nullable=False, references=ForeignKey("profiles", "id", CASCADE)),
        Column("content", "text", nullable=False),
        Column("media_url", "text", default="''"),
        Column("media_type", "text", default="'image'"),
        Column("created_at", "timestamptz", default="now()"),
    ),
    primary_key=("id",),
    indexes=(
        Index("posts_user_id_idx", ("user_id",)),
        Index("posts_created_at_idx", ("created_at DESC",)),
    ),
)
