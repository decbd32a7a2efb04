# Supabase table: profiles (1:1 with auth.users)
# Authentication data (password, email, tokens) lives in auth.users and is
# managed by Supabase Auth; this table only stores the public profile.

from socialnet.config.settings import settings
from socialnet.database.schema import CASCADE, Column, ForeignKey, Table

"""
profiles:
- id: uuid (primary key, references auth.users, cascades on user delete)
- username: text (unique, not null) - always written lowercase
- display_name: text (not null)
- bio, avatar_url, banner_url: text (default '')
- verified: boolean (default false) - only changed by staff
- created_at: timestamptz (default now())
- theme: text (default 'lt-classic')
- verification_request: text (default '') - non-empty means pending
- last_seen: timestamptz (nullable)
"""

PROFILES = Table(
    name="profiles",
    columns=(
        Column("id", "uuid", nullable=False, references=ForeignKey("auth.users", None, CASCADE)),
        Column("username", "text", nullable=False, unique=True),
        Column("display_name", "text", nullable=False),
        Column("bio", "text", default="''"),
        Column("avatar_url", "text", default="''"),
        Column("banner_url", "text", default="''"),
        Column("verified", "boolean", default="false"),
        Column("created_at", "timestamptz", default="now()"),
        Column("theme", "text", default=f"'{settings.default_theme}'"),
        Column("verification_request", "text", default="''"),
        Column("last_seen", "timestamptz"),
    ),
    primary_key=("id",),
)
