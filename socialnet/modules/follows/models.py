# Supabase table: follows
# Directed edge follower -> following; the composite key rules out duplicates.

from socialnet.database.schema import CASCADE, Column, ForeignKey, Table

"""
follows:
- follower_id: uuid (references profiles.id, cascade)
- following_id: uuid (references profiles.id, cascade)
- created_at: timestamptz (default now())
- primary key (follower_id, following_id)
"""

FOLLOWS = Table(
    name="follows",
    columns=(
        Column("follower_id", "uuid", nullable=False, references=ForeignKey("profiles", "id", CASCADE)),
        Column("following_id", "uuid", nullable=False, references=ForeignKey("profiles", "id", CASCADE)),
        Column("created_at", "timestamptz", default="now()"),
    ),
    primary_key=("follower_id", "following_id"),
)
