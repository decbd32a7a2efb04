# Supabase table: messages
# A row is either a direct message (group_id is null) or a group message
# (group_id set). The split is enforced by the policy set, not by a column
# constraint.

from socialnet.database.schema import CASCADE, SET_NULL, Column, ForeignKey, Index, Table

"""
messages:
- id: uuid (primary key, default gen_random_uuid())
- sender_id: uuid (not null, references profiles.id, cascade)
- recipient_id: uuid (not null, references profiles.id, cascade) - the sender for group messages
- content: text (not null)
- media_url: text (default ''), media_type: text (default 'image')
- read: boolean (default false)
- created_at: timestamptz (default now())
- reply_to_id: uuid (nullable, references messages.id, set null)
- group_id: uuid (nullable, references groups.id, cascade)
"""

MESSAGES = Table(
    name="messages",
    columns=(
        Column("id", "uuid", nullable=False, default="gen_random_uuid()"),
        Column("sender_id", "uuid", nullable=False, references=ForeignKey("profiles", "id", CASCADE)),
        Column("recipient_id", "uuid", nullable=False, references=ForeignKey("profiles", "id", CASCADE)),
        Column("content", "text", nullable=False),
        Column("media_url", "text", default="''"),
        Column("media_type", "text", default="'image'"),
        Column("read", "boolean", default="false"),
        Column("created_at", "timestamptz", default="now()"),
        Column("reply_to_id", "uuid", references=ForeignKey("messages", "id", SET_NULL)),
        Column("group_id", "uuid", references=ForeignKey("groups", "id", CASCADE)),
    ),
    primary_key=("id",),
    indexes=(
        Index("messages_sender_recipient_idx", ("sender_id", "recipient_id")),
        Index("messages_created_at_idx", ("created_at DESC",)),
        Index("messages_group_id_idx", ("group_id",)),
    ),
)
