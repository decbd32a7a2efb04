"""
Schema declarations, rendered DDL and delete cascades
"""
import pytest

from socialnet.database.schema import get_table, referencing, render_schema_sql, tables
from socialnet.modules.media.models import media_type_for, render_bucket_sql
from socialnet.scripts.export_schema import build_migration, main


def test_tables_are_ordered_by_dependency():
    seen = {"auth.users"}
    for table in tables():
        for column in table.columns:
            ref = column.references
            if ref is not None and ref.table != table.name:
                assert ref.table in seen, f"{table.name}.{column.name} references {ref.table} before it exists"
        seen.add(table.name)


def test_rendered_tables_are_idempotent():
    sql = render_schema_sql()
    for table in tables():
        assert f"CREATE TABLE IF NOT EXISTS {table.name} (" in sql
        assert f"ALTER TABLE {table.name} ENABLE ROW LEVEL SECURITY;" in sql
    assert "CREATE INDEX IF NOT EXISTS posts_created_at_idx ON posts(created_at DESC);" in sql


def test_profile_columns():
    sql = get_table("profiles").render()
    assert "id uuid PRIMARY KEY REFERENCES auth.users ON DELETE CASCADE" in sql
    assert "username text UNIQUE NOT NULL" in sql
    assert "theme text DEFAULT 'lt-classic'" in sql
    assert "last_seen timestamptz" in sql


def test_composite_primary_keys():
    assert "PRIMARY KEY (follower_id, following_id)" in get_table("follows").render()
    assert "PRIMARY KEY (group_id, user_id)" in get_table("group_members").render()


def test_profile_dependents():
    dependents = {(t.name, c.name): c.references.on_delete for t, c in referencing("profiles")}
    assert dependents == {
        ("posts", "user_id"): "CASCADE",
        ("follows", "follower_id"): "CASCADE",
        ("follows", "following_id"): "CASCADE",
        ("groups", "creator_id"): "SET NULL",
        ("messages", "sender_id"): "CASCADE",
        ("messages", "recipient_id"): "CASCADE",
        ("group_members", "user_id"): "CASCADE",
    }


def test_unknown_table():
    with pytest.raises(KeyError):
        get_table("likes")


def test_bucket_and_media_types():
    assert render_bucket_sql("media") == (
        "INSERT INTO storage.buckets (id, name, public) VALUES ('media', 'media', true) ON CONFLICT DO NOTHING;"
    )
    assert media_type_for("video/mp4") == "video"
    assert media_type_for("image/webp") == "image"


def test_migration_orders_tables_before_policies():
    sql = build_migration()
    assert sql.index("CREATE TABLE IF NOT EXISTS group_members") < sql.index("CREATE POLICY")
    assert sql.rstrip().endswith("ON CONFLICT DO NOTHING;")


def test_export_writes_file(tmp_path):
    target = tmp_path / "out" / "schema.sql"
    main(["--output", str(target)])
    assert target.read_text() == build_migration()


def test_export_to_stdout(capsys):
    main(["--output", "-"])
    assert "CREATE POLICY" in capsys.readouterr().out


# ===================================================================
# Account deletion cascade
# ===================================================================

def test_deleting_account_cascades(db, alice, bob, carol):
    db.put("posts", user_id=alice, content="mine")
    db.put("posts", user_id=bob, content="theirs")
    db.put("follows", follower_id=alice, following_id=bob)
    db.put("follows", follower_id=bob, following_id=alice)
    db.put("follows", follower_id=bob, following_id=carol)
    sent = db.put("messages", sender_id=alice, recipient_id=bob, content="to bob")
    db.put("messages", sender_id=bob, recipient_id=alice, content="to alice", reply_to_id=sent["id"])
    db.put("messages", sender_id=bob, recipient_id=carol, content="to carol")
    group = db.put("groups", name="Alice's", creator_id=alice)
    db.put("group_members", group_id=group["id"], user_id=alice, is_admin=True)
    db.put("group_members", group_id=group["id"], user_id=bob)

    db.auth.admin.delete_user(alice)

    assert db.find("profiles", id=alice) == []
    assert [p["content"] for p in db.find("posts")] == ["theirs"]
    assert db.find("follows") == [db.find("follows", follower_id=bob, following_id=carol)[0]]
    assert [m["content"] for m in db.find("messages")] == ["to carol"]
    assert db.find("groups")[0]["creator_id"] is None
    assert [m["user_id"] for m in db.find("group_members")] == [bob]


def test_deleting_group_cascades_members_and_messages(db, alice, bob):
    group = db.put("groups", name="Short lived", creator_id=alice)
    db.put("group_members", group_id=group["id"], user_id=alice, is_admin=True)
    db.put("messages", sender_id=alice, recipient_id=alice, content="hello", group_id=group["id"])
    db.put("messages", sender_id=alice, recipient_id=bob, content="dm")

    db.table("groups").delete().eq("id", group["id"]).execute()

    assert db.find("group_members") == []
    assert [m["content"] for m in db.find("messages")] == ["dm"]
