"""
Declarative table definitions and DDL rendering.

Each feature module declares its tables in its own ``models.py`` using the
primitives below; ``tables()`` collects them in dependency order so the
rendered DDL can be applied top to bottom. Everything rendered here is
idempotent (``IF NOT EXISTS``) and safe to re-run.
"""

from dataclasses import dataclass
from functools import lru_cache
from typing import List, Optional, Tuple

CASCADE = "CASCADE"
SET_NULL = "SET NULL"


@dataclass(frozen=True)
class ForeignKey:
    table: str
    column: Optional[str] = "id"
    on_delete: Optional[str] = None

    def render(self) -> str:
        target = self.table if self.column is None else f"{self.table}({self.column})"
        sql = f"REFERENCES {target}"
        if self.on_delete:
            sql += f" ON DELETE {self.on_delete}"
        return sql


@dataclass(frozen=True)
class Column:
    name: str
    type: str
    nullable: bool = True
    unique: bool = False
    default: Optional[str] = None
    references: Optional[ForeignKey] = None


@dataclass(frozen=True)
class Index:
    name: str
    columns: Tuple[str, ...]


@dataclass(frozen=True)
class Table:
    name: str
    columns: Tuple[Column, ...]
    primary_key: Tuple[str, ...]
    indexes: Tuple[Index, ...] = ()

    def column(self, name: str) -> Column:
        for column in self.columns:
            if column.name == name:
                return column
        raise KeyError(f"{self.name} has no column {name}")

    @property
    def column_names(self) -> List[str]:
        return [c.name for c in self.columns]

    def _render_column(self, column: Column) -> str:
        parts = [column.name, column.type]
        if self.primary_key == (column.name,):
            parts.append("PRIMARY KEY")
        if column.unique:
            parts.append("UNIQUE")
        if not column.nullable and self.primary_key != (column.name,):
            parts.append("NOT NULL")
        if column.default is not None:
            parts.append(f"DEFAULT {column.default}")
        if column.references is not None:
            parts.append(column.references.render())
        return " ".join(parts)

    def render(self) -> str:
        lines = [self._render_column(c) for c in self.columns]
        if len(self.primary_key) > 1:
            lines.append(f"PRIMARY KEY ({', '.join(self.primary_key)})")
        body = ",\n  ".join(lines)
        return f"CREATE TABLE IF NOT EXISTS {self.name} (\n  {body}\n);"

    def render_indexes(self) -> List[str]:
        return [
            f"CREATE INDEX IF NOT EXISTS {index.name} ON {self.name}({', '.join(index.columns)});"
            for index in self.indexes
        ]


@lru_cache(maxsize=None)
def tables() -> Tuple[Table, ...]:
    from socialnet.modules.profiles.models import PROFILES
    from socialnet.modules.posts.models import POSTS
    from socialnet.modules.follows.models import FOLLOWS
    from socialnet.modules.groups.models import GROUPS, GROUP_MEMBERS
    from socialnet.modules.messages.models import MESSAGES

    # groups must exist before messages.group_id can reference it
    return (PROFILES, POSTS, FOLLOWS, GROUPS, MESSAGES, GROUP_MEMBERS)


def get_table(name: str) -> Table:
    for table in tables():
        if table.name == name:
            return table
    raise KeyError(f"Unknown table: {name}")


def referencing(name: str) -> List[Tuple[Table, Column]]:
    """Every (table, column) whose foreign key points at ``name``."""
    return [
        (table, column)
        for table in tables()
        for column in table.columns
        if column.references is not None and column.references.table == name
    ]


def render_schema_sql() -> str:
    statements = [table.render() for table in tables()]
    statements += [f"ALTER TABLE {table.name} ENABLE ROW LEVEL SECURITY;" for table in tables()]
    for table in tables():
        statements += table.render_indexes()
    return "\n\n".join(statements)
