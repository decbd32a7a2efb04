"""
Policy-gated table access.

Services never talk to ``supabase.table`` directly; they go through a
``PolicyGateway`` bound to the calling identity. Reads are filtered by the
SELECT policies (rows the caller may not see are dropped, not reported),
writes are checked before they are sent and rejected with ``PolicyDenied``.
"""

import logging
from typing import Any, Dict, List, Optional

from postgrest.exceptions import APIError
from supabase import Client

from socialnet.core.errors import NotFound, PolicyDenied, translate_api_error
from socialnet.core.policies import POLICY_SET, PolicyContext, PolicySet

logger = logging.getLogger(__name__)


def apply_filters(query, match: Dict[str, Any]):
    for column, value in match.items():
        if value is None:
            query = query.is_(column, "null")
        elif isinstance(value, (list, tuple, set)):
            query = query.in_(column, list(value))
        else:
            query = query.eq(column, value)
    return query


def execute(query):
    """Run a postgrest request, translating backend errors into SocialError."""
    try:
        return query.execute()
    except APIError as e:
        raise translate_api_error(e) from e


class SupabaseRowSource:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def fetch(self, table: str, **match: Any) -> List[Dict[str, Any]]:
        query = apply_filters(self.supabase.table(table).select("*"), match)
        return execute(query).data or []


class PolicyGateway:
    def __init__(self, supabase: Client, uid: Optional[str], policies: PolicySet = POLICY_SET):
        self.supabase = supabase
        self.uid = uid
        self.policies = policies
        self.source = SupabaseRowSource(supabase)

    def context(self) -> PolicyContext:
        return PolicyContext(self.uid, self.source, self.policies)

    def select(
        self,
        table: str,
        order_by: Optional[str] = None,
        desc: bool = False,
        limit: Optional[int] = None,
        **match: Any
    ) -> List[Dict[str, Any]]:
        """Rows of ``table`` the caller may see.

        With ``limit`` the rows are read in pages of ``limit`` and paging stops
        once enough visible rows are collected or the table runs out.
        """
        ctx = self.context()
        if not limit:
            rows = execute(self._select_query(table, order_by, desc, match)).data or []
            return self.policies.visible_rows(ctx, table, rows)

        visible: List[Dict[str, Any]] = []
        offset = 0
        while len(visible) < limit:
            query = self._select_query(table, order_by, desc, match).range(offset, offset + limit - 1)
            page = execute(query).data or []
            visible.extend(self.policies.visible_rows(ctx, table, page))
            if len(page) < limit:
                break
            offset += limit
        return visible[:limit]

    def _select_query(self, table: str, order_by: Optional[str], desc: bool, match: Dict[str, Any]):
        query = apply_filters(self.supabase.table(table).select("*"), match)
        if order_by:
            query = query.order(order_by, desc=desc)
        return query

    def first(self, table: str, **match: Any) -> Optional[Dict[str, Any]]:
        rows = self.select(table, **match)
        return rows[0] if rows else None

    def insert(self, table: str, row: Dict[str, Any]) -> Dict[str, Any]:
        if not self.policies.allows_insert(self.context(), table, row):
            logger.info(f"INSERT on {table} denied for {self.uid}")
            raise PolicyDenied()
        result = execute(self.supabase.table(table).insert(row))
        if not result.data:
            raise PolicyDenied()
        return result.data[0]

    def update(self, table: str, values: Dict[str, Any], **match: Any) -> List[Dict[str, Any]]:
        rows = self.source.fetch(table, **match)
        if not rows:
            raise NotFound()
        ctx = self.context()
        for row in rows:
            if not self.policies.allows_update(ctx, table, row, {**row, **values}):
                logger.info(f"UPDATE on {table} denied for {self.uid}")
                raise PolicyDenied()
        query = apply_filters(self.supabase.table(table).update(values), match)
        return execute(query).data or []

    def delete(self, table: str, **match: Any) -> List[Dict[str, Any]]:
        rows = self.source.fetch(table, **match)
        if not rows:
            raise NotFound()
        ctx = self.context()
        for row in rows:
            if not self.policies.allows_delete(ctx, table, row):
                logger.info(f"DELETE on {table} denied for {self.uid}")
                raise PolicyDenied()
        query = apply_filters(self.supabase.table(table).delete(), match)
        return execute(query).data or []
