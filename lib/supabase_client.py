# =============================================================================
# lib/supabase_client.py - Supabase Client Wrapper
# =============================================================================
# This module provides a typed wrapper for Supabase database operations.
# It implements the singleton pattern to reuse a single client connection
# and provides specialized methods for:
# - Catalog rows (apps / appsen), tags and app-tag links
# - Credit balances and the conditional debit RPC
#
# Rows are returned as plain dicts; turning them into models is the
# caller's job (see lib/catalog_store.py, lib/credit_ledger.py).
#
# Usage:
#   from lib.supabase_client import SupabaseClient
#   row = SupabaseClient.fetch_app("apps", 2774)
# =============================================================================

from __future__ import annotations

import logging
from typing import Any

from supabase import create_client, Client

from app.config import settings

# Set up logging for this module
logger = logging.getLogger(__name__)

# PostgREST error code for "no rows returned" on .single()
NO_ROWS_CODE = "PGRST116"

# Characters with meaning inside a PostgREST or=(...) filter
_FILTER_UNSAFE = str.maketrans({",": " ", "(": " ", ")": " ", "*": " ", "%": " "})


class SupabaseClientError(Exception):
    """
    Error during Supabase operations.

    Carries a code and a suggestion telling the operator how to fix it.
    """

    def __init__(
        self,
        message: str,
        code: str = "SUPABASE_ERROR",
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.code = code
        self.message = message
        self.suggestion = suggestion
        self.details = details or {}

    def __str__(self) -> str:
        result = f"[{self.code}] {self.message}"
        if self.suggestion:
            result += f" Suggestion: {self.suggestion}"
        return result


def _sanitize_term(term: str) -> str:
    return " ".join(term.translate(_FILTER_UNSAFE).split())


class SupabaseClient:
    """
    Typed wrapper for Supabase database operations.

    Implements singleton pattern - one client instance is shared across
    the application. All methods are class methods for easy access without
    instantiation.

    Example:
        rows, total = SupabaseClient.query_apps(
            "appsen", category=5, offset=0, limit=20
        )
    """

    _instance: Client | None = None

    @classmethod
    def get_client(cls) -> Client:
        """
        Get or create the singleton Supabase client.

        Uses service_role key which bypasses Row Level Security (RLS).
        This is appropriate for server-side operations.

        Raises:
            SupabaseClientError: If client creation fails
        """
        if cls._instance is None:
            try:
                cls._instance = create_client(
                    settings.SUPABASE_URL,
                    settings.SUPABASE_SERVICE_KEY
                )
                logger.info("Supabase client initialized successfully")
            except Exception as e:
                raise SupabaseClientError(
                    message=f"Failed to create Supabase client: {e}",
                    code="CLIENT_INIT_FAILED",
                    suggestion="Check SUPABASE_URL and SUPABASE_SERVICE_KEY in your .env file"
                )
        return cls._instance

    # -------------------------------------------------------------------------
    # Apps
    # -------------------------------------------------------------------------

    @classmethod
    def fetch_app(cls, table: str, appid: int) -> dict[str, Any] | None:
        """
        Fetch one app row by id.

        Returns:
            Row dict, or None if not found

        Raises:
            SupabaseClientError: If query fails
        """
        client = cls.get_client()

        try:
            response = (
                client.table(table)
                .select("*")
                .eq("appid", appid)
                .single()
                .execute()
            )
            return response.data

        except Exception as e:
            if NO_ROWS_CODE in str(e):
                return None
            raise SupabaseClientError(
                message=f"Failed to fetch app: {e}",
                code="FETCH_APP_FAILED",
                details={"table": table, "appid": appid}
            )

    @classmethod
    def query_apps(
        cls,
        table: str,
        category: int | None = None,
        title_terms: list[str] | None = None,
        content_term: str | None = None,
        keyword: str | None = None,
        published_only: bool = True,
        offset: int = 0,
        limit: int = 20,
    ) -> tuple[list[dict[str, Any]], int]:
        """
        Query app rows with filters, newest first.

        Args:
            table: Catalog table ("apps" or "appsen")
            category: Only rows in this category
            title_terms: Title must contain any of these (case-insensitive)
            content_term: Content must contain this
            keyword: Title or content must contain this
            published_only: Only rows with status = 1
            offset: Rows to skip
            limit: Maximum rows to return

        Returns:
            Tuple of (rows, total matching rows)

        Raises:
            SupabaseClientError: If query fails
        """
        client = cls.get_client()

        try:
            query = client.table(table).select("*", count="exact")

            if published_only:
                query = query.eq("status", 1)
            if category is not None:
                query = query.eq("category", category)
            if content_term:
                query = query.ilike("content", f"%{content_term}%")
            if title_terms:
                terms = [t for t in (_sanitize_term(t) for t in title_terms) if t]
                if terms:
                    query = query.or_(",".join(f"title.ilike.*{t}*" for t in terms))
            if keyword:
                term = _sanitize_term(keyword)
                if term:
                    query = query.or_(f"title.ilike.*{term}*,content.ilike.*{term}*")

            response = (
                query
                .order("date", desc=True)
                .range(offset, offset + limit - 1)
                .execute()
            )

            rows = response.data or []
            total = response.count if response.count is not None else len(rows)
            logger.debug(f"Queried {len(rows)}/{total} rows from {table}")
            return rows, total

        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to query apps: {e}",
                code="QUERY_APPS_FAILED",
                suggestion=f"Check that the {table} table exists and is accessible",
                details={"table": table}
            )

    @classmethod
    def fetch_apps_by_ids(cls, table: str, appids: list[int]) -> list[dict[str, Any]]:
        """Fetch app rows for a list of ids (order not guaranteed)."""
        if not appids:
            return []

        client = cls.get_client()

        try:
            response = client.table(table).select("*").in_("appid", appids).execute()
            return response.data or []

        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to fetch apps: {e}",
                code="FETCH_APPS_FAILED",
                details={"table": table, "count": len(appids)}
            )

    @classmethod
    def insert_app(cls, table: str, data: dict[str, Any]) -> dict[str, Any]:
        """
        Insert an app row.

        Returns:
            The inserted row

        Raises:
            SupabaseClientError: If the insert fails or returns nothing
        """
        client = cls.get_client()

        try:
            response = client.table(table).insert(data).execute()
        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to insert app: {e}",
                code="INSERT_APP_FAILED",
                details={"table": table}
            )

        if not response.data:
            raise SupabaseClientError(
                message="Insert returned no data",
                code="INSERT_APP_FAILED",
                details={"table": table}
            )

        logger.info(f"Inserted app {response.data[0].get('appid')} into {table}")
        return response.data[0]

    @classmethod
    def update_app(cls, table: str, appid: int, data: dict[str, Any]) -> dict[str, Any] | None:
        """
        Update an app row.

        Returns:
            The updated row, or None if no row has this id
        """
        client = cls.get_client()

        try:
            response = client.table(table).update(data).eq("appid", appid).execute()
        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to update app: {e}",
                code="UPDATE_APP_FAILED",
                details={"table": table, "appid": appid}
            )

        if not response.data:
            return None

        logger.info(f"Updated app {appid} in {table}")
        return response.data[0]

    # -------------------------------------------------------------------------
    # Tags
    # -------------------------------------------------------------------------

    @classmethod
    def fetch_tag(cls, tag_id: int) -> dict[str, Any] | None:
        """Fetch one tag row, or None if not found."""
        client = cls.get_client()

        try:
            response = (
                client.table("tags")
                .select("id, name, enname")
                .eq("id", tag_id)
                .single()
                .execute()
            )
            return response.data

        except Exception as e:
            if NO_ROWS_CODE in str(e):
                return None
            raise SupabaseClientError(
                message=f"Failed to fetch tag: {e}",
                code="FETCH_TAG_FAILED",
                details={"tag_id": tag_id}
            )

    @classmethod
    def fetch_tags(cls, offset: int = 0, limit: int = 20) -> tuple[list[dict[str, Any]], int]:
        """Fetch a page of tags, newest (highest id) first."""
        client = cls.get_client()

        try:
            response = (
                client.table("tags")
                .select("id, name, enname", count="exact")
                .order("id", desc=True)
                .range(offset, offset + limit - 1)
                .execute()
            )
            rows = response.data or []
            return rows, response.count if response.count is not None else len(rows)

        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to fetch tags: {e}",
                code="FETCH_TAGS_FAILED",
            )

    @classmethod
    def fetch_tags_for_app(cls, appid: int) -> list[dict[str, Any]]:
        """Fetch all tags linked to an app."""
        client = cls.get_client()

        try:
            response = (
                client.table("app_tags")
                .select("tags(id, name, enname)")
                .eq("app_id", appid)
                .execute()
            )
            return [row["tags"] for row in (response.data or []) if row.get("tags")]

        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to fetch app tags: {e}",
                code="FETCH_APP_TAGS_FAILED",
                details={"appid": appid}
            )

    @classmethod
    def fetch_app_ids_for_tag(
        cls,
        tag_id: int,
        offset: int = 0,
        limit: int = 20,
    ) -> tuple[list[int], int]:
        """Fetch a page of app ids linked to a tag, highest id first."""
        client = cls.get_client()

        try:
            response = (
                client.table("app_tags")
                .select("app_id", count="exact")
                .eq("tag_id", tag_id)
                .order("app_id", desc=True)
                .range(offset, offset + limit - 1)
                .execute()
            )
            rows = response.data or []
            ids = [int(row["app_id"]) for row in rows]
            return ids, response.count if response.count is not None else len(ids)

        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to fetch tag links: {e}",
                code="FETCH_TAG_LINKS_FAILED",
                details={"tag_id": tag_id}
            )

    # -------------------------------------------------------------------------
    # Credits
    # -------------------------------------------------------------------------

    @classmethod
    def fetch_credit_balance(cls, user_id: str) -> int:
        """
        Fetch a user's credit balance.

        Users without a balance row have 0 credits.
        """
        client = cls.get_client()

        try:
            response = (
                client.table("credit_balances")
                .select("balance")
                .eq("user_id", user_id)
                .limit(1)
                .execute()
            )
            rows = response.data or []
            return int(rows[0]["balance"]) if rows else 0

        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to fetch credit balance: {e}",
                code="FETCH_BALANCE_FAILED",
                details={"user_id": user_id}
            )

    @classmethod
    def debit_credits(cls, user_id: str, amount: int, reason: str) -> bool:
        """
        Conditionally debit credits through the `debit_credits` RPC.

        The Postgres function performs the check and the decrement in one
        statement and records a ledger row:

            create function debit_credits(p_user_id text, p_amount int, p_reason text)
            returns boolean language plpgsql as $$
            begin
              update credit_balances set balance = balance - p_amount
               where user_id = p_user_id and balance >= p_amount;
              if not found then return false; end if;
              insert into credit_transactions (user_id, delta, reason)
              values (p_user_id, -p_amount, p_reason);
              return true;
            end $$;

        Returns:
            True if the debit was applied, False if the balance was too low
        """
        client = cls.get_client()

        try:
            response = client.rpc(
                "debit_credits",
                {"p_user_id": user_id, "p_amount": amount, "p_reason": reason},
            ).execute()
            return bool(response.data)

        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to debit credits: {e}",
                code="DEBIT_FAILED",
                suggestion="Check that the debit_credits function is installed",
                details={"user_id": user_id, "amount": amount}
            )

    @classmethod
    def ping(cls) -> None:
        """Cheap query used by the readiness probe."""
        cls.get_client().table("apps").select("appid").limit(1).execute()
