"""
SQL statement builders.

Statements are composed with psycopg.sql: table and column names are always
rendered as quoted identifiers and every value is sent as a named parameter.
A SelectQuery keeps its clauses in separate lists and only renders the ones
that were actually added, so an empty filter set never produces a WHERE and
a zero limit never produces a LIMIT.
"""

from collections.abc import Iterable, Mapping
from typing import Any

from psycopg import sql

from slimorm.errors import QueryError

SORT_DIRECTIONS = ("ASC", "DESC")


def normalize_direction(token: str) -> str:
    """Turn a sort token such as 'asc' or 'DESC' into ASC or DESC."""
    direction = str(token).strip().upper()
    if direction not in SORT_DIRECTIONS:
        raise QueryError(f"Invalid sort direction: {token!r}. Valid: {list(SORT_DIRECTIONS)}")
    return direction


def _bind(params: dict[str, Any], name: str, value: Any) -> sql.Placeholder:
    """Add a parameter under a name not used yet and return its placeholder."""
    key = name
    suffix = 1
    while key in params:
        key = f"{name}_{suffix}"
        suffix += 1
    params[key] = value
    return sql.Placeholder(key)


def _non_negative(value: int, what: str) -> int:
    if not isinstance(value, int) or isinstance(value, bool) or value < 0:
        raise QueryError(f"{what} must be a non-negative integer, got {value!r}")
    return value


class SelectQuery:
    """
    Builder for a single-table SELECT.

    Usage:
        query, params = (
            SelectQuery("user")
            .where_equals({"role": "admin"})
            .where_like_any(["name", "email"], "smith")
            .order_by({"name": "ASC"})
            .limit(10)
            .build()
        )
        rows = db.fetch_all(query, params)
    """

    def __init__(self, table: str, projection: sql.Composable | None = None):
        self.table = table
        self.projection = projection if projection is not None else sql.SQL("*")
        self.conditions: list[sql.Composable] = []
        self.orderings: list[sql.Composable] = []
        self.params: dict[str, Any] = {}
        self._limit = 0
        self._offset = 0

    def where_equals(self, filters: Mapping[str, Any]) -> "SelectQuery":
        """Add one `column = value` condition per filter, AND-joined."""
        for column, value in filters.items():
            self.conditions.append(
                sql.SQL("{} = {}").format(sql.Identifier(column), _bind(self.params, column, value))
            )
        return self

    def where_like_any(self, columns: Iterable[str], term: str) -> "SelectQuery":
        """
        Add a condition matching rows where any of the columns contains term.

        The columns are OR-joined inside one parenthesized group, so the group
        combines with the other conditions through AND. Columns are cast to
        text so that numeric and boolean columns can be searched too. The
        match is case-sensitive. Nothing is added for an empty term or an
        empty column list.
        """
        columns = list(columns)
        if not term or not columns:
            return self

        placeholder = _bind(self.params, "search", f"%{term}%")
        matches = [
            sql.SQL("CAST({} AS TEXT) LIKE {}").format(sql.Identifier(column), placeholder)
            for column in columns
        ]
        self.conditions.append(sql.SQL("({})").format(sql.SQL(" OR ").join(matches)))
        return self

    def order_by(self, sorts: Mapping[str, str]) -> "SelectQuery":
        """Add sort keys in mapping order; the first key is the primary sort."""
        for column, direction in sorts.items():
            self.orderings.append(
                sql.SQL("{} {}").format(sql.Identifier(column), sql.SQL(normalize_direction(direction)))
            )
        return self

    def limit(self, limit: int) -> "SelectQuery":
        """Limit the number of rows; 0 means unbounded."""
        self._limit = _non_negative(limit, "limit")
        return self

    def offset(self, offset: int) -> "SelectQuery":
        """Skip the first rows; 0 means no offset."""
        self._offset = _non_negative(offset, "offset")
        return self

    def build(self) -> tuple[sql.Composed, dict[str, Any]]:
        """Render the statement and the parameters to execute it with."""
        params = dict(self.params)
        parts = [sql.SQL("SELECT {} FROM {}").format(self.projection, sql.Identifier(self.table))]

        if self.conditions:
            parts.append(sql.SQL("WHERE {}").format(sql.SQL(" AND ").join(self.conditions)))
        if self.orderings:
            parts.append(sql.SQL("ORDER BY {}").format(sql.SQL(", ").join(self.orderings)))
        if self._limit:
            parts.append(sql.SQL("LIMIT {}").format(_bind(params, "limit", self._limit)))
        if self._offset:
            parts.append(sql.SQL("OFFSET {}").format(_bind(params, "offset", self._offset)))

        return sql.SQL(" ").join(parts), params


def count_projection() -> sql.Composable:
    """Projection returning the number of matching rows as `total`."""
    return sql.SQL("COUNT(*) AS {}").format(sql.Identifier("total"))


def build_upsert(
    table: str, values: Mapping[str, Any], primary_key: str = "id"
) -> tuple[sql.Composed, dict[str, Any]]:
    """
    Build an insert that updates the existing row on a primary key conflict.

    The primary key column is only inserted when it is part of ``values``;
    otherwise the database assigns it. The statement returns the primary key
    of the affected row.

    Args:
        table: Table name
        values: Column -> value, optionally including the primary key
        primary_key: Primary key column

    Returns:
        Tuple of (statement, params)
    """
    params = dict(values)
    columns = list(params)
    updates = [column for column in columns if column != primary_key]
    pk = sql.Identifier(primary_key)

    if columns:
        insert = sql.SQL("INSERT INTO {} ({}) VALUES ({})").format(
            sql.Identifier(table),
            sql.SQL(", ").join(sql.Identifier(column) for column in columns),
            sql.SQL(", ").join(sql.Placeholder(column) for column in columns),
        )
    else:
        insert = sql.SQL("INSERT INTO {} DEFAULT VALUES").format(sql.Identifier(table))

    if updates:
        on_conflict = sql.SQL("ON CONFLICT ({}) DO UPDATE SET {}").format(
            pk,
            sql.SQL(", ").join(
                sql.SQL("{} = EXCLUDED.{}").format(sql.Identifier(column), sql.Identifier(column))
                for column in updates
            ),
        )
    else:
        on_conflict = sql.SQL("ON CONFLICT ({}) DO NOTHING").format(pk)

    query = sql.SQL(" ").join([insert, on_conflict, sql.SQL("RETURNING {}").format(pk)])
    return query, params


def build_delete(table: str, primary_key: str, value: Any) -> tuple[sql.Composed, dict[str, Any]]:
    """Build a delete of the row with the given primary key."""
    query = sql.SQL("DELETE FROM {} WHERE {} = {}").format(
        sql.Identifier(table), sql.Identifier(primary_key), sql.Placeholder(primary_key)
    )
    return query, {primary_key: value}
