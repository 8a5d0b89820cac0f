import logging
from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import Any

from slimorm import db
from slimorm.entity import Entity, entity_name, mapping_for, resolve_entity_type
from slimorm.entity.mapping import PRIMARY_KEY
from slimorm.errors import ConfigurationError, NotFoundError, UnknownColumnError
from slimorm.hydrator import Hydrator
from slimorm.logger import get_logger
from slimorm.repository.query import (
    SelectQuery,
    build_delete,
    build_upsert,
    count_projection,
)

logger = get_logger(__name__)


class AbstractRepository(ABC):
    """
    Generic repository for one entity type.

    Builds parameterized SQL for lookups, searches, counts, upserts and
    deletes against the entity's table, runs it through the executor and
    converts rows to entities with the hydrator.

    The table name is the unqualified entity class name with its first
    letter lower-cased (``User`` -> ``user``). Column names accepted in
    filters and sorts are restricted to the entity's persisted columns plus
    ``id``.

    Subclasses declare which columns take part in free-text search:

        class UserRepository(AbstractRepository):
            def get_searchable_fields(self) -> list[str]:
                return ["name", "email"]

    Args:
        entity: Entity class, or its fully-qualified type name
        hydrator: Hydrator used to build and extract entities
        executor: Object providing fetch_one, fetch_all and execute.
            Defaults to the slimorm.db module.
    """

    def __init__(self, entity: type[Entity] | str, hydrator: Hydrator, executor=None):
        self.entity_name = entity if isinstance(entity, str) else entity_name(entity)
        self.hydrator = hydrator
        self.db = executor if executor is not None else db

    @abstractmethod
    def get_searchable_fields(self) -> list[str]:
        """Columns matched against the search term in find_by and count_rows_by."""

    def get_entity_name(self) -> str:
        """Fully-qualified name of the entity type this repository stores."""
        return self.entity_name

    @property
    def table_name(self) -> str:
        """
        Table derived from the entity type name.

        Raises:
            ConfigurationError: if the entity type name is empty
        """
        name = self.get_entity_name().rpartition(".")[2]
        if not name:
            raise ConfigurationError(
                f"Cannot derive a table name from entity type {self.get_entity_name()!r}"
            )
        return name[0].lower() + name[1:]

    @property
    def columns(self) -> list[str]:
        """Primary key followed by the persisted columns of the entity."""
        entity_type = resolve_entity_type(self.get_entity_name())
        return [PRIMARY_KEY, *mapping_for(entity_type).columns]

    # Reads

    def find(self, id: int) -> Entity:
        """
        Get the entity with the given primary key.

        Raises:
            NotFoundError: if no row has this id
        """
        query, params = SelectQuery(self.table_name).where_equals({PRIMARY_KEY: id}).build()
        self._log_statement("find", query, params)

        row = self.db.fetch_one(query, params)
        if row is None:
            logger.debug("find: no %s row with id %s", self.table_name, id)
            raise NotFoundError(f"No {self.table_name} row with id {id}")

        entity = self.hydrator.hydrate(self.get_entity_name(), row)
        self.hydrator.hydrate_id(entity, id)
        return entity

    def find_one_by(self, filters: Mapping[str, Any]) -> Entity:
        """
        Get the first entity whose columns equal all the filter values.

        Raises:
            NotFoundError: if no row matches
            UnknownColumnError: if a filter key is not a column
        """
        self._check_columns(filters, "filter")
        query, params = SelectQuery(self.table_name).where_equals(filters).limit(1).build()
        self._log_statement("find_one_by", query, params)

        row = self.db.fetch_one(query, params)
        if row is None:
            logger.debug("find_one_by: no %s row matches %s", self.table_name, dict(filters))
            raise NotFoundError(f"No {self.table_name} row matches {dict(filters)}")

        return self._hydrate_row(row)

    def find_by(
        self,
        filters: Mapping[str, Any] | None = None,
        search: str = "",
        sorts: Mapping[str, str] | None = None,
        offset: int = 0,
        limit: int = 0,
    ) -> list[Entity]:
        """
        Get the entities matching the filters and the search term.

        Every clause is optional: no filters means no equality conditions,
        an empty search term means no LIKE conditions, no sorts means no
        ORDER BY, and an offset or limit of 0 means unbounded.

        Args:
            filters: Column -> value, all of which must be equal
            search: Term matched with LIKE against any searchable field
            sorts: Column -> 'ASC' or 'DESC', first key sorts first
            offset: Number of rows to skip
            limit: Maximum number of rows

        Raises:
            NotFoundError: if nothing matches
            UnknownColumnError: if a filter or sort key is not a column
        """
        filters = filters or {}
        sorts = sorts or {}
        self._check_columns(filters, "filter")
        self._check_columns(sorts, "sort")

        query, params = (
            self._filtered_query(filters, search)
            .order_by(sorts)
            .offset(offset)
            .limit(limit)
            .build()
        )
        self._log_statement("find_by", query, params)

        rows = self.db.fetch_all(query, params)
        if not rows:
            logger.debug("find_by: no %s rows match", self.table_name)
            raise NotFoundError(f"No {self.table_name} rows match the search")

        return [self._hydrate_row(row) for row in rows]

    def count_rows(self) -> int:
        """Count all rows of the table."""
        return self.count_rows_by()

    def count_rows_by(self, filters: Mapping[str, Any] | None = None, search: str = "") -> int:
        """
        Count the rows matching the filters and the search term.

        Uses the same conditions as find_by. Returns 0 when nothing matches.
        """
        filters = filters or {}
        self._check_columns(filters, "filter")

        query, params = self._filtered_query(filters, search, count_projection()).build()
        self._log_statement("count_rows_by", query, params)

        row = self.db.fetch_one(query, params)
        return int(row["total"]) if row else 0

    # Writes

    def upsert(self, entity: Entity) -> bool:
        """
        Insert the entity, or update its row if the id already exists.

        The id column is only written when the entity has an id. When the
        database assigns a new id it is set on the entity.

        Returns:
            False if no row was affected, True otherwise
        """
        values = self.hydrator.extract(entity)
        if entity.get_id() is not None:
            values = {PRIMARY_KEY: entity.get_id(), **values}

        query, params = build_upsert(self.table_name, values, PRIMARY_KEY)
        self._log_statement("upsert", query, params)

        row = self.db.fetch_one(query, params)
        if row is None:
            logger.warning("upsert into %s affected no rows", self.table_name)
            return False

        if entity.get_id() is None:
            self.hydrator.hydrate_id(entity, row[PRIMARY_KEY])
        return True

    def delete(self, entity: Entity) -> bool:
        """
        Delete the entity's row.

        Returns:
            True if exactly one row was deleted. An entity without an id
            returns False without touching the database.
        """
        id = entity.get_id()
        if id is None:
            logger.warning("delete from %s skipped: entity has no id", self.table_name)
            return False

        query, params = build_delete(self.table_name, PRIMARY_KEY, id)
        self._log_statement("delete", query, params)

        deleted = self.db.execute(query, params)
        if deleted != 1:
            logger.warning("delete from %s with id %s affected %s rows", self.table_name, id, deleted)
        return deleted == 1

    # Helpers

    def _filtered_query(self, filters: Mapping[str, Any], search: str, projection=None) -> SelectQuery:
        query = SelectQuery(self.table_name, projection).where_equals(filters)
        if search:
            query.where_like_any(self._searchable_columns(), search)
        return query

    def _searchable_columns(self) -> list[str]:
        table = self.table_name
        fields = list(self.get_searchable_fields())
        columns = self.columns
        unknown = [field for field in fields if field not in columns]
        if unknown:
            raise ConfigurationError(
                f"{type(self).__name__}: searchable fields {unknown} are not columns of {table}"
            )
        return fields

    def _check_columns(self, keys, what: str) -> None:
        table = self.table_name
        columns = self.columns
        unknown = [key for key in keys if key not in columns]
        if unknown:
            raise UnknownColumnError(
                f"Unknown {what} column(s) {unknown} for {table}. Valid: {columns}"
            )

    def _hydrate_row(self, row: Mapping[str, Any]) -> Entity:
        entity = self.hydrator.hydrate(self.get_entity_name(), row)
        if PRIMARY_KEY in row:
            self.hydrator.hydrate_id(entity, row[PRIMARY_KEY])
        return entity

    def _log_statement(self, operation: str, query, params: Mapping[str, Any]) -> None:
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug("%s: %s %s", operation, query.as_string(), params)
