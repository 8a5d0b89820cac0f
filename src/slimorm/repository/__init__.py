"""
Repositories: Data Access Layer

A repository encapsulates all data access for one entity type: it builds the
SQL, runs it through the executor in ``slimorm.db`` and maps rows to entities
with the ``Hydrator``. ``AbstractRepository`` holds the generic logic;
concrete repositories only declare which columns are searchable.

Repositories should:
- Provide lookups, searches, counts, upserts and deletes for their entity.
- Contain no business logic, only data access and mapping between rows and
  entities.

The ``RepositoryManager`` keeps one repository per entity type so that
entities can find their own repository when saved or removed.

Example:
    manager = RepositoryManager()
    hydrator = Hydrator(manager)
    manager.add_repository(UserRepository(User, hydrator))

    user = manager.get_repository(User).find(1)
"""

from slimorm.repository.base import AbstractRepository
from slimorm.repository.manager import RepositoryManager
from slimorm.repository.query import SelectQuery, build_delete, build_upsert

__all__ = [
    "AbstractRepository",
    "RepositoryManager",
    "SelectQuery",
    "build_delete",
    "build_upsert",
]
