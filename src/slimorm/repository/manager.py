from collections.abc import Iterable
from typing import TYPE_CHECKING

from slimorm.entity import Entity, entity_name
from slimorm.errors import UnknownRepositoryError
from slimorm.logger import get_logger

if TYPE_CHECKING:
    from slimorm.repository.base import AbstractRepository

logger = get_logger(__name__)


class RepositoryManager:
    """
    Registry of repositories keyed by entity type name.

    Entities registered with the manager use it to find their own
    repository in Entity.save() and Entity.remove(). The registry is meant
    to be filled once at startup.
    """

    def __init__(self, repositories: Iterable["AbstractRepository"] = ()):
        self._repositories: dict[str, "AbstractRepository"] = {}
        for repository in repositories:
            self.add_repository(repository)

    def add_repository(self, repository: "AbstractRepository") -> "RepositoryManager":
        """Register a repository under its entity name, replacing any previous one."""
        name = repository.get_entity_name()
        if name in self._repositories:
            logger.info("Replacing repository for %s", name)
        else:
            logger.debug("Registered repository for %s", name)
        self._repositories[name] = repository
        return self

    def get_repository(self, entity: type[Entity] | str) -> "AbstractRepository":
        """
        Get the repository of an entity type.

        Args:
            entity: Entity class or fully-qualified type name

        Raises:
            UnknownRepositoryError: if no repository is registered for it
        """
        name = entity if isinstance(entity, str) else entity_name(entity)
        try:
            return self._repositories[name]
        except KeyError:
            raise UnknownRepositoryError(f"No repository registered for {name!r}") from None

    def register(self, entity: Entity) -> None:
        """Attach this manager to an entity."""
        entity.set_repository_manager(self)

    def __contains__(self, entity: type[Entity] | str) -> bool:
        name = entity if isinstance(entity, str) else entity_name(entity)
        return name in self._repositories

    def __len__(self) -> int:
        return len(self._repositories)
