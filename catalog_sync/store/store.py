"""Store module for the templates written by a catalog sync."""

from abc import ABC, abstractmethod
from collections import defaultdict
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
import logging

from catalog_sync.manifest import CatalogTemplate, TemplateVersionSpec

_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True, order=True)
class TemplateKey:
    """Identifier for a template in the store."""

    namespace: str
    name: str

    @classmethod
    def of(cls, template: CatalogTemplate) -> "TemplateKey":
        return cls(namespace=template.namespace, name=template.name)

    def __str__(self) -> str:
        return f"{self.namespace}/{self.name}"


class StoreEvent(str, Enum):
    """Enum for store events."""

    TEMPLATE_CREATED = "template_created"
    TEMPLATE_UPDATED = "template_updated"
    TEMPLATE_DELETED = "template_deleted"


Listener = Callable[[TemplateKey, CatalogTemplate], None]


class TemplateStore(ABC):
    """Abstract base class for the downstream template store with listener support."""

    def __init__(self) -> None:
        self._listeners: defaultdict[StoreEvent, list[Listener]] = defaultdict(list)

    @abstractmethod
    async def get_template(self, namespace: str, name: str) -> CatalogTemplate:
        """Return the template with the given identity.

        Raises:
            ObjectNotFoundError: If the template does not exist.
        """

    @abstractmethod
    async def create_template(self, template: CatalogTemplate) -> None:
        """Create a new template and its version sub-resources.

        Raises:
            StoreError: If the store rejected the write.
        """

    @abstractmethod
    async def update_template(
        self, existing: CatalogTemplate, template: CatalogTemplate
    ) -> None:
        """Replace an existing template with a newly built one.

        Raises:
            StoreError: If the store rejected the write.
        """

    @abstractmethod
    async def delete_template(self, name: str, namespace: str) -> None:
        """Delete a template and its version sub-resources.

        Raises:
            ObjectNotFoundError: If the template does not exist.
            StoreError: If the store rejected the delete.
        """

    @abstractmethod
    async def list_templates(self, namespace: str | None = None) -> list[CatalogTemplate]:
        """List all templates, optionally filtered by namespace."""

    async def list_template_versions(
        self, namespace: str, name: str
    ) -> list[TemplateVersionSpec]:
        """List the versions of a template."""
        template = await self.get_template(namespace, name)
        return list(template.versions)

    def add_listener(self, event: StoreEvent, callback: Listener) -> Callable[[], None]:
        """Register a callback for a store event.

        Returns a callable that can be called to remove the listener.
        """

        def remove() -> None:
            if callback in self._listeners[event]:
                self._listeners[event].remove(callback)

        self._listeners[event].append(callback)
        return remove

    def _fire_event(
        self, event: StoreEvent, key: TemplateKey, template: CatalogTemplate
    ) -> None:
        for callback in list(self._listeners[event]):
            try:
                callback(key, template)
            except Exception as err:
                _LOGGER.error("Listener for %s on %s failed: %s", event, key, err)
