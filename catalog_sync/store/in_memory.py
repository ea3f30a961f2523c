"""Module for in memory template store."""

import copy
import logging

from catalog_sync.exceptions import ObjectNotFoundError, StoreError
from catalog_sync.manifest import CatalogTemplate, TemplateVersionSpec

from .store import StoreEvent, TemplateKey, TemplateStore

_LOGGER = logging.getLogger(__name__)


class InMemoryTemplateStore(TemplateStore):
    """In-memory implementation of the TemplateStore interface.

    Templates and their versions are stored separately, versions keyed by the
    template version name. Objects are copied on the way in and out so callers
    never share mutable state with the store.
    """

    def __init__(self) -> None:
        """Initialize the InMemoryTemplateStore."""
        super().__init__()
        self._templates: dict[TemplateKey, CatalogTemplate] = {}
        self._versions: dict[TemplateKey, dict[str, TemplateVersionSpec]] = {}

    async def get_template(self, namespace: str, name: str) -> CatalogTemplate:
        key = TemplateKey(namespace=namespace, name=name)
        if (template := self._templates.get(key)) is None:
            raise ObjectNotFoundError(f"Template {key} not found")
        return copy.deepcopy(template)

    async def create_template(self, template: CatalogTemplate) -> None:
        key = TemplateKey.of(template)
        if key in self._templates:
            raise StoreError(f"Template {key} already exists")
        _LOGGER.debug("Creating template %s", key)
        self._put(key, template)
        self._fire_event(StoreEvent.TEMPLATE_CREATED, key, template)

    async def update_template(
        self, existing: CatalogTemplate, template: CatalogTemplate
    ) -> None:
        key = TemplateKey.of(existing)
        if key not in self._templates:
            raise StoreError(f"Template {key} no longer exists")
        if TemplateKey.of(template) != key:
            raise StoreError(f"Template {TemplateKey.of(template)} does not match {key}")
        _LOGGER.debug("Updating template %s", key)
        self._put(key, template)
        self._fire_event(StoreEvent.TEMPLATE_UPDATED, key, template)

    async def delete_template(self, name: str, namespace: str) -> None:
        key = TemplateKey(namespace=namespace, name=name)
        if (template := self._templates.pop(key, None)) is None:
            raise ObjectNotFoundError(f"Template {key} not found")
        _LOGGER.debug("Deleting template %s", key)
        self._versions.pop(key, None)
        self._fire_event(StoreEvent.TEMPLATE_DELETED, key, template)

    async def list_templates(self, namespace: str | None = None) -> list[CatalogTemplate]:
        return [
            copy.deepcopy(template)
            for key, template in sorted(self._templates.items())
            if namespace is None or key.namespace == namespace
        ]

    async def list_template_versions(
        self, namespace: str, name: str
    ) -> list[TemplateVersionSpec]:
        key = TemplateKey(namespace=namespace, name=name)
        if key not in self._templates:
            raise ObjectNotFoundError(f"Template {key} not found")
        return [copy.deepcopy(v) for v in self._versions.get(key, {}).values()]

    def _put(self, key: TemplateKey, template: CatalogTemplate) -> None:
        """Store the template and replace its version sub-resources."""
        stored = copy.deepcopy(template)
        self._templates[key] = stored
        self._versions[key] = {
            stored.version_name(version.version): version for version in stored.versions
        }
