"""Module for a template store persisted as YAML files on local disk.

Each template is written to `<root>/<namespace>/<name>.yaml`.
"""

import logging
from pathlib import Path
from typing import cast

import aiofiles
from aiofiles import os as aioos
from aiofiles.ospath import exists

from catalog_sync.exceptions import InputException, ObjectNotFoundError, StoreError
from catalog_sync.manifest import CatalogTemplate

from .store import StoreEvent, TemplateKey, TemplateStore

_LOGGER = logging.getLogger(__name__)

SUFFIX = ".yaml"


class LocalTemplateStore(TemplateStore):
    """TemplateStore implementation backed by a directory of YAML files."""

    def __init__(self, root: Path) -> None:
        """Initialize the LocalTemplateStore rooted at `root`."""
        super().__init__()
        self._root = root

    def _path(self, key: TemplateKey) -> Path:
        return self._root / key.namespace / f"{key.name}{SUFFIX}"

    async def _read(self, path: Path) -> CatalogTemplate:
        async with aiofiles.open(str(path)) as fd:
            content = await fd.read()
        try:
            return cast(CatalogTemplate, CatalogTemplate.parse_yaml(content))
        except Exception as err:
            raise InputException(f"Template file {path} is invalid: {err}") from err

    async def _write(self, key: TemplateKey, template: CatalogTemplate) -> None:
        path = self._path(key)
        try:
            await aioos.makedirs(str(path.parent), exist_ok=True)
            async with aiofiles.open(str(path), mode="w") as fd:
                await fd.write(template.yaml())
        except OSError as err:
            raise StoreError(f"Failed to write template {key}: {err}") from err

    async def get_template(self, namespace: str, name: str) -> CatalogTemplate:
        key = TemplateKey(namespace=namespace, name=name)
        path = self._path(key)
        if not await exists(str(path)):
            raise ObjectNotFoundError(f"Template {key} not found")
        return await self._read(path)

    async def create_template(self, template: CatalogTemplate) -> None:
        key = TemplateKey.of(template)
        if await exists(str(self._path(key))):
            raise StoreError(f"Template {key} already exists")
        _LOGGER.debug("Creating template %s in %s", key, self._root)
        await self._write(key, template)
        self._fire_event(StoreEvent.TEMPLATE_CREATED, key, template)

    async def update_template(
        self, existing: CatalogTemplate, template: CatalogTemplate
    ) -> None:
        key = TemplateKey.of(existing)
        if TemplateKey.of(template) != key:
            raise StoreError(f"Template {TemplateKey.of(template)} does not match {key}")
        _LOGGER.debug("Updating template %s in %s", key, self._root)
        await self._write(key, template)
        self._fire_event(StoreEvent.TEMPLATE_UPDATED, key, template)

    async def delete_template(self, name: str, namespace: str) -> None:
        key = TemplateKey(namespace=namespace, name=name)
        path = self._path(key)
        if not await exists(str(path)):
            raise ObjectNotFoundError(f"Template {key} not found")
        template = await self._read(path)
        try:
            await aioos.remove(str(path))
        except OSError as err:
            raise StoreError(f"Failed to delete template {key}: {err}") from err
        self._fire_event(StoreEvent.TEMPLATE_DELETED, key, template)

    async def list_templates(self, namespace: str | None = None) -> list[CatalogTemplate]:
        if not self._root.is_dir():
            return []
        namespaces = [namespace] if namespace else sorted(
            p.name for p in self._root.iterdir() if p.is_dir()
        )
        templates = []
        for ns in namespaces:
            ns_path = self._root / ns
            if not ns_path.is_dir():
                continue
            for path in sorted(ns_path.glob(f"*{SUFFIX}")):
                templates.append(await self._read(path))
        return templates
