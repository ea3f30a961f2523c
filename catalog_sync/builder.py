"""Library for building the CatalogTemplate of a chart.

The template name is a pure function of the catalog name and the chart folder
name so that the lookup that decides between create and update is stable
across runs. Versions keep the order of the index, and each version records
the earlier listed versions that can be upgraded to it.

Example usage:
```python
from catalog_sync.builder import TemplateBuilder

builder = TemplateBuilder(catalog, SyncConfig())
template = builder.build(package, icon_filename="nginx.png", icon_url=url)
for version in template.versions:
    print(f"{version.version}: {version.external_id}")
```
"""

import logging

from slugify import slugify

from .config import SyncConfig
from .manifest import (
    Catalog,
    CatalogTemplate,
    PackageMetadata,
    TemplateVersionSpec,
)
from .version import can_upgrade

__all__ = [
    "template_name",
    "TemplateBuilder",
]

_LOGGER = logging.getLogger(__name__)


def template_name(catalog_name: str, folder_name: str) -> str:
    """Return the deterministic, sanitized template name for a chart."""
    return slugify(f"{catalog_name}-{folder_name}", lowercase=True)


class TemplateBuilder:
    """Builds templates for the charts of a single catalog."""

    def __init__(self, catalog: Catalog, config: SyncConfig) -> None:
        """Initialize TemplateBuilder.

        The owner fields are resolved from the catalog scope once here and
        raise `InputException` when the scope is not usable.
        """
        self._catalog = catalog
        self._namespace = catalog.scope.template_namespace(config.global_namespace)
        self._owner = catalog.scope.owner(catalog.name)

    @property
    def namespace(self) -> str:
        """Namespace all templates of the catalog are written to."""
        return self._namespace

    def template_name(self, chart: str) -> str:
        return template_name(self._catalog.name, chart)

    def build(
        self, package: PackageMetadata, icon_filename: str = "", icon_url: str = ""
    ) -> CatalogTemplate:
        """Build the template for a chart from the metadata of its releases."""
        if not package.releases:
            raise ValueError(f"Chart {package.name} has no releases")
        first = package.releases[0]
        template = CatalogTemplate(
            name=self.template_name(package.name),
            namespace=self._namespace,
            folder_name=package.name,
            display_name=package.name,
            default_version=first.version,
            description=first.description,
            project_url=first.sources[0] if first.sources else None,
            icon=icon_url or None,
            icon_filename=icon_filename or None,
            helm_version=self._catalog.helm_version,
        )

        versions: list[TemplateVersionSpec] = []
        for release in package.releases:
            version = release.version.lower()
            spec = TemplateVersionSpec(
                version=version,
                digest=release.digest,
                external_id=self._catalog.scope.external_id(
                    self._catalog.name, package.name, version
                ),
                compat_min=release.compat_min,
                compat_max=release.compat_max,
                required_namespace=release.required_namespace,
                kube_version=release.kube_version,
                version_dir=release.storage_dir,
                version_name=release.storage_name,
                version_urls=list(release.storage_urls),
            )
            for earlier in versions:
                if can_upgrade(earlier.version, version):
                    spec.upgrade_version_links[earlier.version] = (
                        template.version_name(version)
                    )
            versions.append(spec)
        template.versions = versions
        template.categories = sorted(package.categories)

        # Owner fields and labels are applied last so they always win
        template.labels = {**package.labels, **self._owner.labels}
        for key, value in self._owner.fields.items():
            setattr(template, key, value)
        _LOGGER.debug(
            "Catalog [%s] built template %s with %d versions",
            self._catalog.name,
            template.namespaced_name,
            len(versions),
        )
        return template
