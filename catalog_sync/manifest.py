"""Representation of the objects read and written during a catalog sync.

The index side describes what an upstream chart repository offers: a mapping of
chart name to the list of released versions. The template side describes what
is written to the downstream store: one `CatalogTemplate` per chart, carrying
one `TemplateVersionSpec` per release. The `Catalog` and its `CatalogStatus`
hold the state persisted between runs.
"""

from dataclasses import dataclass, field
from enum import StrEnum
from pathlib import Path
from typing import Any, ClassVar, cast

import aiofiles
from mashumaro import DataClassDictMixin
from mashumaro.codecs.yaml import yaml_decode, yaml_encode
from mashumaro.config import BaseConfig

from .exceptions import InputException

__all__ = [
    "ChartRelease",
    "ChartFile",
    "ReleaseMetadata",
    "PackageMetadata",
    "TemplateVersionSpec",
    "CatalogTemplate",
    "CatalogCondition",
    "CatalogStatus",
    "Catalog",
    "CatalogScope",
    "GlobalScope",
    "ClusterScope",
    "ProjectScope",
    "read_status",
    "write_status",
]

CATALOG_TEMPLATE_KIND = "CatalogTemplate"
NAMESPACE_ANNOTATION = "catalog.cattle.io/namespace"
REFRESHED = "Refreshed"
UPGRADED = "Upgraded"

VersionCommits = dict[str, str]
"""Mapping of version string to content digest for a single chart."""

VersionCommitSnapshot = dict[str, VersionCommits]
"""Mapping of chart name to the digests of every version last seen."""


@dataclass
class BaseManifest(DataClassDictMixin):
    """Base class for all serializable objects."""

    @classmethod
    def parse_yaml(cls, content: str) -> "BaseManifest":
        """Parse a serialized object."""
        return yaml_decode(content, cls)

    def yaml(self) -> str:
        """Return a YAML string representation of the object."""
        return yaml_encode(self, self.__class__)  # type: ignore[return-value]

    class Config(BaseConfig):
        omit_none = True


@dataclass
class ChartRelease(BaseManifest):
    """A single released version of a chart as listed in the index."""

    name: str
    """The name of the chart."""

    version: str
    """The version string of the release."""

    digest: str
    """Content digest of the release, used to detect changes."""

    description: str | None = None
    """Human readable description of the chart."""

    sources: list[str] = field(default_factory=list)
    """URLs of the source code for the chart."""

    urls: list[str] = field(default_factory=list)
    """URLs the chart archive can be downloaded from."""

    icon: str | None = None
    """URL of the chart icon."""

    kube_version: str | None = None
    """Constraint on the kubernetes versions the chart supports."""

    app_version: str | None = None
    """Version of the application packaged by the chart."""

    annotations: dict[str, str] = field(default_factory=dict)
    """Free form chart annotations."""

    dir: str | None = None
    """Directory of the release within a local chart repository."""

    @classmethod
    def parse_doc(cls, doc: dict[str, Any]) -> "ChartRelease":
        """Parse a ChartRelease from a helm index entry."""
        if not isinstance(doc, dict):
            raise InputException(f"Invalid chart entry, expected mapping: {doc}")
        if not (name := doc.get("name")):
            raise InputException(f"Invalid chart entry missing name: {doc}")
        annotations = doc.get("annotations") or {}
        return cls(
            name=str(name),
            version=str(doc.get("version") or ""),
            digest=str(doc.get("digest") or ""),
            description=doc.get("description"),
            sources=list(doc.get("sources") or []),
            urls=list(doc.get("urls") or []),
            icon=doc.get("icon"),
            kube_version=doc.get("kubeVersion"),
            app_version=(
                str(doc["appVersion"]) if doc.get("appVersion") is not None else None
            ),
            annotations={str(k): str(v) for k, v in annotations.items()},
            dir=doc.get("dir"),
        )

    @property
    def namespace_hint(self) -> str | None:
        """Namespace the chart must be installed into, if the index declares one."""
        return self.annotations.get(NAMESPACE_ANNOTATION)


@dataclass(frozen=True)
class ChartFile:
    """A file fetched from the local copy of a chart release."""

    name: str
    """Path of the file prefixed by the chart name e.g. `nginx/questions.yml`."""

    contents: str
    """Text contents of the file."""


@dataclass
class ReleaseMetadata(BaseManifest):
    """A chart release enriched with the fields read from its descriptor files."""

    version: str
    digest: str
    description: str | None = None
    sources: list[str] = field(default_factory=list)
    compat_min: str | None = None
    compat_max: str | None = None
    required_namespace: str | None = None
    categories: set[str] = field(default_factory=set)
    labels: dict[str, str] = field(default_factory=dict)
    kube_version: str | None = None
    storage_dir: str | None = None
    storage_name: str | None = None
    storage_urls: list[str] = field(default_factory=list)


@dataclass
class PackageMetadata(BaseManifest):
    """All releases of a chart with their descriptor fields merged."""

    name: str
    """The name of the chart."""

    releases: list[ReleaseMetadata]
    """Releases in index order."""

    categories: set[str] = field(default_factory=set)
    """Union of the categories declared by every release."""

    labels: dict[str, str] = field(default_factory=dict)
    """Labels of every release, later releases override earlier ones."""

    errors: list[str] = field(default_factory=list)
    """Descriptor files that could not be parsed."""


@dataclass
class TemplateVersionSpec(BaseManifest):
    """A single version of a CatalogTemplate."""

    version: str
    """The lower-cased version string."""

    digest: str
    """Content digest of the release."""

    external_id: str
    """Deterministic reference to the catalog, template and version."""

    compat_min: str | None = None
    """Minimum compatible platform version."""

    compat_max: str | None = None
    """Maximum compatible platform version."""

    required_namespace: str | None = None
    """Namespace the version must be installed into."""

    kube_version: str | None = None
    """Constraint on the kubernetes versions this version supports."""

    upgrade_version_links: dict[str, str] = field(default_factory=dict)
    """Older version to template version name for each version that can upgrade to this one."""

    version_dir: str | None = None
    version_name: str | None = None
    version_urls: list[str] = field(default_factory=list)


@dataclass
class CatalogTemplate(BaseManifest):
    """The downstream representation of a chart, one per chart per catalog."""

    kind: ClassVar[str] = CATALOG_TEMPLATE_KIND
    """The kind of the object."""

    name: str
    """Name derived from the catalog and the chart folder name."""

    namespace: str
    """Namespace owning the template."""

    folder_name: str
    """The chart name in the index."""

    display_name: str
    """Name shown to users."""

    default_version: str
    """Version selected by default, the first release in the index."""

    description: str | None = None
    project_url: str | None = None
    icon: str | None = None
    icon_filename: str | None = None
    labels: dict[str, str] = field(default_factory=dict)
    categories: list[str] = field(default_factory=list)
    versions: list[TemplateVersionSpec] = field(default_factory=list)
    helm_version: str | None = None

    catalog_id: str | None = None
    cluster_catalog_id: str | None = None
    cluster_id: str | None = None
    project_catalog_id: str | None = None
    project_id: str | None = None

    @property
    def namespaced_name(self) -> str:
        return f"{self.namespace}/{self.name}"

    def version_name(self, version: str) -> str:
        """Return the name of the template version sub-resource."""
        return f"{self.name}-{version}"


class ConditionStatus(StrEnum):
    """Status of a catalog condition."""

    UNKNOWN = "Unknown"
    TRUE = "True"
    FALSE = "False"


@dataclass
class CatalogCondition(BaseManifest):
    """A condition recorded on the catalog status."""

    type: str
    """The type of the condition e.g. Refreshed."""

    status: ConditionStatus
    """The state of the condition."""

    reason: str | None = None
    """Machine readable reason for the last transition."""

    message: str | None = None
    """Human readable details, names the affected charts on failure."""

    def __str__(self) -> str:
        if self.message:
            return f"{self.type}={self.status}: {self.message}"
        return f"{self.type}={self.status}"


@dataclass
class CatalogStatus(BaseManifest):
    """State persisted on a catalog between sync runs."""

    commit: str = ""
    """Identifier of the last index revision fully applied."""

    helm_version_commits: VersionCommitSnapshot = field(default_factory=dict)
    """Digest of every version of every chart processed by the last run."""

    conditions: list[CatalogCondition] = field(default_factory=list)

    def get_condition(self, condition_type: str) -> CatalogCondition | None:
        """Return the condition of the given type, if it was ever set."""
        for condition in self.conditions:
            if condition.type == condition_type:
                return condition
        return None

    def set_condition(
        self,
        condition_type: str,
        status: ConditionStatus,
        message: str | None = None,
        reason: str | None = None,
    ) -> None:
        """Set the condition of the given type, replacing any previous value."""
        condition = CatalogCondition(
            type=condition_type, status=status, reason=reason, message=message
        )
        for i, existing in enumerate(self.conditions):
            if existing.type == condition_type:
                self.conditions[i] = condition
                return
        self.conditions.append(condition)

    def is_condition(self, condition_type: str, status: ConditionStatus) -> bool:
        condition = self.get_condition(condition_type)
        return condition is not None and condition.status == status

    @property
    def refreshed(self) -> CatalogCondition | None:
        return self.get_condition(REFRESHED)


@dataclass(frozen=True)
class TemplateOwner:
    """Fields and labels identifying the catalog that owns a template."""

    fields: dict[str, str]
    labels: dict[str, str]


@dataclass(frozen=True)
class CatalogScope:
    """Where a catalog is defined, which determines where its templates live."""

    catalog_type: ClassVar[str]

    def template_namespace(self, global_namespace: str) -> str:
        raise NotImplementedError

    def external_id(self, catalog_name: str, folder_name: str, version: str) -> str:
        raise NotImplementedError

    def owner(self, catalog_name: str) -> TemplateOwner:
        raise NotImplementedError


@dataclass(frozen=True)
class GlobalScope(CatalogScope):
    """A catalog available to every cluster and project."""

    catalog_type: ClassVar[str] = "catalog"

    def template_namespace(self, global_namespace: str) -> str:
        return global_namespace

    def external_id(self, catalog_name: str, folder_name: str, version: str) -> str:
        return (
            f"catalog://?catalog={catalog_name}"
            f"&template={folder_name}&version={version}"
        )

    def owner(self, catalog_name: str) -> TemplateOwner:
        return TemplateOwner(fields={"catalog_id": catalog_name}, labels={})


@dataclass(frozen=True)
class _NamespacedScope(CatalogScope):

    namespace: str
    """Namespace of the catalog object, templates are created there."""

    def template_namespace(self, global_namespace: str) -> str:
        return self.namespace

    def external_id(self, catalog_name: str, folder_name: str, version: str) -> str:
        return (
            f"catalog://?catalog={self.namespace}/{catalog_name}"
            f"&type={self.catalog_type}&template={folder_name}&version={version}"
        )


@dataclass(frozen=True)
class ClusterScope(_NamespacedScope):
    """A catalog defined for a single cluster."""

    catalog_type: ClassVar[str] = "clusterCatalog"

    cluster_id: str = ""

    def owner(self, catalog_name: str) -> TemplateOwner:
        if not catalog_name:
            raise InputException("Cluster catalog is no longer available")
        return TemplateOwner(
            fields={
                "cluster_catalog_id": f"{self.namespace}:{catalog_name}",
                "cluster_id": self.cluster_id,
            },
            labels={f"{self.cluster_id}-{catalog_name}": catalog_name},
        )


@dataclass(frozen=True)
class ProjectScope(_NamespacedScope):
    """A catalog defined for a single project, the project id is `cluster:project`."""

    catalog_type: ClassVar[str] = "projectCatalog"

    project_id: str = ""

    def owner(self, catalog_name: str) -> TemplateOwner:
        if not catalog_name:
            raise InputException("Project catalog is no longer available")
        parts = self.project_id.split(":", 1)
        if len(parts) != 2:
            raise InputException(
                f"Project ID {self.project_id!r} invalid while creating template"
            )
        return TemplateOwner(
            fields={
                "project_catalog_id": f"{self.namespace}:{catalog_name}",
                "project_id": self.project_id,
            },
            labels={f"{parts[0]}-{self.namespace}-{catalog_name}": catalog_name},
        )


@dataclass
class Catalog:
    """A chart repository registered for synchronization."""

    name: str
    """The name of the catalog."""

    scope: CatalogScope = field(default_factory=GlobalScope)
    """Global, cluster or project scope of the catalog."""

    helm_version: str | None = None
    """Helm version the templates of this catalog are rendered with."""

    status: CatalogStatus = field(default_factory=CatalogStatus)
    """State persisted between runs."""

    @property
    def catalog_type(self) -> str:
        return self.scope.catalog_type


async def read_status(status_path: Path) -> CatalogStatus:
    """Return the contents of a serialized catalog status file."""
    async with aiofiles.open(str(status_path)) as status_file:
        content = await status_file.read()
    if not content:
        raise InputException(f"Catalog status file {status_path} is empty")
    return cast(CatalogStatus, CatalogStatus.parse_yaml(content))


async def write_status(status_path: Path, status: CatalogStatus) -> None:
    """Write the catalog status to disk."""
    content = status.yaml()
    async with aiofiles.open(str(status_path), mode="w") as status_file:
        await status_file.write(content)
