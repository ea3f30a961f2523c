"""Configuration objects for catalog-sync."""

from dataclasses import dataclass, field

DEFAULT_SUPPORTED_FILES = (
    "catalog.yml",
    "catalog.yaml",
    "questions.yml",
    "questions.yaml",
)
GLOBAL_NAMESPACE = "cattle-global-data"
SYNCING_MESSAGE = "syncing catalog"


@dataclass
class SyncConfig:
    """Configuration for a catalog sync run."""

    global_namespace: str = GLOBAL_NAMESPACE
    """Namespace that holds the templates of global catalogs."""

    supported_files: tuple[str, ...] = field(
        default_factory=lambda: DEFAULT_SUPPORTED_FILES
    )
    """Descriptor file basenames read from each chart version, in priority order."""

    syncing_message: str = SYNCING_MESSAGE
    """Condition message persisted while a sync is in progress."""
