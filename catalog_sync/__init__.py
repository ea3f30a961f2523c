"""
catalog-sync keeps the templates of a chart catalog in step with the index of
its chart repository.

A sync run diffs the index against the snapshot persisted by the previous run,
creates or updates the templates of changed charts, deletes the templates of
removed charts and records the outcome on the catalog status. A failing chart
never blocks the others.
"""

__all__ = [
    "builder",
    "detector",
    "exceptions",
    "index",
    "manifest",
    "metadata",
    "reconciler",
    "repo",
    "status",
    "store",
    "sync",
    # Note this is exposed for CLI documentation, not to be used as a library
    "tool",
]
