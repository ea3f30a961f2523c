"""Test helpers for catalog-sync tools."""

from pathlib import Path


def write_chart(root: Path, chart: str, version: str, **files: str) -> Path:
    """Write a chart version directory into a local chart repository."""
    version_dir = root / "charts" / chart / version
    version_dir.mkdir(parents=True)
    (version_dir / "Chart.yaml").write_text(
        f"name: {chart}\nversion: {version}\ndescription: The {chart} chart\n"
    )
    for name, contents in files.items():
        (version_dir / name).write_text(contents)
    return version_dir
