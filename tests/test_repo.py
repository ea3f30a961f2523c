"""Tests for the local chart repository."""

from pathlib import Path

import git
import pytest

from catalog_sync.exceptions import InputException
from catalog_sync.repo import LocalChartRepository

from . import release


def _write_chart(root: Path, chart: str, version: str, **files: str) -> Path:
    version_dir = root / "charts" / chart / version
    version_dir.mkdir(parents=True)
    (version_dir / "Chart.yaml").write_text(
        f"name: {chart}\nversion: {version}\ndescription: The {chart} chart\n"
        f"icon: https://example.com/{chart}.png\n"
    )
    for name, contents in files.items():
        (version_dir / name).write_text(contents)
    return version_dir


@pytest.fixture
def repo_path(tmp_path: Path) -> Path:
    _write_chart(tmp_path, "nginx", "1.0.0", **{"questions.yml": "namespace: web\n"})
    _write_chart(tmp_path, "nginx", "1.10.0")
    _write_chart(tmp_path, "nginx", "1.2.0")
    _write_chart(tmp_path, "redis", "6.0.0")
    return tmp_path


async def test_load_index_from_charts(repo_path: Path) -> None:
    """The index is built from the charts directory, newest version first."""
    repo = LocalChartRepository(repo_path)
    index = await repo.load_index()
    assert list(index.entries) == ["nginx", "redis"]
    nginx = index.entries["nginx"]
    assert [r.version for r in nginx] == ["1.10.0", "1.2.0", "1.0.0"]
    assert nginx[0].description == "The nginx chart"
    assert nginx[0].dir == "charts/nginx/1.10.0"
    assert all(len(r.digest) == 64 for r in nginx)
    assert len({r.digest for r in nginx}) == 3


async def test_digest_changes_with_contents(repo_path: Path) -> None:
    repo = LocalChartRepository(repo_path)
    before = await repo.load_index()
    (repo_path / "charts" / "redis" / "6.0.0" / "values.yaml").write_text("a: b\n")
    after = await repo.load_index()
    assert before.entries["redis"][0].digest != after.entries["redis"][0].digest
    assert before.entries["nginx"] == after.entries["nginx"]


async def test_load_index_file(tmp_path: Path) -> None:
    """An index.yaml at the root takes precedence over the charts directory."""
    _write_chart(tmp_path, "nginx", "1.0.0")
    (tmp_path / "index.yaml").write_text(
        "entries:\n  mysql:\n  - name: mysql\n    version: 8.0.0\n    digest: m\n"
    )
    index = await LocalChartRepository(tmp_path).load_index()
    assert list(index.entries) == ["mysql"]


async def test_load_index_missing(tmp_path: Path) -> None:
    with pytest.raises(InputException, match="has no index.yaml"):
        await LocalChartRepository(tmp_path).load_index()


async def test_fetch_local_files(repo_path: Path) -> None:
    repo = LocalChartRepository(repo_path)
    index = await repo.load_index()
    oldest = index.entries["nginx"][-1]
    files = await repo.fetch_local_files(oldest)
    assert sorted(f.name for f in files) == [
        "nginx/Chart.yaml",
        "nginx/questions.yml",
    ]
    questions = next(f for f in files if f.name == "nginx/questions.yml")
    assert questions.contents == "namespace: web\n"


async def test_fetch_local_files_without_dir(tmp_path: Path) -> None:
    repo = LocalChartRepository(tmp_path)
    assert await repo.fetch_local_files(release("nginx", "1.0.0")) == []


async def test_fetch_local_files_missing_dir(tmp_path: Path) -> None:
    repo = LocalChartRepository(tmp_path)
    with pytest.raises(InputException, match="does not exist"):
        await repo.fetch_local_files(
            release("nginx", "1.0.0", dir="charts/nginx/1.0.0")
        )


async def test_icon(tmp_path: Path) -> None:
    repo = LocalChartRepository(tmp_path)
    releases = [
        release("nginx", "1.1.0"),
        release("nginx", "1.0.0", icon="https://example.com/assets/nginx.svg"),
    ]
    assert await repo.icon(releases) == (
        "nginx.svg",
        "https://example.com/assets/nginx.svg",
    )
    assert await repo.icon([release("nginx", "1.0.0")]) == ("", "")


async def test_icon_unsupported_scheme(tmp_path: Path) -> None:
    repo = LocalChartRepository(tmp_path)
    with pytest.raises(InputException, match="unsupported scheme"):
        await repo.icon([release("nginx", "1.0.0", icon="ftp://example.com/a.png")])


async def test_commit_without_git(repo_path: Path) -> None:
    """Outside of git the commit is a digest of the index."""
    repo = LocalChartRepository(repo_path)
    first = await repo.commit()
    assert first == await repo.commit()
    (repo_path / "charts" / "redis" / "6.0.0" / "values.yaml").write_text("a: b\n")
    assert await repo.commit() != first


async def test_commit_from_git(repo_path: Path) -> None:
    """A clean git checkout uses the HEAD commit."""
    files = [str(p.relative_to(repo_path)) for p in repo_path.rglob("*") if p.is_file()]
    git_repo = git.Repo.init(str(repo_path))
    git_repo.index.add(files)
    commit = git_repo.index.commit(
        "Add charts",
        author=git.Actor("Test", "test@example.com"),
        committer=git.Actor("Test", "test@example.com"),
    )
    repo = LocalChartRepository(repo_path)
    assert await repo.commit() == commit.hexsha

    # Local changes fall back to the index digest
    (repo_path / "charts" / "redis" / "6.0.0" / "values.yaml").write_text("a: b\n")
    assert await repo.commit() != commit.hexsha
