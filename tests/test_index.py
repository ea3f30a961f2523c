"""Tests for the index library."""

from pathlib import Path

import pytest

from catalog_sync.exceptions import InputException
from catalog_sync.index import IndexSnapshot, preprocess, read_index

from . import release

INDEX_YAML = """\
apiVersion: v1
entries:
  nginx:
  - name: nginx
    version: 1.1.0
    digest: bbb
    description: A web server
    icon: https://example.com/nginx.png
    sources:
    - https://github.com/example/nginx
    urls:
    - nginx-1.1.0.tgz
    kubeVersion: ">=1.20"
    appVersion: 1.25
    annotations:
      catalog.cattle.io/namespace: web
  - name: nginx
    version: 1.0.0
    digest: aaa
  redis:
  - name: redis
    version: 6.0.0
    digest: rrr
"""


async def test_read_index(tmp_path: Path) -> None:
    """Test parsing a helm repository index file."""
    index_file = tmp_path / "index.yaml"
    index_file.write_text(INDEX_YAML)

    index = await read_index(index_file)
    assert list(index.entries) == ["nginx", "redis"]
    assert "nginx" in index
    assert "mysql" not in index

    latest = index.entries["nginx"][0]
    assert latest.version == "1.1.0"
    assert latest.digest == "bbb"
    assert latest.description == "A web server"
    assert latest.icon == "https://example.com/nginx.png"
    assert latest.sources == ["https://github.com/example/nginx"]
    assert latest.urls == ["nginx-1.1.0.tgz"]
    assert latest.kube_version == ">=1.20"
    assert latest.app_version == "1.25"
    assert latest.namespace_hint == "web"
    assert index.entries["nginx"][1].namespace_hint is None


async def test_read_empty_index(tmp_path: Path) -> None:
    index_file = tmp_path / "index.yaml"
    index_file.write_text("")
    index = await read_index(index_file)
    assert index.entries == {}


async def test_read_invalid_yaml(tmp_path: Path) -> None:
    index_file = tmp_path / "index.yaml"
    index_file.write_text("entries: [")
    with pytest.raises(InputException, match="failed to parse as yaml"):
        await read_index(index_file)


def test_parse_invalid_entries() -> None:
    with pytest.raises(InputException, match="expected list"):
        IndexSnapshot.parse_doc({"entries": {"nginx": {"version": "1.0.0"}}})


def test_parse_entry_missing_name() -> None:
    with pytest.raises(InputException, match="missing name"):
        IndexSnapshot.parse_doc({"entries": {"nginx": [{"version": "1.0.0"}]}})


def test_preprocess() -> None:
    """Invalid charts are separated from the charts to process."""
    index = IndexSnapshot(
        entries={
            "nginx": [release("nginx", "1.0.0")],
            "empty": [],
            "badversion": [release("badversion", "latest")],
            "nodigest": [release("nodigest", "1.0.0", digest="")],
            "x" * 300: [release("x" * 300, "1.0.0")],
            "redis": [release("redis", "6.0.0")],
        }
    )
    invalid, valid = preprocess(index, "mycatalog")
    assert list(valid) == ["nginx", "redis"]
    assert sorted(invalid) == sorted(["empty", "badversion", "nodigest", "x" * 300])
    assert invalid["empty"] == "chart empty: no versions"
    assert "invalid version 'latest'" in invalid["badversion"]
    assert "missing a digest" in invalid["nodigest"]
    assert "invalid template name" in invalid["x" * 300]
