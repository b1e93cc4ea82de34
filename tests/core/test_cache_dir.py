# tests/core/test_cache_dir.py
"""Tests for node cache directory helpers."""

import os
from pathlib import Path

import pytest

from assetforge.contracts import BuildTarget, NodeInfo
from assetforge.core.cache_dir import (
    CacheDirectoryAllocator,
    delete_file_then_folder_if_empty,
    list_artifact_files,
    resolve_output_path,
)


class TestCacheDirectoryAllocator:
    def test_path_per_node_and_target(self, tmp_path: Path) -> None:
        directories = CacheDirectoryAllocator(tmp_path)
        node = NodeInfo(node_id="characters", name="Characters")

        assert directories.path_for(BuildTarget.IOS, node) == tmp_path / "characters" / "ios"
        assert directories.path_for(BuildTarget.ANDROID, node) != directories.path_for(BuildTarget.IOS, node)

    def test_path_for_creates_nothing(self, tmp_path: Path) -> None:
        CacheDirectoryAllocator(tmp_path / "cache").path_for(BuildTarget.IOS, NodeInfo(node_id="n", name="n"))

        assert not (tmp_path / "cache").exists()

    def test_ensure_creates(self, tmp_path: Path) -> None:
        path = CacheDirectoryAllocator(tmp_path).ensure(BuildTarget.IOS, NodeInfo(node_id="n", name="n"))

        assert path.is_dir()

    @pytest.mark.parametrize("node_id", ["..", "a/b", "", " x"])
    def test_unsafe_node_id_rejected(self, tmp_path: Path, node_id: str) -> None:
        with pytest.raises(ValueError, match="cannot be used"):
            CacheDirectoryAllocator(tmp_path).path_for(BuildTarget.IOS, NodeInfo(node_id=node_id, name="n"))


class TestResolveOutputPath:
    def test_subdirectories_allowed(self, tmp_path: Path) -> None:
        assert resolve_output_path(tmp_path, "hero/body.pfb") == tmp_path / "hero" / "body.pfb"

    @pytest.mark.parametrize("name", ["", "/etc/passwd", "a/../../b", "name "])
    def test_invalid_names(self, tmp_path: Path, name: str) -> None:
        with pytest.raises(ValueError):
            resolve_output_path(tmp_path, name)


class TestListArtifactFiles:
    def test_sorted_without_sidecars_or_dotfiles(self, tmp_path: Path) -> None:
        for rel in ("b.pfb", "a/c.pfb", "b.pfb.meta", ".DS_Store", ".git/x.pfb"):
            path = tmp_path / rel
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text("x")

        assert list_artifact_files(tmp_path) == [os.path.join(tmp_path, "a", "c.pfb"), os.path.join(tmp_path, "b.pfb")]

    def test_missing_directory_is_empty(self, tmp_path: Path) -> None:
        assert list_artifact_files(tmp_path / "absent") == []


class TestDeleteFileThenFolderIfEmpty:
    def test_climbs_empty_parents(self, tmp_path: Path) -> None:
        target = tmp_path / "a" / "b" / "x.meta"
        target.parent.mkdir(parents=True)
        target.write_text("x")

        removed = delete_file_then_folder_if_empty(target, stop_at=tmp_path)

        assert removed == [tmp_path / "a" / "b", tmp_path / "a"]
        assert tmp_path.is_dir()

    def test_stops_at_non_empty(self, tmp_path: Path) -> None:
        target = tmp_path / "a" / "b" / "x.meta"
        target.parent.mkdir(parents=True)
        target.write_text("x")
        (tmp_path / "a" / "keep.pfb").write_text("x")

        assert delete_file_then_folder_if_empty(target, stop_at=tmp_path) == [tmp_path / "a" / "b"]

    def test_missing_file_still_cleans(self, tmp_path: Path) -> None:
        (tmp_path / "empty").mkdir()

        assert delete_file_then_folder_if_empty(tmp_path / "empty" / "gone.meta", stop_at=tmp_path) == [tmp_path / "empty"]

    def test_never_leaves_stop_dir(self, tmp_path: Path) -> None:
        stop = tmp_path / "cache"
        stop.mkdir()
        outside = tmp_path / "other" / "x.meta"
        outside.parent.mkdir()
        outside.write_text("x")

        assert delete_file_then_folder_if_empty(outside, stop_at=stop) == []
        assert (tmp_path / "other").is_dir()
