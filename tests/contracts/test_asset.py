# tests/contracts/test_asset.py
"""Tests for Asset and AssetDescriptor contracts."""

import dataclasses

import pytest

from assetforge.contracts import PREFAB_ASSET_TYPE, Asset, AssetDescriptor
from assetforge.contracts.asset import path_without_base


class TestAssetFactories:
    def test_unresolved(self) -> None:
        asset = Asset.unresolved("/src/Assets/hero/skin.png", "/src/Assets")

        assert asset.is_resolved is False
        assert asset.file_name == "skin.png"
        assert asset.path_under_source_base == "hero/skin.png"
        assert asset.display_path == "/src/Assets/hero/skin.png"
        assert asset.trace_id

    def test_imported(self) -> None:
        asset = Asset.imported(
            absolute_source_path="/src/Assets/hero/skin.png",
            source_base_path="/src/Assets",
            import_from="/src/Assets/hero/skin.png",
            asset_id="abc",
            asset_type="texture",
            is_new=True,
            trace_id="t-1",
        )

        assert asset.is_resolved
        assert asset.is_new is True
        assert asset.is_cached is False
        assert asset.trace_id == "t-1"

    def test_generated(self) -> None:
        asset = Asset.generated("/cache/n/ios/hero.pfb", is_new=False, is_cached=True, asset_id="g")

        assert asset.asset_type == PREFAB_ASSET_TYPE
        assert asset.file_name == "hero.pfb"
        assert asset.absolute_source_path == ""
        assert asset.display_path == "/cache/n/ios/hero.pfb"
        assert asset.is_cached is True

    def test_generated_assets_get_fresh_trace_ids(self) -> None:
        a = Asset.generated("/c/x.pfb", is_new=True, is_cached=False)
        b = Asset.generated("/c/x.pfb", is_new=True, is_cached=False)

        assert a.trace_id != b.trace_id

    def test_frozen(self) -> None:
        asset = Asset.generated("/c/x.pfb", is_new=True, is_cached=False)

        with pytest.raises(dataclasses.FrozenInstanceError):
            asset.is_new = False  # type: ignore[misc]


class TestAssetViews:
    def test_descriptor_strips_bookkeeping(self) -> None:
        asset = Asset.generated("/c/x.pfb", is_new=True, is_cached=False, asset_id="g")

        descriptor = asset.to_descriptor()

        assert descriptor == AssetDescriptor(name="x.pfb", asset_type="prefab", path="/c/x.pfb", asset_id="g")
        assert not hasattr(descriptor, "is_new")

    def test_to_dict(self) -> None:
        asset = Asset.generated("/c/x.pfb", is_new=True, is_cached=False, asset_id="g")

        data = asset.to_dict()

        assert data["import_from"] == "/c/x.pfb"
        assert data["is_new"] is True
        assert set(data) == {"trace_id", "file_name", "asset_type", "import_from", "asset_id", "is_new", "is_cached"}


class TestPathWithoutBase:
    def test_inside_base(self) -> None:
        assert path_without_base("/src/a/b.png", "/src") == "a/b.png"

    def test_outside_base_unchanged(self) -> None:
        assert path_without_base("/other/b.png", "/src") == "/other/b.png"

    def test_empty_base(self) -> None:
        assert path_without_base("/src/b.png", "") == "/src/b.png"
