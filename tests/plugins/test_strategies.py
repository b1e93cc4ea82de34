# tests/plugins/test_strategies.py
"""Tests for the built-in composite and per-asset strategies."""

import pytest

from assetforge.contracts import NodeError, NodeErrorKind
from assetforge.core.prefab_io import read_prefab
from assetforge.engine.orchestrator import Prefabricator
from assetforge.plugins import BasePrefabStrategy, PluginConfigError, StrategyProtocol
from assetforge.plugins.strategies.composite import CompositeConfig, CompositePrefabStrategy
from assetforge.plugins.strategies.per_asset import PerAssetPrefabStrategy


class TestBaseStrategy:
    def test_defaults(self) -> None:
        class Minimal(BasePrefabStrategy):
            name = "minimal"

        strategy = Minimal({"a": 1})

        assert strategy.config == {"a": 1}
        assert strategy.plugin_version == "0.0.0"
        assert isinstance(strategy, StrategyProtocol)


class TestCompositeConfig:
    def test_defaults(self) -> None:
        config = CompositeConfig.from_dict({})

        assert config.allowed_types is None
        assert config.extension == ".pfb"

    @pytest.mark.parametrize("extension", ["pfb", ".", "a/.pfb"])
    def test_bad_extension(self, extension: str) -> None:
        with pytest.raises(PluginConfigError):
            CompositeConfig.from_dict({"extension": extension})

    def test_non_dict_rejected(self) -> None:
        with pytest.raises(PluginConfigError, match="must be a dict"):
            CompositeConfig.from_dict(["texture"])  # type: ignore[arg-type]


class TestCompositeStrategy:
    def test_one_prefab_per_group(self, node, target, directories, output_dir, make_asset) -> None:
        body = make_asset("hero/body.fbx", asset_type="model")
        skin = make_asset("hero/skin.png")

        result = Prefabricator(CompositePrefabStrategy({}), node=node, target=target, directories=directories).run(
            {"hero": [body, skin]}, previously_cached=[]
        )

        assert result.generated == [str(output_dir / "hero.pfb")]
        root = read_prefab(output_dir / "hero.pfb")
        assert root["components"][0] == {"kind": "build_info", "properties": {"target": "standalone", "node": "prefab_1"}}
        children = root["children"]
        assert [c["name"] for c in children] == ["body", "skin"]
        assert children[1]["components"][0]["properties"] == {"path": skin.import_from, "asset_id": skin.asset_id, "asset_type": "texture"}

    def test_custom_extension(self, node, target, directories, output_dir, make_asset) -> None:
        result = Prefabricator(CompositePrefabStrategy({"extension": ".prefab"}), node=node, target=target, directories=directories).setup(
            {"hero": [make_asset()]}
        )

        assert result.planned == [str(output_dir / "hero.prefab")]

    def test_disallowed_types_rejected_at_plan(self, node, target, directories, make_asset) -> None:
        strategy = CompositePrefabStrategy({"allowed_types": ["model"]})
        skin = make_asset("hero/skin.png")

        with pytest.raises(NodeError) as exc_info:
            Prefabricator(strategy, node=node, target=target, directories=directories).setup({"hero": [skin]})

        assert exc_info.value.kind == NodeErrorKind.PLAN_REJECTED
        assert f"{skin.import_from} (texture)" in exc_info.value.message

    def test_disallowed_types_rejected_at_build(self, node, target, directories, cache_root, make_asset) -> None:
        strategy = CompositePrefabStrategy({"allowed_types": ["model"]})

        with pytest.raises(NodeError) as exc_info:
            Prefabricator(strategy, node=node, target=target, directories=directories).run({"hero": [make_asset()]}, previously_cached=[])

        assert exc_info.value.kind == NodeErrorKind.PLAN_REJECTED
        assert list(cache_root.rglob("*.pfb")) == []

    def test_empty_group_rejected(self, node, target, directories) -> None:
        with pytest.raises(NodeError, match="no input assets"):
            Prefabricator(CompositePrefabStrategy({}), node=node, target=target, directories=directories).setup({"empty": []})


class TestPerAssetStrategy:
    def test_one_prefab_per_input(self, node, target, directories, output_dir, make_asset) -> None:
        inputs = [make_asset("hero/body.fbx", asset_type="model"), make_asset("hero/skin.png")]

        result = Prefabricator(PerAssetPrefabStrategy({}), node=node, target=target, directories=directories).run(
            {"hero": inputs}, previously_cached=[]
        )

        assert result.generated == [str(output_dir / "hero" / "body.pfb"), str(output_dir / "hero" / "skin.pfb")]
        assert read_prefab(output_dir / "hero" / "skin.pfb")["name"] == "skin"

    def test_plan_matches_build(self, node, target, directories, make_asset) -> None:
        inputs = [make_asset("a.png"), make_asset("b.png")]
        prefabricator = Prefabricator(PerAssetPrefabStrategy({}), node=node, target=target, directories=directories)

        planned = prefabricator.setup({"g": inputs}).planned
        built = prefabricator.run({"g": inputs}, previously_cached=[]).generated

        assert planned == built

    def test_always_rebuild_ignores_cache(self, node, target, directories, make_asset) -> None:
        inputs = [make_asset("a.png")]
        prefabricator = Prefabricator(PerAssetPrefabStrategy({"always_rebuild": True}), node=node, target=target, directories=directories)
        first = prefabricator.run({"g": inputs}, previously_cached=[])

        second = prefabricator.run({"g": inputs}, previously_cached=first.touched)

        assert second.generated == first.generated
        assert second.used_cache == []

    def test_shared_stem_rejected_at_plan(self, node, target, directories, make_asset) -> None:
        inputs = [make_asset("hero/body.fbx", asset_type="model"), make_asset("hero/body.png")]

        with pytest.raises(NodeError) as exc_info:
            Prefabricator(PerAssetPrefabStrategy({}), node=node, target=target, directories=directories).setup({"hero": inputs})

        assert exc_info.value.kind == NodeErrorKind.PLAN_REJECTED
        assert "'hero'" in exc_info.value.message
        assert "hero/body.pfb" in exc_info.value.message
        assert "body.fbx" in exc_info.value.message
        assert "body.png" in exc_info.value.message

    def test_shared_stem_rejected_before_build_writes(self, node, target, directories, output_dir, make_asset) -> None:
        inputs = [make_asset("hero/body.fbx", asset_type="model"), make_asset("hero/body.png")]

        with pytest.raises(NodeError) as exc_info:
            Prefabricator(PerAssetPrefabStrategy({}), node=node, target=target, directories=directories).run(
                {"hero": inputs}, previously_cached=[]
            )

        assert exc_info.value.kind == NodeErrorKind.PLAN_REJECTED
        assert not (output_dir / "hero").exists()

    def test_unknown_option_rejected(self) -> None:
        with pytest.raises(PluginConfigError, match="PerAssetConfig"):
            PerAssetPrefabStrategy({"rebuild": True})


def test_artifacts_are_deterministic(node, target, directories, output_dir, make_asset) -> None:
    """Forcing a rebuild with identical inputs produces identical bytes."""
    inputs = [make_asset("hero/body.fbx", asset_type="model")]
    prefabricator = Prefabricator(CompositePrefabStrategy({}), node=node, target=target, directories=directories)
    prefabricator.run({"hero": inputs}, previously_cached=[])
    before = (output_dir / "hero.pfb").read_bytes()

    prefabricator.run({"hero": inputs}, previously_cached=[], force=True)

    assert (output_dir / "hero.pfb").read_bytes() == before
