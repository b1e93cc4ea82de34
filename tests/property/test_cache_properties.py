# tests/property/test_cache_properties.py
"""Property-based tests for cache validity and reconciliation.

Reconciliation Properties:
- After a prune, exactly the touched artifacts remain among the previously cached ones
- No sidecar outlives its primary
- Files the ledger never mentioned are left alone

Validity Properties:
- A candidate is reusable iff it was cached and no input is new

Run Properties:
- Re-running with unchanged inputs regenerates nothing and touches the same set
"""

from __future__ import annotations

import os
import tempfile
from pathlib import Path

from hypothesis import given
from hypothesis import strategies as st

from assetforge.contracts import Asset, BuildTarget, NodeInfo, PrefabObject
from assetforge.core.cache_dir import CacheDirectoryAllocator
from assetforge.core.sidecar import ensure_sidecar, sidecar_path
from assetforge.engine.orchestrator import Prefabricator
from assetforge.engine.orchestrator.cache import find_stale_paths, is_cache_valid, reconcile_cache
from assetforge.plugins.base import BasePrefabStrategy

# =============================================================================
# Strategies
# =============================================================================

artifact_names = st.sampled_from(["a.pfb", "b.pfb", "c.pfb", "g1/d.pfb", "g1/e.pfb", "g2/deep/f.pfb"])

name_sets = st.sets(artifact_names, max_size=6)

group_layouts = st.dictionaries(
    st.sampled_from(["hero", "villain", "props", "0"]),
    st.lists(st.sampled_from(["a.png", "b.fbx", "c.wav"]), min_size=1, max_size=3, unique=True),
    min_size=1,
    max_size=4,
)


class _OnePerInput(BasePrefabStrategy):
    name = "one_per_input"

    def plan(self, target, node, group_key, inputs, output_dir, allocate):  # type: ignore[no-untyped-def]
        for d in inputs:
            allocate(f"{group_key}/{Path(d.name).stem}.pfb")

    def build(self, target, node, group_key, inputs, output_dir, allocate):  # type: ignore[no-untyped-def]
        for d in inputs:
            allocate(PrefabObject(name=Path(d.name).stem), f"{group_key}/{Path(d.name).stem}.pfb")


def _materialize(cache_dir: Path, names: set[str]) -> dict[str, str]:
    paths: dict[str, str] = {}
    for name in names:
        path = cache_dir / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(name)
        ensure_sidecar(path, bundle_name="bundle")
        paths[name] = os.fspath(path)
    return paths


# =============================================================================
# Properties
# =============================================================================


class TestReconcileProperties:
    @given(previous=name_sets, touched=name_sets, untracked=name_sets)
    def test_only_touched_previous_artifacts_survive(self, previous: set[str], touched: set[str], untracked: set[str]) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            cache_dir = Path(tmp) / "cache"
            cache_dir.mkdir()
            paths = _materialize(cache_dir, previous | touched | untracked)

            result = reconcile_cache([paths[n] for n in previous], [paths[n] for n in touched], cache_dir=cache_dir)

            for name, path in paths.items():
                should_exist = name in touched or name not in previous
                assert Path(path).exists() == should_exist
                assert sidecar_path(Path(path)).exists() == should_exist
            assert set(result.removed) == {paths[n] for n in previous - touched}
            assert cache_dir.is_dir()

    @given(previous=name_sets, touched=name_sets)
    def test_stale_paths_sorted_and_disjoint(self, previous: set[str], touched: set[str]) -> None:
        stale = find_stale_paths([f"/c/{n}" for n in previous], [f"/c/{n}" for n in touched])

        assert stale == sorted(stale)
        assert not set(stale) & {f"/c/{n}" for n in touched}


class TestValidityProperties:
    @given(flags=st.lists(st.booleans(), max_size=5), cached=st.booleans())
    def test_valid_iff_cached_and_no_new_input(self, flags: list[bool], cached: bool) -> None:
        inputs = [
            Asset.imported(
                absolute_source_path=f"/src/{i}.png",
                source_base_path="/src",
                import_from=f"/src/{i}.png",
                asset_id=str(i),
                asset_type="texture",
                is_new=flag,
            )
            for i, flag in enumerate(flags)
        ]
        previously_cached = {"/c/out.pfb"} if cached else set()

        assert is_cache_valid(inputs, previously_cached, "/c/out.pfb") == (cached and not any(flags))


class TestRunProperties:
    @given(layout=group_layouts)
    def test_second_identical_run_reuses_everything(self, layout: dict[str, list[str]]) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            groups = {}
            for group_key, files in layout.items():
                assets = []
                for file_name in files:
                    path = root / "source" / group_key / file_name
                    path.parent.mkdir(parents=True, exist_ok=True)
                    path.write_text(file_name)
                    assets.append(
                        Asset.imported(
                            absolute_source_path=os.fspath(path),
                            source_base_path=os.fspath(root / "source"),
                            import_from=os.fspath(path),
                            asset_id=file_name,
                            asset_type="texture",
                            is_new=False,
                        )
                    )
                groups[group_key] = assets

            prefabricator = Prefabricator(
                _OnePerInput({}),
                node=NodeInfo(node_id="prop", name="Prop"),
                target=BuildTarget.STANDALONE,
                directories=CacheDirectoryAllocator(root / "cache"),
            )
            first = prefabricator.run(groups, previously_cached=[])
            second = prefabricator.run(groups, previously_cached=first.touched)

            assert second.generated == []
            assert sorted(second.touched) == sorted(first.touched)
            assert second.reconciliation.pruned_count == 0
