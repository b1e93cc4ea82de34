# tests/core/test_prefab_io.py
"""Tests for prefab serialization."""

from pathlib import Path

import pytest
import yaml

from assetforge.contracts import PrefabComponent, PrefabObject
from assetforge.core.prefab_io import PREFAB_FORMAT_VERSION, ArtifactWriter, PrefabFormatError, YamlPrefabWriter, read_prefab
from assetforge.core.sidecar import bundle_tag, read_sidecar


def _prefab() -> PrefabObject:
    return PrefabObject(
        name="hero",
        components=(PrefabComponent(kind="build_info", properties={"target": "ios"}),),
        children=(PrefabObject(name="skin"),),
    )


class TestYamlPrefabWriter:
    def test_is_artifact_writer(self) -> None:
        assert isinstance(YamlPrefabWriter(), ArtifactWriter)

    def test_writes_document_and_sidecar(self, tmp_path: Path) -> None:
        path = tmp_path / "nested" / "hero.pfb"

        guid = YamlPrefabWriter().write(_prefab(), path)

        assert read_prefab(path) == _prefab().to_dict()
        assert read_sidecar(path)["guid"] == guid

    def test_bundle_name_tags_sidecar(self, tmp_path: Path) -> None:
        path = tmp_path / "hero.pfb"

        YamlPrefabWriter(bundle_name="heroes").write(_prefab(), path)

        assert bundle_tag(path) == "heroes"

    def test_rewrite_keeps_guid(self, tmp_path: Path) -> None:
        writer = YamlPrefabWriter()
        path = tmp_path / "hero.pfb"

        assert writer.write(_prefab(), path) == writer.write(PrefabObject(name="changed"), path)

    def test_rejects_other_objects(self, tmp_path: Path) -> None:
        with pytest.raises(TypeError, match="PrefabObject"):
            YamlPrefabWriter().write({"name": "hero"}, tmp_path / "hero.pfb")


class TestReadPrefab:
    def test_not_a_prefab(self, tmp_path: Path) -> None:
        path = tmp_path / "x.pfb"
        path.write_text("just text")

        with pytest.raises(PrefabFormatError, match="not a prefab"):
            read_prefab(path)

    def test_unsupported_version(self, tmp_path: Path) -> None:
        path = tmp_path / "x.pfb"
        path.write_text(yaml.safe_dump({"format_version": PREFAB_FORMAT_VERSION + 1, "root": {}}))

        with pytest.raises(PrefabFormatError, match="unsupported format_version"):
            read_prefab(path)
