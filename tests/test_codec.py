"""
Tests for descriptor codecs — JSON/YAML output and atomic writes.
"""

import json
from pathlib import Path

import pytest
import yaml

from modpub.core.codec.descriptor_codec import (
    JsonDescriptorCodec,
    YamlDescriptorCodec,
    get_codec,
)
from modpub.core.engine.descriptor_builder import DescriptorBuilder
from modpub.core.graph.configuration_graph import ConfigurationGraph
from modpub.core.models import ArtifactDescriptor, DependencyDescriptor, ModuleIdentity


def _descriptor():
    graph = ConfigurationGraph()
    graph.add_configuration(
        "compile",
        artifacts=[ArtifactDescriptor(file="build/lib.jar")],
        dependencies=[DependencyDescriptor(module="org.slf4j:slf4j-api:2.0.9")],
    )
    graph.add_configuration("runtime", extends_from=["compile"])
    return DescriptorBuilder(graph).build(
        ModuleIdentity.parse("org.acme:widget:1.0.0"), ["runtime"]
    )


class TestJsonCodec:
    def test_write(self, tmp_path: Path):
        dest = tmp_path / "publications" / "descriptor.json"
        JsonDescriptorCodec().write(_descriptor(), dest)

        doc = json.loads(dest.read_text(encoding="utf-8"))
        assert doc["module"]["group"] == "org.acme"
        assert doc["configurations"][0]["name"] == "runtime"
        assert doc["artifacts"][0]["file"] == "build/lib.jar"
        assert doc["dependencies"][0]["conf"] == "compile->default"

    def test_no_temp_files_left(self, tmp_path: Path):
        dest = tmp_path / "descriptor.json"
        JsonDescriptorCodec().write(_descriptor(), dest)
        assert [p.name for p in tmp_path.iterdir()] == ["descriptor.json"]

    def test_replaces_existing(self, tmp_path: Path):
        dest = tmp_path / "descriptor.json"
        dest.write_text("stale")
        JsonDescriptorCodec().write(_descriptor(), dest)
        assert json.loads(dest.read_text())["status"] == "integration"

    def test_unwritable_destination_raises(self, tmp_path: Path):
        blocker = tmp_path / "file"
        blocker.write_text("")
        with pytest.raises(OSError):
            JsonDescriptorCodec().write(_descriptor(), blocker / "descriptor.json")


class TestYamlCodec:
    def test_write(self, tmp_path: Path):
        dest = tmp_path / "descriptor.yml"
        YamlDescriptorCodec().write(_descriptor(), dest)
        doc = yaml.safe_load(dest.read_text(encoding="utf-8"))
        assert doc == _descriptor().to_dict()

    def test_keys_in_document_order(self):
        text = YamlDescriptorCodec().encode(_descriptor())
        assert text.index("module:") < text.index("configurations:") < text.index("artifacts:")


class TestGetCodec:
    def test_known_formats(self):
        assert isinstance(get_codec("json"), JsonDescriptorCodec)
        assert isinstance(get_codec("YAML"), YamlDescriptorCodec)

    def test_unknown_format(self):
        with pytest.raises(ValueError, match="Unknown descriptor format"):
            get_codec("xml")
