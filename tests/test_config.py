"""
Tests for configuration loading and the config check use case.
"""

import textwrap
from pathlib import Path

import pytest

from modpub.core.config.loader import (
    ConfigError,
    build_graph,
    find_project_file,
    load_project,
    parse_project,
    project_root,
)
from modpub.core.errors import ModpubError, UnknownParentError
from modpub.core.models import ExcludeRule, ModuleIdentity
from modpub.core.use_cases.config_check import check_config
from tests.helpers import write_project


class TestLoadProject:
    def test_sample(self, sample_config: Path):
        project = load_project(sample_config)
        assert project.module == ModuleIdentity.parse("org.acme:widget:1.0.0")
        assert [c.name for c in project.configurations] == ["compile", "runtime", "test"]
        assert project.publish.configurations == ["runtime"]
        assert [t.name for t in project.targets] == ["local", "shared"]

    def test_shorthands(self, sample_config: Path):
        project = load_project(sample_config)
        compile_, runtime, test = project.configurations
        assert compile_.artifacts[0].file == "build/lib.jar"
        assert compile_.dependencies[0].module.name == "slf4j-api"
        assert runtime.extends_from == ("compile",)
        assert runtime.dependencies[0].target_configurations == ("default", "sources")
        assert runtime.dependencies[0].excludes == (
            ExcludeRule(group="commons-logging", module="commons-logging"),
        )
        assert test.extends_from == ("runtime",)
        assert test.visible is False

    def test_defaults(self, tmp_path: Path):
        config = write_project(tmp_path, "module: g:n:1\n", artifacts=False)
        project = load_project(config)
        assert project.configurations == []
        assert project.publish.format == "json"
        assert project.publish.descriptor == "build/publications/descriptor.json"

    def test_module_as_mapping(self):
        project = parse_project({"module": {"group": "g", "name": "n", "version": "1"}})
        assert str(project.module) == "g:n:1"

    def test_exclude_module_only(self):
        project = parse_project({
            "module": "g:n:1",
            "configurations": [{"name": "c", "excludes": [":log4j"]}],
        })
        assert project.configurations[0].excludes == (ExcludeRule(module="log4j"),)

    def test_missing_file(self, tmp_path: Path):
        with pytest.raises(ConfigError, match="not found"):
            load_project(tmp_path / "modpub.yml")

    def test_invalid_yaml(self, tmp_path: Path):
        config = write_project(tmp_path, "module: [unclosed\n", artifacts=False)
        with pytest.raises(ConfigError, match="Invalid YAML"):
            load_project(config)

    def test_not_a_mapping(self, tmp_path: Path):
        config = write_project(tmp_path, "- just\n- a list\n", artifacts=False)
        with pytest.raises(ConfigError, match="Expected a YAML mapping"):
            load_project(config)

    def test_unknown_key_rejected(self, tmp_path: Path):
        config = write_project(tmp_path, "module: g:n:1\nrepository: x\n", artifacts=False)
        with pytest.raises(ConfigError, match="Invalid publish configuration"):
            load_project(config)

    def test_bad_module_notation(self):
        with pytest.raises(ConfigError):
            parse_project({"module": "g:n"})

    def test_module_notation_with_extra_part_rejected(self):
        with pytest.raises(ConfigError, match="expected group:name:version"):
            parse_project({"module": "g:n:1:extra"})

    def test_config_error_is_modpub_error(self):
        assert issubclass(ConfigError, ModpubError)


class TestFindProjectFile:
    def test_walks_up(self, tmp_path: Path):
        write_project(tmp_path, artifacts=False)
        nested = tmp_path / "a" / "b"
        nested.mkdir(parents=True)
        assert find_project_file(nested) == (tmp_path / "modpub.yml").resolve()

    def test_not_found(self, tmp_path: Path):
        assert find_project_file(tmp_path) is None

    def test_project_root(self, sample_config: Path):
        assert project_root(sample_config) == sample_config.parent.resolve()


class TestBuildGraph:
    def test_sample_graph(self, sample_config: Path):
        graph = build_graph(load_project(sample_config))
        assert graph.names() == ["compile", "runtime", "test"]
        assert graph.configuration("runtime").dependencies[0].source_configuration == "runtime"

    def test_forward_reference(self):
        project = parse_project({
            "module": "g:n:1",
            "configurations": [
                {"name": "runtime", "extends": "compile"},
                {"name": "compile"},
            ],
        })
        assert len(build_graph(project)) == 2

    def test_unknown_parent(self):
        project = parse_project({
            "module": "g:n:1",
            "configurations": [{"name": "runtime", "extends": "compile"}],
        })
        with pytest.raises(UnknownParentError):
            build_graph(project)


class TestCheckConfig:
    def test_valid(self, sample_config: Path):
        result = check_config(sample_config)
        assert result.valid, result.errors
        assert result.errors == []
        assert result.warnings == []

    def test_to_dict(self, sample_config: Path):
        d = check_config(sample_config).to_dict()
        assert d["valid"] is True
        assert d["module"] == "org.acme:widget:1.0.0"
        assert d["configuration_count"] == 3
        assert d["target_count"] == 2

    def test_missing_artifacts_warn(self, tmp_path: Path):
        config = write_project(tmp_path, artifacts=False)
        result = check_config(config)
        assert result.valid
        assert any("lib.jar" in w for w in result.warnings)

    def test_cycle_is_an_error(self, tmp_path: Path):
        config = write_project(tmp_path, textwrap.dedent("""\
            module: g:n:1
            configurations:
              - name: a
                extends: b
              - name: b
                extends: a
        """), artifacts=False)
        result = check_config(config)
        assert not result.valid
        assert any("Cyclic" in e for e in result.errors)

    def test_self_extension_is_a_cycle(self, tmp_path: Path):
        config = write_project(tmp_path, textwrap.dedent("""\
            module: g:n:1
            configurations:
              - name: a
                extends: a
        """), artifacts=False)
        result = check_config(config)
        assert not result.valid
        assert "Cyclic configuration inheritance: a -> a" in result.errors

    def test_unknown_parent_is_an_error(self, tmp_path: Path):
        config = write_project(tmp_path, textwrap.dedent("""\
            module: g:n:1
            configurations:
              - name: runtime
                extends: compile
        """), artifacts=False)
        result = check_config(config)
        assert not result.valid
        assert "unknown configuration 'compile'" in result.errors[0]

    def test_unknown_publish_configuration(self, tmp_path: Path):
        config = write_project(tmp_path, textwrap.dedent("""\
            module: g:n:1
            configurations:
              - name: compile
            publish:
              configurations: [docs]
            targets:
              - name: local
                path: repo
        """), artifacts=False)
        result = check_config(config)
        assert not result.valid
        assert any("'docs'" in e for e in result.errors)

    def test_duplicate_targets_and_missing_path(self, tmp_path: Path):
        config = write_project(tmp_path, textwrap.dedent("""\
            module: g:n:1
            targets:
              - name: local
                path: repo
              - name: local
                path: other
              - name: remote
        """), artifacts=False)
        result = check_config(config)
        assert not result.valid
        assert any("Duplicate target names: local" in e for e in result.errors)
        assert any("'remote'" in e for e in result.errors)

    def test_warnings_for_empty_project(self, tmp_path: Path):
        config = write_project(tmp_path, "module: g:n:1\n", artifacts=False)
        result = check_config(config)
        assert result.valid
        assert any("No targets" in w for w in result.warnings)
        assert any("publish.configurations" in w for w in result.warnings)

    def test_invalid_file(self, tmp_path: Path):
        config = write_project(tmp_path, "configurations: []\n", artifacts=False)
        result = check_config(config)
        assert not result.valid
        assert result.project is None
