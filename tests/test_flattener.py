"""
Tests for the hierarchy flattener — closure order, unions, and cycles.
"""

import pytest

from modpub.core.errors import CyclicInheritanceError, UnknownConfigurationError
from modpub.core.graph.configuration_graph import ConfigurationGraph
from modpub.core.graph.flattener import HierarchyFlattener
from modpub.core.models import (
    ArtifactDescriptor,
    Configuration,
    DependencyDescriptor,
    ExcludeRule,
)

LIB = ArtifactDescriptor(file="build/lib.jar")
NATIVE = ArtifactDescriptor(file="build/native.so")


def _diamond() -> ConfigurationGraph:
    """d extends b and c; b and c both extend a."""
    graph = ConfigurationGraph()
    graph.add_configuration("a", artifacts=[LIB], excludes=[ExcludeRule(group="log4j")])
    graph.add_configuration("b", extends_from=["a"])
    graph.add_configuration("c", extends_from=["a"], artifacts=[NATIVE])
    graph.add_configuration("d", extends_from=["b", "c"])
    return graph


class TestHierarchy:
    def test_single(self):
        graph = ConfigurationGraph()
        graph.add_configuration("compile")
        assert HierarchyFlattener(graph).hierarchy("compile") == ("compile",)

    def test_chain(self):
        graph = ConfigurationGraph()
        graph.add_configuration("compile")
        graph.add_configuration("runtime", extends_from=["compile"])
        graph.add_configuration("test", extends_from=["runtime"])
        assert HierarchyFlattener(graph).hierarchy("test") == ("test", "runtime", "compile")

    def test_diamond_visits_shared_ancestor_once(self):
        hierarchy = HierarchyFlattener(_diamond()).hierarchy("d")
        assert hierarchy == ("d", "b", "a", "c")
        assert set(hierarchy) == {"a", "b", "c", "d"}

    def test_parent_order_follows_declaration(self):
        graph = ConfigurationGraph()
        graph.add_configuration("x")
        graph.add_configuration("y")
        graph.add_configuration("z", extends_from=["y", "x"])
        assert HierarchyFlattener(graph).hierarchy("z") == ("z", "y", "x")

    def test_unknown(self):
        with pytest.raises(UnknownConfigurationError):
            HierarchyFlattener(ConfigurationGraph()).hierarchy("missing")

    def test_deep_chain(self):
        graph = ConfigurationGraph()
        graph.add_configuration("c0", artifacts=[LIB])
        for i in range(1, 2000):
            graph.add_configuration(f"c{i}", extends_from=[f"c{i - 1}"])

        eff = HierarchyFlattener(graph).flatten("c1999")
        assert len(eff.hierarchy) == 2000
        assert eff.hierarchy[0] == "c1999"
        assert eff.hierarchy[-1] == "c0"
        assert eff.artifacts == (LIB,)

    def test_deep_cycle_reported(self):
        confs = [Configuration(name=f"c{i}", extends_from=(f"c{i - 1}",)) for i in range(1, 2000)]
        confs.append(Configuration(name="c0", extends_from=("c1999",)))
        graph = ConfigurationGraph.from_configurations(confs)
        with pytest.raises(CyclicInheritanceError) as exc:
            HierarchyFlattener(graph).hierarchy("c5")
        assert len(exc.value.path) == 2001
        assert exc.value.path[0] == exc.value.path[-1] == "c5"


class TestCycles:
    def _cyclic(self) -> ConfigurationGraph:
        return ConfigurationGraph.from_configurations([
            Configuration(name="a", extends_from=("b",)),
            Configuration(name="b", extends_from=("a",)),
            Configuration(name="ok"),
        ])

    def test_two_cycle_raises(self):
        with pytest.raises(CyclicInheritanceError) as exc:
            HierarchyFlattener(self._cyclic()).flatten("a")
        assert exc.value.path == ["a", "b", "a"]
        assert "a -> b -> a" in str(exc.value)

    def test_longer_cycle_reports_path(self):
        graph = ConfigurationGraph.from_configurations([
            Configuration(name="top", extends_from=("x",)),
            Configuration(name="x", extends_from=("y",)),
            Configuration(name="y", extends_from=("z",)),
            Configuration(name="z", extends_from=("x",)),
        ])
        with pytest.raises(CyclicInheritanceError) as exc:
            HierarchyFlattener(graph).hierarchy("top")
        assert exc.value.path == ["x", "y", "z", "x"]

    def test_self_extension(self):
        graph = ConfigurationGraph.from_configurations([
            Configuration(name="a", extends_from=("a",)),
        ])
        with pytest.raises(CyclicInheritanceError) as exc:
            HierarchyFlattener(graph).flatten("a")
        assert exc.value.path == ["a", "a"]

    def test_check_all_collects_errors(self):
        errors = HierarchyFlattener(self._cyclic()).check_all()
        assert len(errors) == 2
        assert all(isinstance(e, CyclicInheritanceError) for e in errors)

    def test_check_all_clean_graph(self):
        assert HierarchyFlattener(_diamond()).check_all() == []


class TestFlatten:
    def test_union_of_artifacts_without_duplicates(self):
        eff = HierarchyFlattener(_diamond()).flatten("d")
        assert eff.artifacts == (LIB, NATIVE)
        assert eff.ancestors == ("b", "a", "c")

    def test_excludes_inherited(self):
        eff = HierarchyFlattener(_diamond()).flatten("b")
        assert eff.excludes == (ExcludeRule(group="log4j"),)

    def test_artifact_redeclared_on_child_appears_once(self):
        graph = ConfigurationGraph()
        graph.add_configuration("compile", artifacts=[LIB])
        graph.add_configuration("runtime", extends_from=["compile"], artifacts=[LIB, NATIVE])
        eff = HierarchyFlattener(graph).flatten("runtime")
        assert eff.artifacts == (LIB, NATIVE)

    def test_dependencies_inherited_in_hierarchy_order(self):
        graph = ConfigurationGraph()
        graph.add_configuration(
            "compile", dependencies=[DependencyDescriptor(module="org.slf4j:slf4j-api:2.0.9")]
        )
        graph.add_configuration(
            "runtime",
            extends_from=["compile"],
            dependencies=[DependencyDescriptor(module="org.acme:core:1.2")],
        )
        eff = HierarchyFlattener(graph).flatten("runtime")
        assert [d.module.name for d in eff.dependencies] == ["core", "slf4j-api"]
        assert [d.source_configuration for d in eff.dependencies] == ["runtime", "compile"]

    def test_memoized(self):
        flattener = HierarchyFlattener(_diamond())
        assert flattener.flatten("d") is flattener.flatten("d")

    def test_not_memoized(self):
        flattener = HierarchyFlattener(_diamond(), memoize=False)
        first, second = flattener.flatten("d"), flattener.flatten("d")
        assert first == second
        assert first is not second

    def test_flattening_is_idempotent(self):
        flattener = HierarchyFlattener(_diamond())
        hierarchy = flattener.flatten("d").hierarchy
        assert flattener.hierarchy_of(hierarchy) == hierarchy

    def test_hierarchy_of_several(self):
        flattener = HierarchyFlattener(_diamond())
        assert flattener.hierarchy_of(["b", "c"]) == ("b", "a", "c")

    def test_graph_property(self):
        graph = _diamond()
        assert HierarchyFlattener(graph).graph is graph
