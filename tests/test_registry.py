"""
Tests for modconfig.registry and modconfig.sources modules.

Tests the schema registry and the source store including:
- Declaring, replacing and looking up schemas
- Provided source ordering and the lowest-priority external slot
- Clearing
"""

from __future__ import annotations

import pytest

from modconfig.exceptions import ConfigError, SchemaNotDeclaredError
from modconfig.registry import SchemaRegistry
from modconfig.schema import Leaf
from modconfig.sources import SourceStore


class TestSchemaRegistry:
    """Tests for SchemaRegistry."""

    def test_declare_and_get(self, logger):
        """Test that a declared schema can be looked up."""
        registry = SchemaRegistry()
        registry.declare("testmod", {"foo": {"default": "qux"}}, logger)

        assert "testmod" in registry
        assert registry.get("testmod").children["foo"] == Leaf("qux")

    def test_redeclare_replaces(self, logger):
        """Test that declaring again overwrites the previous schema."""
        registry = SchemaRegistry()
        registry.declare("testmod", {"foo": {"default": 1}}, logger)
        registry.declare("testmod", {"bar": {"default": 2}}, logger)

        assert list(registry.get("testmod").children) == ["bar"]
        assert len(registry) == 1

    def test_get_undeclared_raises(self):
        """Test that looking up an undeclared module raises."""
        registry = SchemaRegistry()

        with pytest.raises(SchemaNotDeclaredError, match="schema.*defined"):
            registry.get("fake-module")

    def test_declare_returns_malformed_diagnostics(self, logger):
        """Test that declaration reports malformed nodes without raising."""
        registry = SchemaRegistry()

        diagnostics = registry.declare("testmod", {"foo": 3}, logger)

        assert len(diagnostics) == 1
        assert "testmod" in registry

    def test_module_ids_in_declaration_order(self, logger):
        """Test that module ids are listed in declaration order."""
        registry = SchemaRegistry()
        registry.declare("b", {}, logger)
        registry.declare("a", {}, logger)

        assert registry.module_ids() == ["b", "a"]

    def test_clear(self, logger):
        """Test that clear forgets every schema."""
        registry = SchemaRegistry()
        registry.declare("testmod", {}, logger)

        registry.clear()

        assert "testmod" not in registry


class TestSourceStore:
    """Tests for SourceStore."""

    def test_provided_sources_in_order(self):
        """Test that sources are ordered by provide() call."""
        store = SourceStore()
        first = {"mod": {"x": 1}}
        second = {"mod": {"x": 2}}
        store.provide(first)
        store.provide(second)

        assert store.ordered() == [first, second]

    def test_external_source_is_lowest_priority(self):
        """Test that the external source comes first regardless of timing."""
        store = SourceStore()
        provided = {"mod": {"x": "provided"}}
        external = {"mod": {"x": "external"}}
        store.provide(provided)
        store.set_external(external)

        assert store.ordered() == [external, provided]
        assert len(store) == 2

    def test_provide_rejects_non_mapping(self):
        """Test that a non-mapping source raises ConfigError."""
        store = SourceStore()

        with pytest.raises(ConfigError, match="must be a mapping"):
            store.provide(["not", "a", "mapping"])

    def test_clear(self):
        """Test that clear drops provided and external sources."""
        store = SourceStore()
        store.provide({"mod": {}})
        store.set_external({"mod": {}})

        store.clear()

        assert store.ordered() == []
        assert store.external is None
