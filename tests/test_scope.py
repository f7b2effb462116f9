# FILE: tests/test_scope.py
"""
Tests for uigen/preview/scope.py
Capability scopes: contents, containment invariant, selection, immutability.
"""

import sys
from pathlib import Path

_project_root = Path(__file__).parent.parent
if str(_project_root) not in sys.path:
    sys.path.insert(0, str(_project_root))

import pytest

from uigen.generation.errors import InputError
from uigen.generation.schemas import Category
from uigen.preview.scope import (
    EXPANDED,
    ICON_GLYPHS,
    RECHARTS_PRIMITIVES,
    RESTRICTED,
    Capability,
    CapabilityKind,
    ScopeRegistry,
    _make_scope,
    build_scope_registry,
    get_scope_registry,
)


class TestScopeContents:
    """What each scope exposes."""

    def test_restricted_has_hooks(self, restricted):
        for name in ("useState", "useReducer", "useEffect", "useLayoutEffect", "useRef", "useMemo", "useCallback"):
            assert name in restricted

    def test_restricted_has_icons(self, restricted):
        for name in ICON_GLYPHS:
            assert restricted.get(name).kind == CapabilityKind.ICON

    def test_restricted_has_no_libraries(self, restricted):
        for name in ("THREE", "d3", "Recharts", "Tone", "_", "useContext", "LineChart"):
            assert name not in restricted

    def test_expanded_has_libraries(self, expanded):
        for name in ("THREE", "d3", "Recharts", "Tone", "_", "useContext", "createContext"):
            assert name in expanded
        for name in RECHARTS_PRIMITIVES:
            assert expanded.get(name).kind == CapabilityKind.CHART

    def test_host_services_in_both(self, restricted, expanded):
        for name in ("console", "setTimeout", "clearTimeout", "setInterval", "clearInterval"):
            assert name in restricted
            assert name in expanded

    def test_render_is_not_a_symbol(self, expanded):
        assert "render" not in expanded

    def test_names_of_kind(self, expanded):
        assert expanded.names_of_kind(CapabilityKind.DATA_VIZ) == ["d3"]


class TestContainment:
    """expanded ⊇ restricted, checked at build time."""

    def test_expanded_contains_restricted(self, restricted, expanded):
        assert expanded.issuperset(restricted)
        assert set(restricted.names()) < set(expanded.names())

    def test_same_capability_objects(self, restricted, expanded):
        for name in restricted.names():
            assert expanded.get(name) == restricted.get(name)

    def test_registry_rejects_broken_containment(self):
        small = _make_scope(RESTRICTED, [Capability("useState", CapabilityKind.STATE_HOOK, "x")])
        other = _make_scope(EXPANDED, [Capability("d3", CapabilityKind.DATA_VIZ, "y")])
        with pytest.raises(ValueError, match="useState"):
            ScopeRegistry(small, other)

    def test_duplicate_symbol_rejected(self):
        cap = Capability("useState", CapabilityKind.STATE_HOOK, "x")
        with pytest.raises(ValueError, match="Duplicate"):
            _make_scope(RESTRICTED, [cap, cap])


class TestImmutability:
    """Scopes are shared read-only."""

    def test_mapping_is_read_only(self, restricted):
        with pytest.raises(TypeError):
            restricted.symbols["d3"] = Capability("d3", CapabilityKind.DATA_VIZ, "x")

    def test_definition_is_frozen(self, restricted):
        with pytest.raises(Exception):
            restricted.name = "other"

    def test_registry_is_singleton(self):
        assert get_scope_registry() is get_scope_registry()

    def test_rebuild_is_equivalent(self, scopes):
        fresh = build_scope_registry()
        assert fresh.restricted.names() == scopes.restricted.names()
        assert fresh.expanded.names() == scopes.expanded.names()


class TestSelection:
    """Category default, explicit override wins."""

    def test_simple_selects_restricted(self, scopes):
        assert scopes.select(Category.SIMPLE).name == RESTRICTED

    def test_complex_selects_expanded(self, scopes):
        assert scopes.select(Category.COMPLEX).name == EXPANDED

    def test_override_wins(self, scopes):
        assert scopes.select(Category.SIMPLE, "expanded").name == EXPANDED
        assert scopes.select(Category.COMPLEX, " Restricted ").name == RESTRICTED

    def test_unknown_override_rejected(self, scopes):
        with pytest.raises(InputError, match="Unknown scope"):
            scopes.select(Category.SIMPLE, "everything")

    def test_selection_is_by_reference(self, scopes):
        assert scopes.select(Category.SIMPLE) is scopes.restricted


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
