# FILE: uigen/preview/scope.py
"""
Capability scopes for preview evaluation.

A scope is the closed allowlist of symbols a generated unit may reference.
Each symbol maps to a Capability: a kind plus the JavaScript expression that
yields the handle inside the preview runtime (`__preview` is the runtime
object created by runtime/preview_runtime.js).

TWO SCOPES:
- restricted: element factory, hooks, curated icons, host services
- expanded: restricted + context hooks, THREE, d3, Recharts, Tone, _ (lodash)

SELECTION:
- simple → restricted, complex → expanded
- explicit override ("restricted"/"expanded") wins over the category

Scopes are built once (build_scope_registry) and shared read-only. Anything
not in the selected mapping stays unresolved and fails at evaluation time.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from uigen.generation.errors import InputError
from uigen.generation.schemas import Category

logger = logging.getLogger(__name__)

RESTRICTED = "restricted"
EXPANDED = "expanded"


class CapabilityKind(str, Enum):
    RUNTIME = "runtime"
    STATE_HOOK = "state_hook"
    LIFECYCLE_HOOK = "lifecycle_hook"
    MEMO_HOOK = "memo_hook"
    CONTEXT_HOOK = "context_hook"
    ICON = "icon"
    GRAPHICS_3D = "graphics_3d"
    DATA_VIZ = "data_viz"
    CHART = "chart"
    AUDIO = "audio"
    DATA_UTILITY = "data_utility"
    HOST_SERVICE = "host_service"


HOOK_KINDS = (
    CapabilityKind.STATE_HOOK,
    CapabilityKind.LIFECYCLE_HOOK,
    CapabilityKind.MEMO_HOOK,
    CapabilityKind.CONTEXT_HOOK,
)

LIBRARY_KINDS = (
    CapabilityKind.GRAPHICS_3D,
    CapabilityKind.DATA_VIZ,
    CapabilityKind.CHART,
    CapabilityKind.AUDIO,
    CapabilityKind.DATA_UTILITY,
)


@dataclass(frozen=True)
class Capability:
    name: str
    kind: CapabilityKind
    source: str
    description: str = ""


@dataclass(frozen=True, eq=False)
class ScopeDefinition:
    """Immutable symbol → capability mapping."""
    name: str
    symbols: Mapping[str, Capability]

    def __contains__(self, symbol: object) -> bool:
        return symbol in self.symbols

    def __len__(self) -> int:
        return len(self.symbols)

    def get(self, symbol: str) -> Optional[Capability]:
        return self.symbols.get(symbol)

    def names(self) -> List[str]:
        return list(self.symbols.keys())

    def names_of_kind(self, *kinds: CapabilityKind) -> List[str]:
        return [c.name for c in self.symbols.values() if c.kind in kinds]

    def issuperset(self, other: "ScopeDefinition") -> bool:
        return all(
            self.symbols.get(name) == cap for name, cap in other.symbols.items()
        )


def _make_scope(name: str, capabilities: Iterable[Capability]) -> ScopeDefinition:
    table: Dict[str, Capability] = {}
    for cap in capabilities:
        if cap.name in table:
            raise ValueError(f"Duplicate symbol {cap.name!r} in scope {name!r}")
        table[cap.name] = cap
    return ScopeDefinition(name=name, symbols=MappingProxyType(table))


# =============================================================================
# CAPABILITY TABLES
# =============================================================================

# Curated icon subset: 24x24 stroke glyphs (lucide geometry).
ICON_GLYPHS: Dict[str, List[Tuple[str, Dict[str, str]]]] = {
    "Home": [
        ("path", {"d": "m3 9 9-7 9 7v11a2 2 0 0 1-2 2H5a2 2 0 0 1-2-2z"}),
        ("path", {"d": "M9 22V12h6v10"}),
    ],
    "Settings": [
        ("circle", {"cx": "12", "cy": "12", "r": "3"}),
        ("path", {"d": "M12 1v4M12 19v4M4.2 4.2l2.8 2.8M17 17l2.8 2.8M1 12h4M19 12h4M4.2 19.8 7 17M17 7l2.8-2.8"}),
    ],
    "BarChart3": [
        ("path", {"d": "M3 3v18h18"}),
        ("path", {"d": "M18 17V9"}),
        ("path", {"d": "M13 17V5"}),
        ("path", {"d": "M8 17v-3"}),
    ],
    "Search": [
        ("circle", {"cx": "11", "cy": "11", "r": "8"}),
        ("path", {"d": "m21 21-4.3-4.3"}),
    ],
    "Music": [
        ("path", {"d": "M9 18V5l12-2v13"}),
        ("circle", {"cx": "6", "cy": "18", "r": "3"}),
        ("circle", {"cx": "18", "cy": "16", "r": "3"}),
    ],
    "User": [
        ("path", {"d": "M19 21v-2a4 4 0 0 0-4-4H9a4 4 0 0 0-4 4v2"}),
        ("circle", {"cx": "12", "cy": "7", "r": "4"}),
    ],
    "Plus": [
        ("path", {"d": "M12 5v14"}),
        ("path", {"d": "M5 12h14"}),
    ],
    "X": [
        ("path", {"d": "M18 6 6 18"}),
        ("path", {"d": "m6 6 12 12"}),
    ],
    "Check": [
        ("path", {"d": "M20 6 9 17l-5-5"}),
    ],
}

RECHARTS_PRIMITIVES: Tuple[str, ...] = (
    "ResponsiveContainer",
    "LineChart", "Line",
    "BarChart", "Bar",
    "AreaChart", "Area",
    "PieChart", "Pie", "Cell",
    "XAxis", "YAxis", "CartesianGrid", "Tooltip", "Legend",
)


def _runtime_capabilities() -> List[Capability]:
    return [
        Capability("React", CapabilityKind.RUNTIME, "__preview.React", "element factory"),
        Capability("Fragment", CapabilityKind.RUNTIME, "__preview.React.Fragment", "grouping element"),
    ]


def _hook_capabilities() -> List[Capability]:
    return [
        Capability("useState", CapabilityKind.STATE_HOOK, "__preview.hooks.useState"),
        Capability("useReducer", CapabilityKind.STATE_HOOK, "__preview.hooks.useReducer"),
        Capability("useEffect", CapabilityKind.LIFECYCLE_HOOK, "__preview.hooks.useEffect"),
        Capability("useLayoutEffect", CapabilityKind.LIFECYCLE_HOOK, "__preview.hooks.useEffect"),
        Capability("useRef", CapabilityKind.LIFECYCLE_HOOK, "__preview.hooks.useRef"),
        Capability("useMemo", CapabilityKind.MEMO_HOOK, "__preview.hooks.useMemo"),
        Capability("useCallback", CapabilityKind.MEMO_HOOK, "__preview.hooks.useCallback"),
    ]


def _icon_capabilities() -> List[Capability]:
    caps = []
    for name, glyph in ICON_GLYPHS.items():
        payload = json.dumps([[tag, attrs] for tag, attrs in glyph])
        caps.append(Capability(
            name,
            CapabilityKind.ICON,
            f"__preview.icon({json.dumps(name)}, {payload})",
            f"{name} icon",
        ))
    return caps


def _host_capabilities() -> List[Capability]:
    return [
        Capability("console", CapabilityKind.HOST_SERVICE, "__preview.host.console", "captured log"),
        Capability("setTimeout", CapabilityKind.HOST_SERVICE, "__preview.host.setTimeout", "never fires"),
        Capability("clearTimeout", CapabilityKind.HOST_SERVICE, "__preview.host.clearTimer"),
        Capability("setInterval", CapabilityKind.HOST_SERVICE, "__preview.host.setInterval", "never fires"),
        Capability("clearInterval", CapabilityKind.HOST_SERVICE, "__preview.host.clearTimer"),
        Capability("requestAnimationFrame", CapabilityKind.HOST_SERVICE, "__preview.host.requestAnimationFrame", "never fires"),
        Capability("cancelAnimationFrame", CapabilityKind.HOST_SERVICE, "__preview.host.clearTimer"),
    ]


def _expanded_only_capabilities() -> List[Capability]:
    caps = [
        Capability("useContext", CapabilityKind.CONTEXT_HOOK, "__preview.hooks.useContext"),
        Capability("createContext", CapabilityKind.CONTEXT_HOOK, "__preview.React.createContext"),
        Capability("THREE", CapabilityKind.GRAPHICS_3D, "__preview.libs.THREE", "Three.js (headless)"),
        Capability("d3", CapabilityKind.DATA_VIZ, "__preview.libs.d3", "D3 (headless)"),
        Capability("Recharts", CapabilityKind.CHART, "__preview.libs.Recharts", "Recharts components"),
        Capability("Tone", CapabilityKind.AUDIO, "__preview.libs.Tone", "Tone.js (silent)"),
        Capability("_", CapabilityKind.DATA_UTILITY, "__preview.libs.lodash", "Lodash subset"),
    ]
    for name in RECHARTS_PRIMITIVES:
        caps.append(Capability(name, CapabilityKind.CHART, f"__preview.libs.Recharts.{name}"))
    return caps


# =============================================================================
# REGISTRY
# =============================================================================

class ScopeRegistry:
    """Holds the named scopes and applies the selection rule."""

    def __init__(self, restricted: ScopeDefinition, expanded: ScopeDefinition):
        if not expanded.issuperset(restricted):
            missing = sorted(set(restricted.names()) - set(expanded.names()))
            raise ValueError(f"Expanded scope must contain restricted scope (missing: {missing})")
        self._scopes: Dict[str, ScopeDefinition] = {
            restricted.name: restricted,
            expanded.name: expanded,
        }
        self.restricted = restricted
        self.expanded = expanded

    def names(self) -> List[str]:
        return list(self._scopes.keys())

    def get(self, name: str) -> ScopeDefinition:
        scope = self._scopes.get(name)
        if scope is None:
            raise InputError(f"Unknown scope: {name!r} (expected one of {self.names()})")
        return scope

    def select(self, category: Category, override: Optional[str] = None) -> ScopeDefinition:
        """Category default unless an explicit override names a scope."""
        if override:
            return self.get(override.strip().lower())
        if Category(category) == Category.SIMPLE:
            return self.restricted
        return self.expanded


def build_scope_registry() -> ScopeRegistry:
    base = (
        _runtime_capabilities()
        + _hook_capabilities()
        + _icon_capabilities()
        + _host_capabilities()
    )
    restricted = _make_scope(RESTRICTED, base)
    expanded = _make_scope(EXPANDED, base + _expanded_only_capabilities())
    logger.info(
        "[scope] built scopes: %s=%d symbols, %s=%d symbols",
        RESTRICTED, len(restricted), EXPANDED, len(expanded),
    )
    return ScopeRegistry(restricted, expanded)


_registry: Optional[ScopeRegistry] = None


def get_scope_registry() -> ScopeRegistry:
    global _registry
    if _registry is None:
        _registry = build_scope_registry()
    return _registry


__all__ = [
    "RESTRICTED",
    "EXPANDED",
    "CapabilityKind",
    "HOOK_KINDS",
    "LIBRARY_KINDS",
    "Capability",
    "ScopeDefinition",
    "ScopeRegistry",
    "ICON_GLYPHS",
    "RECHARTS_PRIMITIVES",
    "build_scope_registry",
    "get_scope_registry",
]
