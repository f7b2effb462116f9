# FILE: uigen/generation/prompts.py
"""
Prompt construction for component generation.

Builds the system + user instruction pair for a classified request. Every
constraint is spelled out explicitly:
- allowed hooks and external capabilities (read off the selected scope)
- inline styles only
- no import/export statements, no markdown, no explanations
- a named function declaration as the top-level shape
- the stop condition list

These are HINTS. The model may ignore any of them; the normalizer is the
enforcement point.
"""

import logging
from typing import List

from config.generation_profiles import get_generation_profile
from uigen.preview.scope import (
    CapabilityKind,
    HOOK_KINDS,
    LIBRARY_KINDS,
    ScopeDefinition,
)

from .schemas import Category, GenerationParams, PromptBundle, Request

logger = logging.getLogger(__name__)


# =============================================================================
# TEMPLATES
# =============================================================================

SYSTEM_PROMPT_SIMPLE = """You are a world-class React developer. You create components that are:
- Functional and work perfectly
- Visually appealing with modern design
- Styled with inline style objects only
- Complete with event handlers and state management

CRITICAL REQUIREMENTS:
{constraints}"""

SYSTEM_PROMPT_COMPLEX = """You are a world-class React developer creating complete applications.

You build:
- Multi-component applications with navigation between views
- Rich interfaces with state shared between components
- Professional, polished experiences with loading states and transitions

CRITICAL REQUIREMENTS:
{constraints}"""

USER_PROMPT_SIMPLE = """Create a functional React component: "{request}"

REQUIREMENTS:
- Single focused component
{requirements}
- Focus on the core functionality requested

Return ONLY the component code, no explanations."""

USER_PROMPT_COMPLEX = """Create a complete React application: "{request}"

REQUIREMENTS:
- Multiple interconnected components
- Navigation between sections and state management between components
{requirements}
- Create a full-featured application experience

Return ONLY the complete application code, no explanations."""


def _bullets(lines: List[str]) -> str:
    return "\n".join(f"- {line}" for line in lines)


def _numbered(lines: List[str]) -> str:
    return "\n".join(f"{i}. {line}" for i, line in enumerate(lines, 1))


def _stop_description(stop_sequences) -> str:
    if not stop_sequences:
        return "Finish with the closing brace of the last component"
    joined = ", ".join(repr(s) for s in stop_sequences)
    return f"Never write these sequences (generation stops on them): {joined}"


def describe_scope(scope: ScopeDefinition) -> List[str]:
    """Human-readable capability lines for a scope."""
    lines = [f"Available hooks: {', '.join(scope.names_of_kind(*HOOK_KINDS))}"]

    icons = scope.names_of_kind(CapabilityKind.ICON)
    if icons:
        lines.append(f"Available icons (use as <Name size={{20}} />): {', '.join(icons)}")

    libraries = []
    for kind in LIBRARY_KINDS:
        for name in scope.names_of_kind(kind):
            cap = scope.get(name)
            # Recharts primitives are listed once through the namespace entry
            if kind == CapabilityKind.CHART and name != "Recharts":
                continue
            libraries.append(f"{name} ({cap.description})" if cap.description else name)
    if libraries:
        charts = [n for n in scope.names_of_kind(CapabilityKind.CHART) if n != "Recharts"]
        lines.append(f"Available libraries: {', '.join(libraries)}")
        if charts:
            lines.append(f"Recharts components in scope: {', '.join(charts)}")
    else:
        lines.append("No external libraries are available")
    return lines


def build_prompts(request: Request, scope: ScopeDefinition) -> PromptBundle:
    """Assemble system/user instructions and params for a classified request."""
    profile = get_generation_profile(request.category.value)
    params = GenerationParams(
        model=profile.model,
        temperature=profile.temperature,
        max_output_units=profile.max_output_units,
        stop_sequences=tuple(profile.stop_sequences),
    )

    is_simple = request.category == Category.SIMPLE
    shape = (
        "Use a function declaration: function ComponentName() { ... }"
        if is_simple
        else "Use function declarations for all components and declare the root component FIRST: function App() { ... }"
    )

    constraints = [
        "Return ONLY React function component code",
        "NO explanations, NO markdown, NO backticks",
        shape,
        "NO import or export statements (everything available is already in scope)",
        "Use ONLY inline styles (style={{}} objects), no CSS classes",
        "Do NOT call render() or ReactDOM yourself",
        _stop_description(params.stop_sequences),
    ]
    requirements = [
        shape,
        "NO import/export statements",
        "Inline styles only (style={{}} objects)",
        *describe_scope(scope),
        "Use only the hooks, icons and libraries listed above",
    ]

    system_template = SYSTEM_PROMPT_SIMPLE if is_simple else SYSTEM_PROMPT_COMPLEX
    user_template = USER_PROMPT_SIMPLE if is_simple else USER_PROMPT_COMPLEX

    bundle = PromptBundle(
        system_prompt=system_template.format(constraints=_numbered(constraints)),
        user_prompt=user_template.format(request=request.text.strip(), requirements=_bullets(requirements)),
        params=params,
        category=request.category,
        scope_name=scope.name,
    )
    logger.debug(
        "[prompts] built %s prompt (model=%s, scope=%s)",
        request.category.value, params.model, scope.name,
    )
    return bundle


__all__ = [
    "SYSTEM_PROMPT_SIMPLE",
    "SYSTEM_PROMPT_COMPLEX",
    "describe_scope",
    "build_prompts",
]
