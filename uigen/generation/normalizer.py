# FILE: uigen/generation/normalizer.py
"""
Code normalization: raw model text → one renderable unit.

The model is asked for a bare function component but routinely returns
markdown fences, import lines, chatty preambles, bare JSX, or nothing at all.
This module turns any text into a unit the preview renderer can evaluate.
Nothing here executes the text.

STAGES (in order, each a pure str → str function that never raises):
1. strip_code_fences      - drop ``` delimiters and their language tag
2. strip_module_syntax    - drop import/require lines, createRoot setup, export
                            lists and qualifiers
3. strip_leading_prose    - start at the first line that opens a declaration
4. find_entry_identifier  - first function name, else const/let/var, else class,
                            else FALLBACK_ENTRY
5. wrap_bare_markup       - no declaration but JSX present → wrap it in
                            function GeneratedComponent() { return (...); }
6. ensure_render_call     - exactly one `render(<Entry />);`, appended last
7. fallback_unit          - nothing renderable → FALLBACK_UNIT

CALLING CONVENTION:
The unit hands its root element to the host-provided render() helper:
    render(<Entry />);
The renderer supplies render() and refuses units that call it zero or
several times.

HEURISTICS:
Declaration and markup detection are line-anchored regular expressions, not a
parse. They are best-effort: anything they get wrong surfaces as a render
error in the preview, never as an exception here. When they find nothing
usable, the fixed fallback unit is used.

Normalization is idempotent: every stage checks whether its condition already
holds before touching the text, so normalize(normalize(x)) == normalize(x).
"""

import logging
import os
import re
from typing import List, Optional, Tuple

from .schemas import NormalizedUnit

logger = logging.getLogger(__name__)

# ============================================================================
# NORMALIZER DEBUG MODE
# ============================================================================
NORMALIZER_DEBUG = os.getenv("UIGEN_NORMALIZER_DEBUG", "0") == "1"


def _debug_log(msg: str):
    """Print debug message if NORMALIZER_DEBUG is enabled."""
    if NORMALIZER_DEBUG:
        print(f"[normalizer-debug] {msg}")


FALLBACK_ENTRY = "GeneratedComponent"
FALLBACK_ERROR_ENTRY = "NormalizationError"

FALLBACK_UNIT = """function NormalizationError() {
  return (
    <div style={{ padding: 16, borderRadius: 8, border: '1px solid #f5c2c7', background: '#f8d7da', color: '#842029', fontFamily: 'sans-serif' }}>
      <strong>Preview unavailable</strong>
      <p style={{ margin: '8px 0 0' }}>The generated output did not contain a component that can be rendered. Try rephrasing the request.</p>
    </div>
  );
}

render(<NormalizationError />);"""


# =============================================================================
# PATTERNS
# =============================================================================

# ```jsx / ```tsx / ``` (tag only when it runs to end of line)
_FENCE_WITH_TAG_RE = re.compile(r"```[ \t]*[\w+#.-]*[ \t]*(?:\r?\n|$)")
_FENCE_RE = re.compile(r"```")

# Statement is removed up to its semicolon; code sharing the line survives.
_IMPORT_RE = re.compile(
    r"^[ \t]*import\s+(?:type\s+)?(?:[\w*{}\s,$]+?\s+from\s+)?['\"][^'\"\n]+['\"][ \t]*(?:;[ \t]*)?(?:\r?\n)?",
    re.MULTILINE,
)
_REQUIRE_RE = re.compile(
    r"^[ \t]*(?:const|let|var)\s+[\w${}\s,:]+?=\s*require\(\s*['\"][^'\"\n]+['\"]\s*\)[ \t]*(?:;[ \t]*)?(?:\r?\n)?",
    re.MULTILINE,
)
# const root = ReactDOM.createRoot(...) - the host mounts the unit itself
_MOUNT_SETUP_RE = re.compile(
    r"^[ \t]*(?:const|let|var)[ \t]+[A-Za-z_$][\w$]*[ \t]*=[ \t]*(?:ReactDOM[ \t]*\.[ \t]*)?createRoot[ \t]*\(.*(?:\r?\n|$)",
    re.MULTILINE,
)
_EXPORT_LIST_RE = re.compile(
    r"^[ \t]*export[ \t]*\{[^}]*\}(?:[ \t]*from[ \t]*['\"][^'\"\n]+['\"])?[ \t]*;?[ \t]*(?:\r?\n|$)",
    re.MULTILINE,
)
_EXPORT_DEFAULT_NAME_RE = re.compile(
    r"^[ \t]*export[ \t]+default[ \t]+[A-Za-z_$][\w$]*[ \t]*;?[ \t]*(?:\r?\n|$)",
    re.MULTILINE,
)
_EXPORT_QUALIFIER_RE = re.compile(r"^([ \t]*)(?:export[ \t]+(?:default[ \t]+)?)+", re.MULTILINE)

_DECLARATION_LINE_RE = re.compile(
    r"^[ \t]*(?:(?:async[ \t]+)?function\b|class[ \t]+[A-Za-z_$]|(?:const|let|var)[ \t]+[A-Za-z_$\[{])"
)

_IDENT = r"([A-Za-z_$][\w$]*)"
_TOP_FUNCTION_RE = re.compile(r"^(?:async[ \t]+)?function[ \t]*\*?[ \t]*" + _IDENT + r"\s*\(", re.MULTILINE)
_TOP_VARIABLE_RE = re.compile(r"^(?:const|let|var)[ \t]+" + _IDENT + r"[ \t]*=", re.MULTILINE)
_TOP_CLASS_RE = re.compile(r"^class[ \t]+" + _IDENT + r"\b", re.MULTILINE)
_ANY_FUNCTION_RE = re.compile(r"\bfunction[ \t]*\*?[ \t]*" + _IDENT + r"\s*\(")
_ANY_VARIABLE_RE = re.compile(r"\b(?:const|let|var)[ \t]+" + _IDENT + r"[ \t]*=")

# Opening (or self-closing) tag: <div>, <Button primary />, <svg:path ...>
_MARKUP_RE = re.compile(r"<[A-Za-z][\w.:-]*(?:\s[^<>]*)?/?>")

# Line that starts a render invocation: render(...), ReactDOM.render(...),
# root.render(...), ReactDOM.createRoot(el).render(...). A class method
# definition `render() {` is not an invocation.
_RENDER_LINE_RE = re.compile(
    r"^[ \t]*(?:ReactDOM[ \t]*\.[ \t]*|root[ \t]*\.[ \t]*"
    r"|(?:ReactDOM[ \t]*\.[ \t]*)?createRoot[ \t]*\(.*\)[ \t]*\.[ \t]*)?"
    r"render[ \t]*\((?![ \t]*\)[ \t]*\{)"
)
_BARE_RENDER_RE = re.compile(r"^[ \t]*render[ \t]*\(")

# Same invocations sharing a line with earlier code (`...} ReactDOM.render(`).
_INLINE_RENDER_RE = re.compile(
    r"([;}])[ \t]*(?=(?:ReactDOM[ \t]*\.[ \t]*|root[ \t]*\.[ \t]*"
    r"|(?:ReactDOM[ \t]*\.[ \t]*)?createRoot[ \t]*\([^\n]*?\)[ \t]*\.[ \t]*)?"
    r"render[ \t]*\((?![ \t]*\)[ \t]*\{))"
)
# `...; const root = createRoot(el);` sharing a line with earlier code.
_INLINE_MOUNT_SETUP_RE = re.compile(
    r"([;}])[ \t]*(?=(?:const|let|var)[ \t]+[A-Za-z_$][\w$]*[ \t]*=[ \t]*(?:ReactDOM[ \t]*\.[ \t]*)?createRoot[ \t]*\()"
)


def render_call(entry: str) -> str:
    """The canonical trailing invocation for an entry identifier."""
    return f"render(<{entry} />);"


# =============================================================================
# STAGE 1: FENCES
# =============================================================================

def strip_code_fences(text: str) -> str:
    if "```" not in text:
        return text
    text = _FENCE_WITH_TAG_RE.sub("", text)
    return _FENCE_RE.sub("", text)


# =============================================================================
# STAGE 2: MODULE SYNTAX
# =============================================================================

def strip_module_syntax(text: str) -> str:
    if not any(word in text for word in ("import", "export", "require", "createRoot")):
        return text
    # Removing one statement can bring the next one on that line to a line start.
    previous = None
    while previous != text:
        previous = text
        text = _IMPORT_RE.sub("", text)
        text = _REQUIRE_RE.sub("", text)
        text = _INLINE_MOUNT_SETUP_RE.sub(r"\1\n", text)
        text = _MOUNT_SETUP_RE.sub("", text)
        text = _EXPORT_LIST_RE.sub("", text)
        text = _EXPORT_DEFAULT_NAME_RE.sub("", text)
        text = _EXPORT_QUALIFIER_RE.sub(r"\1", text)
    return text


# =============================================================================
# STAGE 3: LEADING PROSE
# =============================================================================

def strip_leading_prose(text: str) -> str:
    """Drop lines before the first declaration line.

    No declaration line at all → text is returned untouched.
    """
    lines = text.splitlines()
    for index, line in enumerate(lines):
        if _DECLARATION_LINE_RE.match(line):
            if index == 0:
                return text
            _debug_log(f"dropping {index} leading line(s)")
            return "\n".join(lines[index:])
    return text


# =============================================================================
# STAGE 4: ENTRY IDENTIFIER
# =============================================================================

def has_declaration(text: str) -> bool:
    return bool(
        _ANY_FUNCTION_RE.search(text)
        or _ANY_VARIABLE_RE.search(text)
        or _TOP_CLASS_RE.search(text)
    )


def find_entry_identifier(text: str) -> str:
    """Name of the unit to render.

    First function declaration, else first const/let/var binding, else
    FALLBACK_ENTRY. Unindented (top-level) declarations are preferred over
    nested ones so a handler inside a component never wins; a top-level
    class component counts as a declaration too.
    """
    for pattern in (_TOP_FUNCTION_RE, _TOP_VARIABLE_RE, _TOP_CLASS_RE, _ANY_FUNCTION_RE, _ANY_VARIABLE_RE):
        match = pattern.search(text)
        if match:
            return match.group(1)
    return FALLBACK_ENTRY


# =============================================================================
# STAGE 5: BARE MARKUP
# =============================================================================

def has_markup(text: str) -> bool:
    return bool(_MARKUP_RE.search(text))


def wrap_bare_markup(text: str) -> str:
    """Wrap declaration-less JSX in a zero-argument component."""
    if has_declaration(text):
        return text
    match = _MARKUP_RE.search(text)
    if not match:
        return text
    end = text.rfind(">")
    markup = text[match.start():end + 1]
    body = "\n".join(f"    {line}" if line.strip() else "" for line in markup.splitlines())
    return f"function {FALLBACK_ENTRY}() {{\n  return (\n{body}\n  );\n}}"


# =============================================================================
# STAGE 6: RENDER INVOCATION
# =============================================================================

def find_render_lines(text: str) -> List[int]:
    return [i for i, line in enumerate(text.splitlines()) if _RENDER_LINE_RE.match(line)]


def _invokes(line: str, entry: str) -> bool:
    return bool(_BARE_RENDER_RE.match(line)) and re.search(
        r"<[ \t]*" + re.escape(entry) + r"(?![\w$])", line
    ) is not None


def _remove_render_calls(lines: List[str]) -> List[str]:
    """Drop render invocations, following unbalanced parens onto later lines."""
    kept: List[str] = []
    depth = 0
    for line in lines:
        if depth > 0:
            depth += line.count("(") - line.count(")")
            continue
        if _RENDER_LINE_RE.match(line):
            depth = line.count("(") - line.count(")")
            continue
        kept.append(line)
    return kept


def ensure_render_call(text: str, entry: str) -> str:
    """Guarantee exactly one render invocation of `entry`."""
    text = _INLINE_RENDER_RE.sub(r"\1\n", text)
    lines = text.splitlines()
    render_lines = find_render_lines(text)
    if len(render_lines) == 1 and _invokes(lines[render_lines[0]], entry):
        return text
    if render_lines:
        _debug_log(f"replacing {len(render_lines)} render invocation(s)")
        lines = _remove_render_calls(lines)
    body = "\n".join(lines).rstrip()
    call = render_call(entry)
    return f"{body}\n\n{call}" if body else call


# =============================================================================
# PIPELINE
# =============================================================================

def _run_stages(text: str) -> Tuple[str, str, Tuple[str, ...]]:
    applied: List[str] = []

    def _stage(name: str, before: str, after: str) -> str:
        if after != before:
            applied.append(name)
            _debug_log(f"{name}: {len(before)} -> {len(after)} chars")
        return after

    text = _stage("strip_code_fences", text, strip_code_fences(text))
    text = _stage("strip_module_syntax", text, strip_module_syntax(text))
    text = text.strip()
    text = _stage("strip_leading_prose", text, strip_leading_prose(text))
    # The first kept line may be indented; entry detection must see the final text.
    text = text.strip()

    entry = find_entry_identifier(text)

    if not has_declaration(text):
        if not has_markup(text):
            applied.append("fallback_unit")
            return FALLBACK_UNIT, FALLBACK_ERROR_ENTRY, tuple(applied)
        text = _stage("wrap_bare_markup", text, wrap_bare_markup(text))

    text = _stage("ensure_render_call", text, ensure_render_call(text, entry))
    return text.strip(), entry, tuple(applied)


def normalize_output(raw: Optional[str]) -> NormalizedUnit:
    """Normalize untrusted model text. Never raises; never returns an empty unit."""
    if raw is None:
        raw = ""
    elif not isinstance(raw, str):
        raw = str(raw)

    try:
        code, entry, applied = _run_stages(raw)
    except Exception as e:
        logger.exception("[normalizer] stage failure, using fallback unit: %s", e)
        code, entry, applied = FALLBACK_UNIT, FALLBACK_ERROR_ENTRY, ("fallback_unit",)

    if "fallback_unit" in applied:
        logger.warning("[normalizer] nothing renderable in %d chars of model output", len(raw))
    else:
        logger.debug("[normalizer] entry=%s stages=%s", entry, ",".join(applied) or "none")

    return NormalizedUnit(code=code, entry=entry, stages_applied=applied)


def normalize(raw: Optional[str]) -> str:
    """Normalized code only."""
    return normalize_output(raw).code


__all__ = [
    "FALLBACK_ENTRY",
    "FALLBACK_ERROR_ENTRY",
    "FALLBACK_UNIT",
    "render_call",
    "strip_code_fences",
    "strip_module_syntax",
    "strip_leading_prose",
    "has_declaration",
    "has_markup",
    "find_entry_identifier",
    "wrap_bare_markup",
    "find_render_lines",
    "ensure_render_call",
    "normalize_output",
    "normalize",
]
