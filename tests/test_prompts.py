# FILE: tests/test_prompts.py
"""
Tests for uigen/generation/prompts.py
Prompt construction: constraints, scope description, generation params.
"""

import sys
from pathlib import Path

_project_root = Path(__file__).parent.parent
if str(_project_root) not in sys.path:
    sys.path.insert(0, str(_project_root))

import pytest

from config.generation_profiles import GENERATION_PROFILES, STOP_SEQUENCES
from uigen.generation.classifier import build_request
from uigen.generation.prompts import build_prompts, describe_scope
from uigen.generation.schemas import Category


@pytest.fixture
def simple_bundle(restricted):
    return build_prompts(build_request("Create a button with hover effects"), restricted)


@pytest.fixture
def complex_bundle(expanded):
    return build_prompts(build_request("Build a sales dashboard with charts"), expanded)


class TestConstraints:
    """Every instruction spells out the same hard constraints."""

    def test_forbids_module_syntax(self, simple_bundle, complex_bundle):
        for bundle in (simple_bundle, complex_bundle):
            assert "NO import or export statements" in bundle.system_prompt
            assert "NO import/export statements" in bundle.user_prompt

    def test_forbids_markdown_and_explanations(self, simple_bundle):
        assert "NO explanations, NO markdown, NO backticks" in simple_bundle.system_prompt

    def test_inline_styles_only(self, simple_bundle):
        assert "inline styles" in simple_bundle.system_prompt.lower()

    def test_function_declaration_shape(self, simple_bundle, complex_bundle):
        assert "function ComponentName()" in simple_bundle.system_prompt
        assert "declare the root component FIRST" in complex_bundle.system_prompt

    def test_stop_sequences_described(self, simple_bundle):
        for stop in STOP_SEQUENCES:
            assert repr(stop) in simple_bundle.system_prompt

    def test_request_text_quoted(self, simple_bundle):
        assert '"Create a button with hover effects"' in simple_bundle.user_prompt


class TestScopeDescription:
    """Allowed capabilities come from the selected scope."""

    def test_restricted_lists_hooks_and_icons(self, restricted):
        lines = describe_scope(restricted)
        joined = "\n".join(lines)
        assert "useState" in joined
        assert "Home" in joined
        assert "No external libraries are available" in joined
        assert "useContext" not in joined

    def test_expanded_lists_libraries(self, expanded):
        joined = "\n".join(describe_scope(expanded))
        for name in ("THREE", "d3", "Recharts", "Tone", "_"):
            assert name in joined
        assert "Recharts components in scope:" in joined
        assert "LineChart" in joined

    def test_user_prompt_carries_scope(self, simple_bundle, complex_bundle):
        assert "d3" not in simple_bundle.user_prompt
        assert "d3" in complex_bundle.user_prompt


class TestParams:
    """Per-category generation params."""

    def test_simple_profile(self, simple_bundle):
        profile = GENERATION_PROFILES["simple"]
        assert simple_bundle.category == Category.SIMPLE
        assert simple_bundle.scope_name == "restricted"
        assert simple_bundle.params.model == profile.model
        assert simple_bundle.params.temperature == 0.1
        assert simple_bundle.params.max_output_units == 1500

    def test_complex_profile(self, complex_bundle):
        assert complex_bundle.category == Category.COMPLEX
        assert complex_bundle.scope_name == "expanded"
        assert complex_bundle.params.temperature == 0.3
        assert complex_bundle.params.max_output_units == 4000

    def test_stop_sequences_returned(self, simple_bundle):
        assert simple_bundle.params.stop_sequences == STOP_SEQUENCES

    def test_complex_asks_for_application(self, complex_bundle):
        assert "complete React application" in complex_bundle.user_prompt
        assert "Navigation" in complex_bundle.user_prompt


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
