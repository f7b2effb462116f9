# FILE: uigen/__init__.py
"""
uigen: natural-language request → previewable JSX unit.

Subpackages:
- uigen.generation: classify, prompt, gateway, normalize, session pipeline
- uigen.preview: capability scopes, sandbox renderer, preview routes
- uigen.projects: saved projects (SQLite)
"""

__version__ = "0.4.0"
