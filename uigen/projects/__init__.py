# FILE: uigen/projects/__init__.py
