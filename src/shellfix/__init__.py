"""
shellfix — package root

File: src/shellfix/__init__.py

Purpose
- Package root for the shell command corrector: inspects a failed command and
  its output, runs it through a registry of correction rules, and returns a
  ranked, deduplicated list of candidate fixes.

What should be included in this file
- Version export and the minimal public API surface.
- Import boundary rules: avoid importing rules, shells, or the UI at import time.

Functional requirements
- Must not have side effects at import time (no config loading, no logging init).
"""

from __future__ import annotations

__version__ = "0.1.0"

__all__ = ["__version__"]
