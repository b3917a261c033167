"""Hierarchical path-scoped permissions and safe JSON sub-documents."""
from __future__ import annotations

__version__ = "0.1.0"
