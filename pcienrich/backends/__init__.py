"""
Internal backends package.

Only the text database builder lives here; `pcienrich.api` wraps it in the
lookup service.
"""

from __future__ import annotations

from .textdb import build, build_from_path  # re-export for internal use

__all__ = ["build", "build_from_path"]
