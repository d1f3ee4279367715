"""Small helpers shared across the relay packages."""

from __future__ import annotations

from .slug import is_repo_slug, parse_repo_slug

__all__ = ["is_repo_slug", "parse_repo_slug"]
