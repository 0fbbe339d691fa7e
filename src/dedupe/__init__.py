"""Lockfile version deduplication: extract, resolve, rewrite."""

from .extractor import extract_packages
from .resolver import Resolution, find_changed_instances, resolve
from .rewriter import RewriteError, rewrite
from .service import fix_duplicates, list_duplicates

__all__ = [
    "extract_packages",
    "resolve",
    "Resolution",
    "find_changed_instances",
    "rewrite",
    "RewriteError",
    "list_duplicates",
    "fix_duplicates",
]
