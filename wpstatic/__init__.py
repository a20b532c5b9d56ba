"""Static build helpers for the migrated WordPress blog."""

from .common import excerpt
from .entities import decode_entities
from .rewrite import RewriteStats, rewrite_content

__all__ = ["decode_entities", "excerpt", "rewrite_content", "RewriteStats"]
