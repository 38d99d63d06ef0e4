"""Helpers for the colon-delimited permission path encoding."""

from .path_codec import (
    ROOT_PREFIX,
    parent_name,
    top_level_name,
    strip_root_prefix,
    escape_like,
    build_child_wildcard,
    is_descendant,
    split_chain,
    join_chain,
    extend_chain,
    last_ancestor_id,
    ancestor_tree,
)

__all__ = [
    "ROOT_PREFIX",
    "parent_name",
    "top_level_name",
    "strip_root_prefix",
    "escape_like",
    "build_child_wildcard",
    "is_descendant",
    "split_chain",
    "join_chain",
    "extend_chain",
    "last_ancestor_id",
    "ancestor_tree",
]
