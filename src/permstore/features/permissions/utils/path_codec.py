"""Colon-delimited encoding of permission names and parent chains.

Permission names are paths such as ``app:feature:action``. A parent chain
is the list of ancestor ids of a stored permission, most distant first and
immediate parent last, encoded as ``"3:17:42"``. An empty chain means the
parent is the implicit root node.
"""

from typing import Any, Dict, List, Optional

from ....config.constants import ROOT, ROOT_NAME, PATH_SEPARATOR


ROOT_PREFIX = f"{ROOT_NAME}{PATH_SEPARATOR}"


def parent_name(name: str) -> Optional[str]:
    """Return the name of the immediate parent, or None for top-level names."""
    pos = name.rfind(PATH_SEPARATOR)
    if pos == -1:
        return None
    return name[:pos]


def top_level_name(name: str) -> str:
    """Return the first segment of a name (the owning application)."""
    return name.split(PATH_SEPARATOR, 1)[0]


def strip_root_prefix(name: str) -> str:
    """Remove a leading ``ROOT:`` segment; root itself is never stored."""
    if name.startswith(ROOT_PREFIX):
        return name[len(ROOT_PREFIX):]
    return name


def escape_like(name: str) -> str:
    """Escape LIKE metacharacters so ``name`` matches only itself."""
    return name.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def build_child_wildcard(name: str) -> str:
    """SQL LIKE pattern matching every descendant of ``name``."""
    return f"{name}{PATH_SEPARATOR}%"


def is_descendant(name: str, ancestor: str) -> bool:
    """Whether ``name`` sits below ``ancestor`` in the hierarchy."""
    return name.startswith(f"{ancestor}{PATH_SEPARATOR}")


def split_chain(chain: Optional[str]) -> List[int]:
    """Decode a parent chain into ancestor ids, most distant first.

    Empty segments are skipped so chains written with a leading separator
    (``":5:9"``) decode the same as ``"5:9"``.
    """
    if not chain:
        return []
    return [int(part) for part in chain.split(PATH_SEPARATOR) if part]


def join_chain(ids: List[int]) -> str:
    """Encode ancestor ids as a parent chain."""
    return PATH_SEPARATOR.join(str(i) for i in ids)


def extend_chain(chain: Optional[str], parent_id: int) -> str:
    """Chain of a child whose immediate parent has ``chain`` and ``parent_id``."""
    return join_chain(split_chain(chain) + [parent_id])


def last_ancestor_id(chain: Optional[str]) -> int:
    """Id of the immediate parent encoded in ``chain``, or ROOT."""
    ids = split_chain(chain)
    if not ids:
        return ROOT
    return ids[-1]


def ancestor_tree(chain: Optional[str]) -> Dict[int, Any]:
    """Unfold a parent chain into nested ancestor maps.

    The immediate parent is the outermost key, each value holds the next
    ancestor up, and the innermost map is ``{ROOT: True}``::

        >>> ancestor_tree("1:5:9")
        {9: {5: {1: {-1: True}}}}

    The chain is folded iteratively, so hierarchy depth never translates
    into call-stack depth.
    """
    tree: Dict[int, Any] = {ROOT: True}
    for ancestor_id in split_chain(chain):
        tree = {ancestor_id: tree}
    return tree
