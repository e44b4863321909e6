"""
Folder hierarchy engine: cycle detection and descendant collection.

Folders reference their parent by id only. Everything here works on that flat
relation and derives whatever structure it needs on demand.
"""
from collections import defaultdict
from typing import Callable, Dict, Iterable, List, Optional, Set, Tuple

FolderNode = Tuple[int, Optional[int]]


def detects_cycle(
    folder_id: int,
    candidate_parent_id: int,
    get_parent_id: Callable[[int], Optional[int]],
) -> bool:
    """
    Check whether making `candidate_parent_id` the parent of `folder_id` would
    make the folder its own ancestor.

    Walks upward from the candidate parent until a root is reached. A chain
    that revisits a node is already cyclic in storage; it is reported as a
    cycle so no further folder gets attached to it.

    Args:
        folder_id: Folder being re-parented
        candidate_parent_id: Proposed new parent
        get_parent_id: Returns the stored parent id of a folder (None for roots
            and for folders that no longer exist)

    Returns:
        True if the re-parent must be rejected
    """
    visited: Set[int] = set()
    current_id: Optional[int] = candidate_parent_id
    while current_id is not None:
        if current_id == folder_id or current_id in visited:
            return True
        visited.add(current_id)
        current_id = get_parent_id(current_id)
    return False


def build_children_map(nodes: Iterable[FolderNode]) -> Dict[int, List[int]]:
    children: Dict[int, List[int]] = defaultdict(list)
    for node_id, parent_id in nodes:
        if parent_id is not None:
            children[parent_id].append(node_id)
    return children


def collect_descendants(root_id: int, nodes: Iterable[FolderNode]) -> List[int]:
    """
    Return `root_id` and the ids of every folder below it, in no particular order.

    Uses an explicit stack so deep trees never hit the recursion limit.
    """
    children = build_children_map(nodes)
    seen: Set[int] = {root_id}
    result: List[int] = []
    stack = [root_id]
    while stack:
        node_id = stack.pop()
        result.append(node_id)
        for child_id in children.get(node_id, ()):
            if child_id not in seen:
                seen.add(child_id)
                stack.append(child_id)
    return result
