"""
Client-side tree built from the flat folder list the API returns.
"""
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Set


@dataclass(eq=False)
class FolderNode:
    id: int
    name: str
    parent_id: Optional[int] = None
    children: List["FolderNode"] = field(default_factory=list)


def _sort_key(node: FolderNode):
    return (node.name.lower(), node.id)


def _mark_subtree(start: FolderNode, reached: Set[int]) -> None:
    stack = [start]
    while stack:
        node = stack.pop()
        if node.id in reached:
            continue
        reached.add(node.id)
        stack.extend(node.children)


def _lowest_in_loop(node: FolderNode, lookup: Dict[int, FolderNode]) -> FolderNode:
    # Every unreached node has its parent in `lookup`, so walking up must
    # eventually revisit a node that sits on the loop.
    seen: Set[int] = set()
    current = node
    while current.id not in seen:
        seen.add(current.id)
        current = lookup[current.parent_id]
    lowest = current
    member = lookup[current.parent_id]
    while member is not current:
        if member.id < lowest.id:
            lowest = member
        member = lookup[member.parent_id]
    return lowest


def build_tree(folders: Iterable[dict]) -> List[FolderNode]:
    """
    Group folders by `parentId` into a sorted forest.

    A folder whose parent is not in the list becomes a root. Folders caught in
    a parent loop are cut loose at the lowest id in the loop so each folder
    appears exactly once.
    """
    lookup: Dict[int, FolderNode] = {}
    for folder in folders:
        lookup[folder["id"]] = FolderNode(
            id=folder["id"],
            name=folder["name"],
            parent_id=folder.get("parentId"),
        )

    roots: List[FolderNode] = []
    for node in lookup.values():
        parent = lookup.get(node.parent_id) if node.parent_id is not None else None
        if parent is None or parent is node:
            roots.append(node)
        else:
            parent.children.append(node)

    reached: Set[int] = set()
    for root in roots:
        _mark_subtree(root, reached)
    for node in sorted(lookup.values(), key=lambda n: n.id):
        if node.id in reached:
            continue
        cut = _lowest_in_loop(node, lookup)
        lookup[cut.parent_id].children.remove(cut)
        roots.append(cut)
        _mark_subtree(cut, reached)

    stack = [roots]
    while stack:
        siblings = stack.pop()
        siblings.sort(key=_sort_key)
        stack.extend(child.children for child in siblings if child.children)
    return roots


def breadcrumbs(folder_id: Optional[int], folders_by_id: Dict[int, dict]) -> List[dict]:
    """Return `Home` followed by the folders from the root down to `folder_id`."""
    chain: List[dict] = []
    visited: Set[int] = set()
    current = folders_by_id.get(folder_id) if folder_id is not None else None
    while current is not None and current["id"] not in visited:
        visited.add(current["id"])
        chain.append({"id": current["id"], "name": current["name"]})
        parent_id = current.get("parentId")
        current = folders_by_id.get(parent_id) if parent_id is not None else None
    chain.reverse()
    return [{"id": None, "name": "Home"}] + chain


async def load_folder_path(api, folder_id: int) -> List[dict]:
    """
    Fetch a folder and its ancestors one request at a time.

    The server is not trusted to be acyclic: the walk stops at the first id it
    has already seen.

    Returns:
        Folders from `folder_id` up to its root
    """
    chain: List[dict] = []
    visited: Set[int] = set()
    current_id: Optional[int] = folder_id
    while current_id is not None and current_id not in visited:
        visited.add(current_id)
        response = await api.fetch_folder(current_id)
        folder = response["folder"]
        chain.append(folder)
        current_id = folder.get("parentId")
    return chain
