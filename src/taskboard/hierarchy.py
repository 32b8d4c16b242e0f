"""Parent/child chain resolution.

Given one item, climbs ``parent_id`` links to the top-level ancestor and
rebuilds the full descendant tree from there. Parents are always of the
same type as their children (an activity's parent is an activity, an
action's parent is an action).

The source data is meant to be a forest, but nothing upstream enforces
it, so both the climb and the descent track visited keys.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Iterable, Iterator

from taskboard.errors import CyclicHierarchy
from taskboard.hooks import ItemIndex
from taskboard.status.models import ItemKey, WorkItem

logger = logging.getLogger(__name__)

DEFAULT_MAX_DEPTH = 256


@dataclass
class ChainNode:
    item: WorkItem
    children: list[ChainNode] = field(default_factory=list)
    is_target: bool = False

    @property
    def key(self) -> ItemKey:
        return self.item.key

    def walk(self) -> Iterator[ChainNode]:
        """Yield this node and its descendants, depth first."""
        yield self
        for child in self.children:
            yield from child.walk()

    def find(self, key: ItemKey | tuple) -> ChainNode | None:
        wanted = ItemKey(*key)
        return next((node for node in self.walk() if node.key == wanted), None)

    def depth(self) -> int:
        if not self.children:
            return 1
        return 1 + max(child.depth() for child in self.children)


def _start_sort_key(node: ChainNode) -> tuple[bool, date]:
    # Undated children go last.
    start = node.item.start_date
    return (start is None, start or date.max)


def _index(items: Iterable[WorkItem]) -> dict[ItemKey, WorkItem]:
    return {item.key: item for item in items}


def find_root(
    item: WorkItem,
    index: dict[ItemKey, WorkItem],
    *,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> WorkItem:
    """Climb parent links to the top-level ancestor.

    Stops at an item without a parent or whose parent is not in the
    index.

    Raises:
        CyclicHierarchy: If an item is revisited or the climb exceeds
            ``max_depth`` steps.
    """
    current = item
    visited = {current.key}
    steps = 0
    while current.parent_id is not None:
        parent = index.get(ItemKey(current.type, current.parent_id))
        if parent is None:
            break
        if parent.key in visited:
            raise CyclicHierarchy(f"Parent chain of {item.key} loops back to {parent.key}")
        steps += 1
        if steps > max_depth:
            raise CyclicHierarchy(f"Parent chain of {item.key} exceeds {max_depth} levels")
        visited.add(parent.key)
        current = parent
    return current


def build_tree(
    root: WorkItem,
    items: Iterable[WorkItem],
    target: ItemKey,
) -> ChainNode:
    """Build the descendant tree under ``root``, children by start date."""
    by_parent: dict[ItemKey, list[WorkItem]] = {}
    for candidate in items:
        if candidate.parent_id is not None:
            by_parent.setdefault(ItemKey(candidate.type, candidate.parent_id), []).append(candidate)

    visited: set[ItemKey] = set()

    def _build(item: WorkItem) -> ChainNode:
        visited.add(item.key)
        node = ChainNode(item=item, is_target=item.key == target)
        for child in by_parent.get(item.key, []):
            if child.key in visited:
                logger.warning("Skipping %s: already placed in the tree of %s", child.key, root.key)
                continue
            node.children.append(_build(child))
        node.children.sort(key=_start_sort_key)
        return node

    return _build(root)


def resolve_chain(
    item: WorkItem,
    items: Iterable[WorkItem],
    *,
    max_depth: int | None = None,
) -> ChainNode:
    """Return the whole tree ``item`` belongs to, rooted at its top ancestor.

    ``items`` is the flat collection of same-kind items; the queried item
    is added to the index if missing. The returned tree contains
    ``item`` with ``is_target`` set.

    Raises:
        CyclicHierarchy: If the parent chain above ``item`` loops.
    """
    pool = [i for i in items if i.type == item.type]
    index = _index(pool)
    index.setdefault(item.key, item)
    root = find_root(
        item, index, max_depth=DEFAULT_MAX_DEPTH if max_depth is None else max_depth
    )
    return build_tree(root, index.values(), item.key)


def chain_for(
    item: WorkItem,
    index: ItemIndex,
    *,
    max_depth: int | None = None,
) -> ChainNode:
    """Resolve ``item``'s chain from the collaborator's item index.

    A cyclic parent chain is logged and answered with the partial tree
    rooted at ``item`` itself.
    """
    items = index.fetch_item_index(item.type)
    try:
        return resolve_chain(item, items, max_depth=max_depth)
    except CyclicHierarchy as exc:
        logger.warning("Hierarchy for %s is cyclic, showing its subtree only: %s", item.key, exc)
        pool = _index(i for i in items if i.type == item.type)
        pool.setdefault(item.key, item)
        return build_tree(item, pool.values(), item.key)
