"""Category hierarchy: forest construction and parent-assignment checks.

Both functions work on plain records and never touch the database, so the
same code validates writes and renders the tree endpoint.
"""

from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Mapping, Optional

from core.exceptions import ConflictingState, CycleDetected


def _get(record: Any, name: str, default: Any = None) -> Any:
    if isinstance(record, Mapping):
        return record.get(name, default)
    return getattr(record, name, default)


def _sort_key(record: Any) -> tuple:
    return (_get(record, "sort_order") or 0, _get(record, "name") or "")


@dataclass
class CategoryNode:
    """A category record with its nested children, siblings already sorted."""

    id: Any
    record: Any
    children: list["CategoryNode"] = field(default_factory=list)

    @property
    def name(self) -> str:
        return _get(self.record, "name")

    def as_dict(self, serialize: Optional[Callable[[Any], dict]] = None) -> dict:
        """Serialise the subtree; ``serialize`` renders one record (defaults to dict())."""
        payload = serialize(self.record) if serialize else dict(_as_mapping(self.record))
        payload["children"] = [child.as_dict(serialize) for child in self.children]
        return payload

    def walk(self) -> Iterable["CategoryNode"]:
        """Yield this node and its descendants depth-first."""
        stack = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))


def _as_mapping(record: Any) -> Mapping:
    if isinstance(record, Mapping):
        return record
    return {
        "id": _get(record, "id"),
        "name": _get(record, "name"),
        "parent_id": _get(record, "parent_id"),
        "sort_order": _get(record, "sort_order"),
    }


def build_tree(categories: Iterable[Any]) -> list[CategoryNode]:
    """Turn flat parent-referencing records into a sorted forest.

    Records need ``id``, ``parent_id``, ``sort_order`` and ``name`` (attributes
    or mapping keys). A record whose parent is missing from the input is a
    root. Siblings are ordered by ``(sort_order, name)``. Raises CycleDetected
    if any record is revisited or cannot be reached from a root.
    """
    records = list(categories)
    by_id = {_get(record, "id"): record for record in records}

    roots = []
    children_of: dict[Any, list] = defaultdict(list)
    for record in records:
        parent_id = _get(record, "parent_id")
        if parent_id is None or parent_id not in by_id:
            roots.append(record)
        else:
            children_of[parent_id].append(record)

    forest = [CategoryNode(_get(record, "id"), record) for record in sorted(roots, key=_sort_key)]
    visited = {node.id for node in forest}
    pending = list(forest)
    while pending:
        node = pending.pop()
        for child in sorted(children_of.get(node.id, ()), key=_sort_key):
            child_id = _get(child, "id")
            if child_id in visited:
                raise CycleDetected(category_ids=[child_id])
            visited.add(child_id)
            child_node = CategoryNode(child_id, child)
            node.children.append(child_node)
            pending.append(child_node)

    unreachable = [category_id for category_id in by_id if category_id not in visited]
    if unreachable:
        raise CycleDetected(category_ids=sorted(unreachable, key=str))
    return forest


def ensure_parent_assignable(
    category_id: Any,
    new_parent_id: Any,
    parent_of: Mapping[Any, Any],
) -> None:
    """Reject a parent assignment that would make a category its own ancestor.

    ``parent_of`` maps every stored category id to its parent id. Walks up from
    the proposed parent; reaching ``category_id`` raises ConflictingState, and
    an ancestry that loops without reaching it raises CycleDetected.
    """
    if new_parent_id is None:
        return
    if category_id is not None and new_parent_id == category_id:
        raise ConflictingState("A category cannot be its own parent.")

    seen = set()
    current = new_parent_id
    while current is not None:
        if category_id is not None and current == category_id:
            raise ConflictingState("A category cannot become its own ancestor.")
        if current in seen:
            raise CycleDetected(category_ids=sorted(seen, key=str))
        seen.add(current)
        current = parent_of.get(current)


__all__ = ["CategoryNode", "build_tree", "ensure_parent_assignable"]
