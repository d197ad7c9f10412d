"""Shared algorithms over binary node links.

These free functions implement the capability set every binary engine
exposes (traversals, height/depth bookkeeping, lookup, balance check,
snapshots). They only rely on ``left``/``right`` links being truthy when a
real child is present, so they work unchanged for red-black trees whose
leaves point at the falsy nil sentinel.
"""

from collections import deque
from typing import Any, Callable, Deque, Dict, Iterator, List, Optional

from .node import TreeNode


def iter_preorder(node: Optional[TreeNode]) -> Iterator[TreeNode]:
    """Yield nodes parent first, then left subtree, then right subtree."""
    stack: List[TreeNode] = [node] if node else []
    while stack:
        current = stack.pop()
        yield current
        if current.right:
            stack.append(current.right)
        if current.left:
            stack.append(current.left)


def iter_inorder(node: Optional[TreeNode]) -> Iterator[TreeNode]:
    """Yield nodes left subtree first, then parent, then right subtree."""
    stack: List[TreeNode] = []
    current = node
    while stack or current:
        while current:
            stack.append(current)
            current = current.left
        current = stack.pop()
        yield current
        current = current.right


def iter_postorder(node: Optional[TreeNode]) -> Iterator[TreeNode]:
    """Yield nodes after both of their subtrees."""
    # Parent-right-left order, reversed
    stack: List[TreeNode] = [node] if node else []
    visited: List[TreeNode] = []
    while stack:
        current = stack.pop()
        visited.append(current)
        if current.left:
            stack.append(current.left)
        if current.right:
            stack.append(current.right)
    yield from reversed(visited)


def iter_level_order(root: Optional[TreeNode]) -> Iterator[TreeNode]:
    """Yield nodes breadth-first using a FIFO queue seeded with the root."""
    if not root:
        return
    queue: Deque[TreeNode] = deque([root])
    while queue:
        node = queue.popleft()
        yield node
        if node.left:
            queue.append(node.left)
        if node.right:
            queue.append(node.right)


def preorder(root: Optional[TreeNode]) -> List[Any]:
    return [node.value for node in iter_preorder(root)]


def inorder(root: Optional[TreeNode]) -> List[Any]:
    return [node.value for node in iter_inorder(root)]


def postorder(root: Optional[TreeNode]) -> List[Any]:
    return [node.value for node in iter_postorder(root)]


def level_order(root: Optional[TreeNode]) -> List[Any]:
    return [node.value for node in iter_level_order(root)]


_TRAVERSALS: Dict[str, Callable[[Optional[TreeNode]], List[Any]]] = {
    'preorder': preorder,
    'pre': preorder,
    'inorder': inorder,
    'in': inorder,
    'postorder': postorder,
    'post': postorder,
    'level': level_order,
    'level_order': level_order,
    'bfs': level_order,
}


def get_traversal(order: str) -> Callable[[Optional[TreeNode]], List[Any]]:
    """Look up a traversal function by name.

    Args:
        order: One of preorder, inorder, postorder, level_order (or aliases)

    Returns:
        Function mapping a root to the list of visited values

    Raises:
        ValueError: If the name is not recognized
    """
    key = order.lower()
    if key not in _TRAVERSALS:
        raise ValueError(
            f"Unknown traversal order: {order}. "
            f"Choose from: {', '.join(_TRAVERSALS.keys())}"
        )
    return _TRAVERSALS[key]


def calculate_height(node: Optional[TreeNode]) -> int:
    """Recompute height and balance factor of every node below ``node``.

    Post-order: a node's height is one more than its tallest child, an
    absent child counts as -1, so a leaf has height 0 and an empty tree -1.

    Returns:
        Height of ``node``
    """
    if not node:
        return -1
    for current in iter_postorder(node):
        left_height = current.left.height if current.left else -1
        right_height = current.right.height if current.right else -1
        current.height = max(left_height, right_height) + 1
        current.calculate_balance_factor()
    return node.height


def update_depths(node: Optional[TreeNode], depth: int = 0) -> None:
    """Assign depths pre-order: ``depth`` at ``node``, +1 per level below."""
    stack = [(node, depth)] if node else []
    while stack:
        current, current_depth = stack.pop()
        current.depth = current_depth
        for child in (current.right, current.left):
            if child:
                stack.append((child, current_depth + 1))


def find_node(root: Optional[TreeNode], value: Any) -> Optional[TreeNode]:
    """Depth-first search by equality; first match wins, no ordering assumed."""
    for node in iter_preorder(root):
        if node.value == value:
            return node
    return None


def leftmost(node: Optional[TreeNode]) -> Optional[TreeNode]:
    if not node:
        return None
    while node.left:
        node = node.left
    return node


def rightmost(node: Optional[TreeNode]) -> Optional[TreeNode]:
    if not node:
        return None
    while node.right:
        node = node.right
    return node


def is_balanced(node: Optional[TreeNode]) -> bool:
    """Check ``|balance_factor| <= 1`` at every node, using cached factors."""
    return all(abs(current.balance_factor) <= 1 for current in iter_preorder(node))


def count_nodes(root: Optional[TreeNode]) -> int:
    return sum(1 for _ in iter_preorder(root))


def max_depth(node: Optional[TreeNode]) -> int:
    """Height computed from scratch without touching cached fields."""
    deepest = -1
    stack = [(node, 0)] if node else []
    while stack:
        current, depth = stack.pop()
        deepest = max(deepest, depth)
        for child in (current.left, current.right):
            if child:
                stack.append((child, depth + 1))
    return deepest


def snapshot(node: Optional[TreeNode], level: int = 0) -> Optional[Dict[str, Any]]:
    """Build the serializable structure a renderer redraws from.

    Args:
        node: Subtree root
        level: Level of ``node`` below the snapshot root

    Returns:
        Nested dict with id, value, depth, height, balance factor, color and
        children, or None for an empty subtree
    """
    if not node:
        return None

    root_entry: Dict[str, Any] = {}
    # (node, level, dict to fill)
    stack = [(node, level, root_entry)]
    while stack:
        current, current_level, entry = stack.pop()
        entry.update({
            'id': current.id,
            'value': current.value,
            'level': current_level,
            'depth': current.depth,
            'height': current.height,
            'balance_factor': current.balance_factor,
            'is_leaf': current.is_leaf(),
            'color': current.color.value,
            'is_red': current.is_red,
            'left': None,
            'right': None,
        })
        for side in ('left', 'right'):
            child = getattr(current, side)
            if child:
                entry[side] = {}
                stack.append((child, current_level + 1, entry[side]))
    return root_entry
