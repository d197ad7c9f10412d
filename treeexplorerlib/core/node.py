"""Node records for TreeExplorerLib.

Nodes are plain data containers. All algorithms live in the structure
engines and in :mod:`treeexplorerlib.core.traversal`; a node only knows
how to describe itself.

Ownership: ``left``/``right``/``children`` links own their targets, the
``parent`` attribute is a non-owning back-pointer kept for O(1) upward
walks during rebalancing. Dropping a tree's root releases the whole graph.
"""

from bisect import bisect_left, insort
from enum import Enum
from typing import Any, Dict, List, Optional

from ..errors import SentinelMutationError


class Color(Enum):
    """Node color used by red-black trees (other trees leave nodes black)."""
    RED = "red"
    BLACK = "black"


class TreeNode:
    """Node of any binary tree variant (binary tree, BST, AVL, red-black).

    Attributes:
        value: Comparable payload
        left: Left child (owned) or None
        right: Right child (owned) or None
        parent: Back-reference to the parent (not owned)
        depth: Distance from the root, root = 0
        height: Longest downward path to a leaf, leaf = 0
        balance_factor: Left height minus right height
        color: Color.RED or Color.BLACK
        id: Integer handle, unique within the owning tree
    """

    is_null_sentinel = False

    def __init__(self, value: Any, node_id: Any = None):
        self.value = value
        self.left: Optional['TreeNode'] = None
        self.right: Optional['TreeNode'] = None
        self.parent: Optional['TreeNode'] = None
        self.depth = 0
        self.height = 0
        self.balance_factor = 0
        self.color = Color.BLACK
        self.id = node_id

    @property
    def is_red(self) -> bool:
        return self.color is Color.RED

    def identifier(self) -> Any:
        """Return the stable handle used by logs and highlighting."""
        return self.id

    def is_leaf(self) -> bool:
        """Check if this node has no real children."""
        return not self.left and not self.right

    def calculate_height(self) -> int:
        """Recompute height from the children's cached heights."""
        left_height = self.left.height + 1 if self.left else 0
        right_height = self.right.height + 1 if self.right else 0
        self.height = max(left_height, right_height)
        return self.height

    def calculate_balance_factor(self) -> int:
        """Recompute balance factor from the children's cached heights."""
        left_height = self.left.height + 1 if self.left else 0
        right_height = self.right.height + 1 if self.right else 0
        self.balance_factor = left_height - right_height
        return self.balance_factor

    def metadata(self) -> Dict[str, Any]:
        """Return display information about this node."""
        return {
            'value': self.value,
            'height': self.height,
            'balance_factor': self.balance_factor,
            'is_leaf': self.is_leaf(),
            'depth': self.depth,
        }

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(id={self.id!r}, value={self.value!r})"


class NilNode(TreeNode):
    """Immutable black sentinel shared by every leaf of one red-black tree.

    The sentinel is falsy so code written against ``None`` links works
    unchanged, and any attempt to assign an attribute raises
    :class:`SentinelMutationError`. Fixup code therefore tracks parents
    explicitly instead of parking them on the sentinel.
    """

    is_null_sentinel = True

    def __init__(self):
        for name, value in (
            ('value', None),
            ('left', None),
            ('right', None),
            ('parent', None),
            ('depth', 0),
            ('height', -1),
            ('balance_factor', 0),
            ('color', Color.BLACK),
            ('id', None),
        ):
            object.__setattr__(self, name, value)

    def __setattr__(self, name: str, value: Any) -> None:
        raise SentinelMutationError(f"Red-black nil sentinel is immutable (tried to set {name!r})")

    def __delattr__(self, name: str) -> None:
        raise SentinelMutationError(f"Red-black nil sentinel is immutable (tried to delete {name!r})")

    def __bool__(self) -> bool:
        return False

    def is_leaf(self) -> bool:
        return True

    def __repr__(self) -> str:
        return "NilNode()"


class HeapNode(TreeNode):
    """Display-only node derived from a heap's backing array.

    Never stored by the heap itself; rebuilt on every call to
    ``Heap.get_tree_structure()``.
    """

    def __init__(self, value: Any, index: int):
        super().__init__(value, f"heap-{index}")
        self.index = index


class BTreeNode:
    """Multi-way node of a B-tree.

    Attributes:
        keys: Strictly increasing keys
        children: Owned child nodes, ``len(keys) + 1`` of them unless leaf
        is_leaf: Whether the node has no children
        parent: Back-reference to the parent (not owned)
        depth: Distance from the root
        id: Integer handle, unique within the owning tree
    """

    def __init__(self, is_leaf: bool = False, node_id: Any = None):
        self.keys: List[Any] = []
        self.children: List['BTreeNode'] = []
        self.is_leaf = is_leaf
        self.parent: Optional['BTreeNode'] = None
        self.depth = 0
        self.id = node_id

    def identifier(self) -> Any:
        return self.id

    def key_count(self) -> int:
        return len(self.keys)

    def is_full(self, max_keys: int) -> bool:
        return len(self.keys) >= max_keys

    def has_min_keys(self, min_keys: int) -> bool:
        return len(self.keys) >= min_keys

    def insert_key(self, key: Any) -> int:
        """Insert key in sorted position and return that position."""
        insort(self.keys, key)
        return bisect_left(self.keys, key)

    def remove_key(self, key: Any) -> bool:
        try:
            self.keys.remove(key)
        except ValueError:
            return False
        return True

    def key_index(self, key: Any) -> int:
        """Return the position of key, or -1 if absent."""
        index = bisect_left(self.keys, key)
        if index < len(self.keys) and self.keys[index] == key:
            return index
        return -1

    def find_child_index(self, key: Any) -> int:
        """Index of the child just past the last key less than ``key``."""
        return bisect_left(self.keys, key)

    def metadata(self) -> Dict[str, Any]:
        return {
            'keys': list(self.keys),
            'is_leaf': self.is_leaf,
            'key_count': len(self.keys),
            'child_count': len(self.children),
        }

    def __repr__(self) -> str:
        return f"BTreeNode(id={self.id!r}, keys={self.keys!r})"


class TrieNode:
    """Node of a trie.

    Attributes:
        children: Character to child mapping, in insertion order
        is_end_of_word: Whether a stored word ends here
        char: Character on the edge from the parent (None for the root)
        parent: Back-reference to the parent (not owned)
        depth: Distance from the root
        id: Integer handle, unique within the owning trie
    """

    def __init__(self, char: Optional[str] = None, node_id: Any = None):
        self.children: Dict[str, 'TrieNode'] = {}
        self.is_end_of_word = False
        self.char = char
        self.parent: Optional['TrieNode'] = None
        self.depth = 0
        self.id = node_id

    def identifier(self) -> Any:
        return self.id

    def add_child(self, char: str, node: 'TrieNode') -> None:
        self.children[char] = node
        node.parent = self
        node.depth = self.depth + 1

    def get_child(self, char: str) -> Optional['TrieNode']:
        return self.children.get(char)

    def has_child(self, char: str) -> bool:
        return char in self.children

    def remove_child(self, char: str) -> bool:
        return self.children.pop(char, None) is not None

    def children_chars(self) -> List[str]:
        return list(self.children)

    def metadata(self) -> Dict[str, Any]:
        return {
            'is_end_of_word': self.is_end_of_word,
            'char': self.char,
            'children_count': len(self.children),
            'children': self.children_chars(),
            'depth': self.depth,
        }

    def __repr__(self) -> str:
        return f"TrieNode(id={self.id!r}, char={self.char!r}, end={self.is_end_of_word})"
