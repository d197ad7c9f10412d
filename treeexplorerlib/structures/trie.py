"""Trie (prefix tree) engine over strings."""

import logging
from collections import deque
from typing import Any, Dict, Iterator, List, Optional, Tuple

from ..config import TreeConfig
from ..core.base import BaseTree
from ..core.node import TrieNode
from ..core.oplog import DeleteStep, InsertStep, QueryStep, SearchStep, UpdateStep
from ..errors import Violation

logger = logging.getLogger(__name__)


class Trie(BaseTree):
    """Set of words sharing nodes along common prefixes.

    Only non-empty strings are stored. ``size`` counts words, not nodes.
    Traversals return words rather than characters:

    - pre-order: each word before the words that extend it
    - in-order: lexicographic order
    - post-order: each word after the words that extend it
    - level-order: by length, shortest first
    """

    tree_type = 'trie'

    def __init__(self, config: Optional[TreeConfig] = None):
        super().__init__(config)
        self.root = TrieNode(node_id=self._next_id())

    def _valid_word(self, word: Any, record_cls) -> bool:
        if not isinstance(word, str):
            logger.warning("trie rejected non-string value %r", word)
            self._record(record_cls(step='invalid_input', value=word))
            return False
        if not word:
            self._record(record_cls(step='empty_word', value=word))
            return False
        return True

    def _walk(self, text: str) -> Optional[TrieNode]:
        node = self.root
        for char in text:
            node = node.get_child(char)
            if node is None:
                return None
        return node

    # Mutations

    def insert(self, word: Any) -> Optional[TrieNode]:
        """Add a word.

        Returns:
            The node ending the new word, or None if the word was already
            stored or is not a non-empty string
        """
        if not self._valid_word(word, InsertStep):
            return None

        node = self.root
        for i, char in enumerate(word):
            child = node.get_child(char)
            if child is None:
                child = TrieNode(char, self._next_id())
                node.add_child(char, child)
                self._record(InsertStep(
                    step='create_node', value=word, char=char, node=child.id,
                    parent=node.id, path=word[:i + 1],
                ))
            else:
                self._record(InsertStep(
                    step='traverse_existing', value=word, char=char, node=child.id,
                    path=word[:i + 1],
                ))
            node = child

        if node.is_end_of_word:
            self._record(InsertStep(step='already_exists', value=word, node=node.id))
            return None

        node.is_end_of_word = True
        self.size += 1
        self._record(InsertStep(step='mark_end', value=word, node=node.id))
        return node

    def delete(self, word: Any) -> bool:
        """Remove a word, pruning nodes no other word needs."""
        if not self._valid_word(word, DeleteStep):
            return False

        path: List[TrieNode] = [self.root]
        for char in word:
            child = path[-1].get_child(char)
            if child is None:
                self._record(DeleteStep(step='word_not_found', value=word, char=char))
                return False
            self._record(DeleteStep(step='traverse_delete', value=word, char=char, node=child.id))
            path.append(child)

        terminal = path[-1]
        if not terminal.is_end_of_word:
            self._record(DeleteStep(step='word_not_found', value=word, node=terminal.id))
            return False

        terminal.is_end_of_word = False
        self.size -= 1
        self._record(DeleteStep(step='unmark_end', value=word, node=terminal.id))

        for node in reversed(path[1:]):
            if node.children or node.is_end_of_word:
                break
            node.parent.remove_child(node.char)
            node.parent = None
            self._record(DeleteStep(step='remove_node', value=word, char=node.char, node=node.id))

        self._record(DeleteStep(step='delete_complete', value=word))
        return True

    def update_value(self, old_word: Any, new_word: Any) -> bool:
        if not self._valid_word(new_word, UpdateStep):
            return False
        if new_word != old_word and self.find_node(new_word) is not None:
            self._record(UpdateStep(step='update_failed', old_value=old_word, new_value=new_word))
            return False
        if not self.delete(old_word):
            self._record(UpdateStep(step='not_found', old_value=old_word, new_value=new_word))
            return False
        self.insert(new_word)
        self._record(UpdateStep(step='update_complete', old_value=old_word, new_value=new_word))
        return True

    # Lookups

    def search(self, word: Any) -> bool:
        """Whether ``word`` was inserted as a whole word."""
        if not self._valid_word(word, SearchStep):
            return False

        node = self.root
        for i, char in enumerate(word):
            child = node.get_child(char)
            if child is None:
                self._record(SearchStep(
                    step='char_not_found', value=word, char=char, path=word[:i], found=False,
                ))
                return False
            self._record(SearchStep(
                step='traverse', value=word, char=char, node=child.id, path=word[:i + 1],
            ))
            node = child

        if node.is_end_of_word:
            self._record(SearchStep(step='found', value=word, node=node.id, found=True))
            return True
        self._record(SearchStep(step='not_end_of_word', value=word, node=node.id, found=False))
        return False

    def starts_with(self, prefix: str) -> bool:
        found = self._walk(prefix) is not None
        self._record(QueryStep(query='starts_with', step='complete', text=prefix,
                               count=int(found)))
        return found

    def _iter_words(self, node: TrieNode, prefix: str) -> Iterator[str]:
        """Words below ``node`` in pre-order, children in insertion order."""
        stack = [(node, prefix)]
        while stack:
            current, text = stack.pop()
            if current.is_end_of_word:
                yield text
            for char, child in reversed(list(current.children.items())):
                stack.append((child, text + char))

    def get_words_with_prefix(self, prefix: str) -> List[str]:
        node = self._walk(prefix)
        words = list(self._iter_words(node, prefix)) if node else []
        self._record(QueryStep(query='prefix', step='complete', text=prefix, count=len(words)))
        return words

    def get_all_words(self) -> List[str]:
        words = list(self._iter_words(self.root, ''))
        self._record(QueryStep(query='all_words', step='complete', count=len(words)))
        return words

    def get_words_matching_pattern(self, pattern: str) -> List[str]:
        """Words of the same length as ``pattern``; ``*`` matches any one character."""
        matches: List[str] = []

        def _match(node, index, prefix):
            if index == len(pattern):
                if node.is_end_of_word:
                    matches.append(prefix)
                return
            char = pattern[index]
            if char == '*':
                for child_char, child in node.children.items():
                    _match(child, index + 1, prefix + child_char)
            else:
                child = node.get_child(char)
                if child is not None:
                    _match(child, index + 1, prefix + char)

        _match(self.root, 0, '')
        self._record(QueryStep(query='pattern', step='complete', text=pattern, count=len(matches)))
        return matches

    def get_longest_common_prefix(self) -> str:
        """Prefix shared by every stored word ('' when empty)."""
        prefix = ''
        node = self.root
        while len(node.children) == 1 and not node.is_end_of_word:
            char, node = next(iter(node.children.items()))
            prefix += char
        return prefix if self.size else ''

    def get_autocomplete_suggestions(self, prefix: str, max_suggestions: int = 10) -> List[str]:
        """Up to ``max_suggestions`` completions of ``prefix``, shortest first then alphabetical."""
        words = self.get_words_with_prefix(prefix)
        return sorted(words, key=lambda w: (len(w), w))[:max_suggestions]

    def get_sorted_words(self) -> List[str]:
        return sorted(self._iter_words(self.root, ''))

    # Traversals

    def preorder_traversal(self) -> List[str]:
        return list(self._iter_words(self.root, ''))

    def inorder_traversal(self) -> List[str]:
        return self.get_sorted_words()

    def postorder_traversal(self) -> List[str]:
        # Node, then children right to left, reversed at the end
        words: List[str] = []
        stack = [(self.root, '')]
        while stack:
            node, prefix = stack.pop()
            if node.is_end_of_word:
                words.append(prefix)
            for char, child in node.children.items():
                stack.append((child, prefix + char))
        words.reverse()
        return words

    def level_order_traversal(self) -> List[str]:
        words: List[str] = []
        queue = deque([(self.root, '')])
        while queue:
            node, prefix = queue.popleft()
            if node.is_end_of_word:
                words.append(prefix)
            for char, child in node.children.items():
                queue.append((child, prefix + char))
        return words

    # Shape and stats

    def _iter_nodes(self) -> Iterator[Tuple[TrieNode, str]]:
        stack = [(self.root, '')]
        while stack:
            node, prefix = stack.pop()
            yield node, prefix
            for char, child in node.children.items():
                stack.append((child, prefix + char))

    def find_node(self, word: Any) -> Optional[TrieNode]:
        """Terminal node of ``word``, or None if it is not stored."""
        if not isinstance(word, str):
            return None
        node = self._walk(word)
        return node if node is not None and node.is_end_of_word else None

    def find_min(self) -> Optional[str]:
        return self._min_value()

    def find_max(self) -> Optional[str]:
        return self._max_value()

    def get_node_count(self) -> int:
        return sum(1 for _ in self._iter_nodes())

    def get_height(self) -> int:
        """Length of the longest stored path.

        An empty trie reports -1, like every other empty engine, even though
        its bare root node is still present.
        """
        if not self.size:
            return -1
        return max(len(prefix) for _, prefix in self._iter_nodes())

    def calculate_height(self) -> int:
        return self.get_height()

    def _height(self) -> int:
        return self.get_height()

    def update_depths(self) -> None:
        for node, prefix in self._iter_nodes():
            node.depth = len(prefix)

    def is_balanced(self) -> bool:
        """Balance does not constrain a trie; always True."""
        return True

    def get_average_word_length(self) -> float:
        words = self.preorder_traversal()
        return sum(len(w) for w in words) / len(words) if words else 0.0

    def get_longest_word(self) -> str:
        return max(self.preorder_traversal(), key=len, default='')

    def get_shortest_word(self) -> str:
        return min(self.preorder_traversal(), key=len, default='')

    def get_trie_stats(self) -> Dict[str, Any]:
        stats = self.get_stats()
        stats.update({
            'word_count': self.size,
            'node_count': self.get_node_count(),
            'average_word_length': self.get_average_word_length(),
            'longest_word': self.get_longest_word(),
            'shortest_word': self.get_shortest_word(),
            'common_prefix': self.get_longest_common_prefix(),
        })
        return stats

    def check_trie_properties(self) -> List[Violation]:
        """Every non-root leaf ends a word, links and depths are consistent."""
        violations: List[Violation] = []
        words = 0
        for node, prefix in self._iter_nodes():
            if node.is_end_of_word:
                words += 1
            if node is self.root:
                continue
            if not node.children and not node.is_end_of_word:
                violations.append(Violation('Dangling node', node.id, prefix))
            if node.parent is None or node.parent.get_child(node.char) is not node:
                violations.append(Violation('Parent link mismatch', node.id, prefix))
            if node.depth != len(prefix):
                violations.append(Violation('Depth mismatch', node.id, f"{node.depth} != {len(prefix)}"))
        if words != self.size:
            violations.append(Violation('Word count mismatch', self.root.id, f"{words} != {self.size}"))
        return violations

    def _validation_info(self) -> Dict[str, Any]:
        return {
            'is_valid_trie': not self.check_trie_properties(),
            'word_count': self.size,
            'node_count': self.get_node_count(),
        }

    def get_tree_structure(self) -> Dict[str, Any]:
        root_entry: Dict[str, Any] = {}
        stack = [(self.root, '', root_entry)]
        while stack:
            node, prefix, entry = stack.pop()
            entry.update({
                'id': node.id,
                'char': node.char,
                'prefix': prefix,
                'is_end_of_word': node.is_end_of_word,
                'depth': node.depth,
                'children': [],
            })
            for char, child in node.children.items():
                child_entry: Dict[str, Any] = {}
                entry['children'].append(child_entry)
                stack.append((child, prefix + char, child_entry))
        return root_entry

    def generate_sample(self, words: Optional[List[str]] = None) -> 'Trie':
        self.clear()
        for word in words or ['cat', 'car', 'card', 'care', 'careful',
                              'carefully', 'careless', 'carelessness']:
            self.insert(word)
        return self

    def clear(self) -> None:
        super().clear()
        self.root = TrieNode(node_id=self._next_id())

    def __contains__(self, word: Any) -> bool:
        return self.find_node(word) is not None
