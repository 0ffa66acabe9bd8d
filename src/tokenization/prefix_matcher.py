"""
Prefix trie for user-defined symbols.

User-defined pieces (e.g. "<mask>") must never be split by the merge engine.
The encoder asks this matcher for the longest registered symbol starting at the
current position and, on a hit, emits that symbol as one frozen unit.

Edges are keyed by code point. A Python str already indexes by code point, so a
character outside the BMP is a single edge, never two halves.
"""

from typing import Dict, Iterable, Optional

from .errors import InvalidOffset


class _TrieNode:
    __slots__ = ("children", "word")

    def __init__(self):
        self.children: Dict[str, "_TrieNode"] = {}
        self.word: Optional[str] = None

    def __repr__(self) -> str:
        return f"_TrieNode(children={len(self.children)}, word={self.word!r})"


class PrefixMatcher:
    """
    Longest-prefix matcher over a fixed set of strings.

    Args:
        prefixes: Strings to match; need not be unique

    Example:
        >>> matcher = PrefixMatcher(["f", "foo", "baz"])
        >>> matcher.find_longest_prefix("false", 0)
        'f'
        >>> matcher.find_longest_prefix("fofoo", 2)
        'foo'
        >>> matcher.find_longest_prefix("fofoo", 1)
        ''
    """

    def __init__(self, prefixes: Iterable[str]):
        self._root = _TrieNode()
        self._size = 0
        for prefix in prefixes:
            self._insert(prefix)

    def _insert(self, prefix: str):
        node = self._root
        for char in prefix:
            child = node.children.get(char)
            if child is None:
                child = _TrieNode()
                node.children[char] = child
            node = child
        if node.word is None:
            self._size += 1
        node.word = prefix

    def find_longest_prefix(self, text: str, offset: int = 0) -> str:
        """
        Find the longest registered string that starts at `offset` in `text`.

        Args:
            text: String to search
            offset: Start position in code points; may be past the end of `text`

        Returns:
            The matched string, or "" if nothing matches

        Raises:
            InvalidOffset: if offset is negative
        """
        if offset < 0:
            raise InvalidOffset(f"Illegal string offset: {offset}")

        node = self._root
        longest = ""
        for idx in range(offset, len(text)):
            node = node.children.get(text[idx])
            if node is None:
                break
            if node.word is not None:
                longest = node.word
        return longest

    def __contains__(self, word: str) -> bool:
        node = self._root
        for char in word:
            node = node.children.get(char)
            if node is None:
                return False
        return node.word is not None

    def __len__(self) -> int:
        """Number of distinct registered strings."""
        return self._size

    def __repr__(self) -> str:
        return f"PrefixMatcher(size={self._size})"
