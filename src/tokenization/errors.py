"""
Exceptions raised by the tokenization package.

Construction errors derive from ValueError and lookup errors from IndexError,
so callers that already catch the built-in types keep working.
"""


class TokenizationError(Exception):
    """Base class for all tokenization errors."""


class VocabularyError(TokenizationError, ValueError):
    """A vocabulary could not be turned into a registry."""


class InvalidVocabulary(VocabularyError):
    """A piece is malformed (e.g. its text is empty)."""


class DuplicatePiece(VocabularyError):
    """Two pieces in the same lookup partition share the same text."""

    def __init__(self, text: str):
        super().__init__(f"'{text}' is already defined.")
        self.text = text


class DuplicateUnknown(VocabularyError):
    """More than one piece is tagged as the unknown piece."""


class MissingUnknown(VocabularyError):
    """No piece is tagged as the unknown piece."""


class InvalidId(TokenizationError, IndexError):
    """A piece id is outside [0, vocabulary_size)."""

    def __init__(self, piece_id: int, vocab_size: int):
        super().__init__(
            f"Piece id {piece_id} is out of range for a vocabulary of size {vocab_size}"
        )
        self.id = piece_id


class InvalidOffset(TokenizationError, ValueError):
    """A negative offset was passed to a prefix lookup."""
