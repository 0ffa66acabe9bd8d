"""
Vocabulary registry for the BPE piece model.

Holds the finalized list of pieces (position = id) and answers the lookups the
merge engine needs on every candidate merge:
- text -> id, with a fallback to the unknown id
- id -> text / score / category

Pieces are split into two lookup partitions. NORMAL, USER_DEFINED and UNUSED
pieces are part of the running text; UNKNOWN and CONTROL pieces are reserved.
A text may appear at most once per partition.

The registry is immutable after construction and can be shared between threads
without locking.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, List, Optional, Tuple

import numpy as np

from .errors import (
    DuplicatePiece,
    DuplicateUnknown,
    InvalidId,
    InvalidVocabulary,
    MissingUnknown,
    VocabularyError,
)

logger = logging.getLogger(__name__)


DEFAULT_UNK_PIECE = "<unk>"
DEFAULT_BOS_PIECE = "<s>"
DEFAULT_EOS_PIECE = "</s>"
DEFAULT_PAD_PIECE = "<pad>"


class PieceCategory(str, Enum):
    """Category of a vocabulary piece."""
    NORMAL = "normal"
    UNKNOWN = "unknown"
    CONTROL = "control"
    USER_DEFINED = "user_defined"
    UNUSED = "unused"


_NORMAL_CATEGORIES = frozenset(
    {PieceCategory.NORMAL, PieceCategory.USER_DEFINED, PieceCategory.UNUSED}
)


@dataclass(frozen=True)
class SentencePiece:
    """
    One vocabulary entry.

    Attributes:
        text: Surface string of the piece (must be non-empty)
        score: Merge priority, higher merges earlier
        category: Piece category (enum member or its string value)
    """
    text: str
    score: float = 0.0
    category: PieceCategory = PieceCategory.NORMAL

    def __post_init__(self):
        if not isinstance(self.category, PieceCategory):
            try:
                category = PieceCategory(self.category)
            except ValueError:
                raise InvalidVocabulary(
                    f"Unknown category {self.category!r} for piece {self.text!r}"
                ) from None
            object.__setattr__(self, "category", category)


def _label(override: Optional[str], default: str) -> str:
    # None and "" both keep the default
    return override if override else default


class VocabularyRegistry:
    """
    Immutable registry of sentence pieces.

    Args:
        pieces: Ordered pieces, the index of each piece is its id
        unk_piece: Label of the unknown piece (default: "<unk>")
        bos_piece: Label of the begin-of-sequence piece (default: "<s>")
        eos_piece: Label of the end-of-sequence piece (default: "</s>")
        pad_piece: Label of the padding piece (default: "<pad>")

    Raises:
        InvalidVocabulary: a piece has empty text
        DuplicatePiece: two pieces of the same partition share their text
        DuplicateUnknown: more than one UNKNOWN piece
        MissingUnknown: no UNKNOWN piece

    Example:
        >>> registry = VocabularyRegistry([
        ...     SentencePiece("<unk>", category=PieceCategory.UNKNOWN),
        ...     SentencePiece("a", -1.0),
        ... ])
        >>> registry.id_of("a")
        1
        >>> registry.id_of("zzz") == registry.unk_id
        True
    """

    def __init__(
        self,
        pieces: Iterable[SentencePiece],
        unk_piece: Optional[str] = None,
        bos_piece: Optional[str] = None,
        eos_piece: Optional[str] = None,
        pad_piece: Optional[str] = None,
    ):
        pieces = tuple(pieces)
        piece_to_id: Dict[str, int] = {}
        reserved_piece_to_id: Dict[str, int] = {}
        user_defined: List[str] = []
        scores: List[float] = []
        unk_id = -1

        try:
            for i, piece in enumerate(pieces):
                if not piece.text:
                    raise InvalidVocabulary(f"Piece {i} must not be empty.")

                lookup = (
                    piece_to_id if piece.category in _NORMAL_CATEGORIES else reserved_piece_to_id
                )
                if piece.text in lookup:
                    raise DuplicatePiece(piece.text)
                lookup[piece.text] = i

                if piece.category == PieceCategory.USER_DEFINED:
                    user_defined.append(piece.text)
                if piece.category == PieceCategory.UNKNOWN:
                    if unk_id >= 0:
                        raise DuplicateUnknown(
                            f"'unk' is already defined (ids {unk_id} and {i})."
                        )
                    unk_id = i

                # Scores are kept in single precision
                scores.append(float(np.float32(piece.score)))

            if unk_id == -1:
                raise MissingUnknown("'unk' is not defined.")
        except VocabularyError as e:
            logger.error(f"Cannot build vocabulary registry: {e}")
            raise

        self._pieces: Tuple[SentencePiece, ...] = pieces
        self._scores: Tuple[float, ...] = tuple(scores)
        self._piece_to_id = piece_to_id
        self._reserved_piece_to_id = reserved_piece_to_id
        self._user_defined_symbols: Tuple[str, ...] = tuple(user_defined)
        self._unk_id = unk_id

        self._unk_piece = _label(unk_piece, DEFAULT_UNK_PIECE)
        self._bos_piece = _label(bos_piece, DEFAULT_BOS_PIECE)
        self._eos_piece = _label(eos_piece, DEFAULT_EOS_PIECE)
        self._pad_piece = _label(pad_piece, DEFAULT_PAD_PIECE)

        logger.debug(
            f"Built vocabulary registry: {len(pieces)} pieces, unk_id={unk_id}, "
            f"{len(user_defined)} user-defined symbols"
        )

    def _check_id(self, piece_id: int):
        if not 0 <= piece_id < len(self._pieces):
            raise InvalidId(piece_id, len(self._pieces))

    def id_of(self, text: str) -> int:
        """Return the id of `text`, or the unknown id if it is not registered."""
        piece_id = self._reserved_piece_to_id.get(text)
        if piece_id is None:
            piece_id = self._piece_to_id.get(text)
        if piece_id is None:
            return self._unk_id
        return piece_id

    def has_piece(self, text: str) -> bool:
        """Check whether `text` is registered in either partition."""
        return text in self._reserved_piece_to_id or text in self._piece_to_id

    def text_of(self, piece_id: int) -> str:
        self._check_id(piece_id)
        return self._pieces[piece_id].text

    def score_of(self, piece_id: int) -> float:
        self._check_id(piece_id)
        return self._scores[piece_id]

    def category_of(self, piece_id: int) -> PieceCategory:
        self._check_id(piece_id)
        return self._pieces[piece_id].category

    def is_unknown(self, piece_id: int) -> bool:
        return self.category_of(piece_id) == PieceCategory.UNKNOWN

    def is_control(self, piece_id: int) -> bool:
        return self.category_of(piece_id) == PieceCategory.CONTROL

    def is_unused(self, piece_id: int) -> bool:
        return self.category_of(piece_id) == PieceCategory.UNUSED

    def is_user_defined(self, piece_id: int) -> bool:
        return self.category_of(piece_id) == PieceCategory.USER_DEFINED

    def vocabulary_size(self) -> int:
        return len(self._pieces)

    @property
    def pieces(self) -> Tuple[SentencePiece, ...]:
        return self._pieces

    @property
    def user_defined_symbols(self) -> Tuple[str, ...]:
        """Texts of all USER_DEFINED pieces, in id order."""
        return self._user_defined_symbols

    @property
    def unk_id(self) -> int:
        return self._unk_id

    @property
    def unk_piece(self) -> str:
        return self._unk_piece

    @property
    def bos_piece(self) -> str:
        return self._bos_piece

    @property
    def eos_piece(self) -> str:
        return self._eos_piece

    @property
    def pad_piece(self) -> str:
        return self._pad_piece

    def _label_id(self, label: str) -> Optional[int]:
        if self.has_piece(label):
            return self.id_of(label)
        return None

    @property
    def bos_id(self) -> Optional[int]:
        """Id of the begin-of-sequence piece, None if it is not registered."""
        return self._label_id(self._bos_piece)

    @property
    def eos_id(self) -> Optional[int]:
        """Id of the end-of-sequence piece, None if it is not registered."""
        return self._label_id(self._eos_piece)

    @property
    def pad_id(self) -> Optional[int]:
        """Id of the padding piece, None if it is not registered."""
        return self._label_id(self._pad_piece)

    def __len__(self) -> int:
        return len(self._pieces)

    def __repr__(self) -> str:
        return (
            f"VocabularyRegistry(size={len(self._pieces)}, "
            f"unk_id={self._unk_id}, "
            f"user_defined={len(self._user_defined_symbols)})"
        )
