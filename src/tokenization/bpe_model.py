"""
BPE Piece Model.

Greedy bottom-up merge encoder driven by a fixed, pre-trained vocabulary of
scored pieces (the sentencepiece BPE algorithm):
- Input is split into code points, user-defined symbols are kept whole
- Adjacent symbols are merged highest score first, leftmost first on ties
- Merges into UNUSED pieces are unwound again by resegmentation

The input is expected to be normalized already; nothing here normalizes or
pre-segments text.

Technical References:
    - Sennrich et al., 2016. "Neural Machine Translation of Rare Words with
      Subword Units" ACL 2016 (BPE foundation)
    - Kudo & Richardson, 2018. "SentencePiece: A simple and language independent
      subword tokenizer and detokenizer for Neural Text Processing" EMNLP 2018
"""

import heapq
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, List, NamedTuple, Optional, Sequence, Tuple, Union

from tqdm import tqdm

from .config import TokenizerConfig
from .prefix_matcher import PrefixMatcher
from .vocabulary import PieceCategory, SentencePiece, VocabularyRegistry

logger = logging.getLogger(__name__)


class PaddingStrategy(str, Enum):
    """Padding strategies for batch encoding."""
    LONGEST = "longest"
    MAX_LENGTH = "max_length"
    DO_NOT_PAD = "do_not_pad"


class EncodedPiece(NamedTuple):
    """One output element of `encode`."""
    text: str
    id: int


@dataclass
class BatchEncoding:
    """
    Container for batch encoding outputs.

    Attributes:
        input_ids: List of piece ids for each sequence
        attention_mask: List of attention masks (1 for real pieces, 0 for padding)
    """
    input_ids: List[List[int]]
    attention_mask: Optional[List[List[int]]] = None

    def to_dict(self) -> Dict:
        """Convert to dictionary format."""
        result = {"input_ids": self.input_ids}
        if self.attention_mask is not None:
            result["attention_mask"] = self.attention_mask
        return result


# End-of-list marker for Symbol.prev / Symbol.next
_NONE = -1


class _Symbol:
    __slots__ = ("text", "prev", "next", "frozen")

    def __init__(self, text: str, prev: int, next: int, frozen: bool):
        self.text = text
        self.prev = prev
        self.next = next
        self.frozen = frozen


class _Encoder:
    """
    State for a single `encode` call.

    Symbols live in a flat list and are linked through indices. A merged-away
    symbol keeps its slot with empty text, which is what the staleness check on
    popped candidates relies on.
    """

    def __init__(self, registry: VocabularyRegistry, matcher: PrefixMatcher, normalized: str):
        self.registry = registry
        self.matcher = matcher
        self.normalized = normalized
        self.symbols: List[_Symbol] = []
        # (-score, left, right, combined length); heapq pops the smallest
        self.agenda: List[Tuple[float, int, int, int]] = []
        # merged text -> (left text, right text), only for UNUSED results
        self.rev_merge: Dict[str, Tuple[str, str]] = {}

    def _lookup(self, text: str) -> int:
        """Id of `text` if it is a registered piece, else -1."""
        piece_id = self.registry.id_of(text)
        if self.registry.text_of(piece_id) != text:
            return -1
        return piece_id

    def _maybe_add_pair(self, left: int, right: int):
        if left == _NONE or right == _NONE:
            return
        left_symbol = self.symbols[left]
        right_symbol = self.symbols[right]
        if left_symbol.frozen or right_symbol.frozen:
            return

        merged = left_symbol.text + right_symbol.text
        piece_id = self._lookup(merged)
        if piece_id < 0:
            return

        heapq.heappush(
            self.agenda, (-self.registry.score_of(piece_id), left, right, len(merged))
        )
        if self.registry.is_unused(piece_id):
            self.rev_merge[merged] = (left_symbol.text, right_symbol.text)

    def _split(self):
        text = self.normalized
        pos = 0
        while pos < len(text):
            prefix = self.matcher.find_longest_prefix(text, pos)
            if prefix:
                symbol = _Symbol(prefix, len(self.symbols) - 1, _NONE, True)
            else:
                symbol = _Symbol(text[pos], len(self.symbols) - 1, _NONE, False)
            pos += len(symbol.text)
            if pos < len(text):
                symbol.next = len(self.symbols) + 1
            self.symbols.append(symbol)

    def _merge(self):
        symbols = self.symbols
        while self.agenda:
            _, left, right, length = heapq.heappop(self.agenda)
            left_symbol = symbols[left]
            right_symbol = symbols[right]

            # Superseded by an earlier merge
            if (
                not left_symbol.text
                or not right_symbol.text
                or len(left_symbol.text) + len(right_symbol.text) != length
            ):
                continue

            left_symbol.text += right_symbol.text
            left_symbol.next = right_symbol.next
            if right_symbol.next != _NONE:
                symbols[right_symbol.next].prev = left
            right_symbol.text = ""

            self._maybe_add_pair(left_symbol.prev, left)
            self._maybe_add_pair(left, left_symbol.next)

    def _resegment(self, text: str, output: List[EncodedPiece]):
        stack = [text]
        while stack:
            w = stack.pop()
            piece_id = self.registry.id_of(w)
            pair = self.rev_merge.get(w)
            if not self.registry.is_unused(piece_id) or pair is None:
                output.append(EncodedPiece(w, piece_id))
                continue
            # Right first so the left half is expanded first
            stack.append(pair[1])
            stack.append(pair[0])

    def encode(self) -> List[EncodedPiece]:
        self._split()
        if not self.symbols:
            return []

        for i in range(1, len(self.symbols)):
            self._maybe_add_pair(i - 1, i)

        self._merge()

        output: List[EncodedPiece] = []
        index = 0
        while index != _NONE:
            symbol = self.symbols[index]
            if symbol.text:
                self._resegment(symbol.text, output)
            index = symbol.next
        return output


class BytePairEncodingModel:
    """
    Sentencepiece-style BPE encoder over a fixed vocabulary.

    The registry and prefix matcher are built once and never mutated, so one
    model can serve concurrent `encode` calls from several threads.

    Args:
        pieces: Ordered vocabulary pieces (position = id)
        unk_piece: Label of the unknown piece (default: "<unk>")
        bos_piece: Label of the begin-of-sequence piece (default: "<s>")
        eos_piece: Label of the end-of-sequence piece (default: "</s>")
        pad_piece: Label of the padding piece (default: "<pad>")

    Example:
        >>> model = BytePairEncodingModel([
        ...     SentencePiece("<unk>", category=PieceCategory.UNKNOWN),
        ...     SentencePiece("ab", -0.1),
        ...     SentencePiece("a", -0.2),
        ...     SentencePiece("b", -0.3),
        ... ])
        >>> model.encode("abx")
        [EncodedPiece(text='ab', id=1), EncodedPiece(text='x', id=0)]
    """

    def __init__(
        self,
        pieces: Iterable[SentencePiece],
        unk_piece: Optional[str] = None,
        bos_piece: Optional[str] = None,
        eos_piece: Optional[str] = None,
        pad_piece: Optional[str] = None,
    ):
        self._registry = VocabularyRegistry(
            pieces,
            unk_piece=unk_piece,
            bos_piece=bos_piece,
            eos_piece=eos_piece,
            pad_piece=pad_piece,
        )
        self._matcher = PrefixMatcher(self._registry.user_defined_symbols)

    @classmethod
    def from_config(
        cls, pieces: Iterable[SentencePiece], config: TokenizerConfig
    ) -> "BytePairEncodingModel":
        return cls(pieces, **config.to_dict())

    @property
    def vocabulary(self) -> VocabularyRegistry:
        return self._registry

    @property
    def prefix_matcher(self) -> PrefixMatcher:
        return self._matcher

    def encode(self, normalized: str) -> List[EncodedPiece]:
        """
        Split normalized text into vocabulary pieces.

        Args:
            normalized: Unicode-normalized input text

        Returns:
            List of (piece text, piece id); the texts concatenate back to the input.
            Text without a registered piece gets the unknown id.
        """
        if not normalized:
            return []
        return _Encoder(self._registry, self._matcher, normalized).encode()

    def tokenize(self, sentence: str) -> List[str]:
        """Return only the piece texts of `encode`."""
        return [piece.text for piece in self.encode(sentence)]

    def build_sentence(self, tokens: Sequence[str]) -> str:
        """Join piece texts back into a sentence."""
        return "".join(tokens)

    def encode_ids(self, text: str, add_special_tokens: bool = False) -> List[int]:
        """
        Encode text to piece ids.

        Args:
            text: Normalized text to encode
            add_special_tokens: Wrap in begin/end-of-sequence ids when those are registered

        Returns:
            List of piece ids
        """
        ids = [piece.id for piece in self.encode(text)]
        if add_special_tokens:
            bos_id = self._registry.bos_id
            eos_id = self._registry.eos_id
            if bos_id is not None:
                ids.insert(0, bos_id)
            if eos_id is not None:
                ids.append(eos_id)
        return ids

    def decode(self, token_ids: Iterable[int], skip_special_tokens: bool = True) -> str:
        """
        Decode piece ids back to text.

        Args:
            token_ids: Piece ids
            skip_special_tokens: Whether to drop control pieces from the output

        Returns:
            Decoded text. Unknown ids decode to the unknown piece's own text.

        Raises:
            InvalidId: for ids outside the vocabulary
        """
        texts = []
        for token_id in token_ids:
            if skip_special_tokens and self._registry.is_control(token_id):
                continue
            texts.append(self._registry.text_of(token_id))
        return self.build_sentence(texts)

    def batch_encode(
        self,
        texts: List[str],
        padding: Union[bool, str] = False,
        truncation: bool = False,
        max_length: Optional[int] = None,
        add_special_tokens: bool = False,
        return_attention_mask: bool = True,
        show_progress: bool = False,
    ) -> BatchEncoding:
        """
        Encode multiple texts with optional padding and truncation.

        Args:
            texts: List of normalized texts
            padding: Padding strategy (True / "longest", "max_length", or False)
            truncation: Whether to truncate sequences to max_length
            max_length: Maximum sequence length
            add_special_tokens: Whether to add begin/end-of-sequence ids
            return_attention_mask: Whether to return attention masks
            show_progress: Show a progress bar

        Returns:
            BatchEncoding with input_ids and optionally attention_mask

        Example:
            >>> result = model.batch_encode(["ab", "abab"], padding="longest")
            >>> result.attention_mask  # [[1, 0], [1, 1]]
        """
        logger.debug(f"Batch encoding {len(texts)} texts")

        all_input_ids = [
            self.encode_ids(text, add_special_tokens=add_special_tokens)
            for text in tqdm(texts, desc="Encoding", disable=not show_progress)
        ]

        if truncation and max_length:
            all_input_ids = [ids[:max_length] for ids in all_input_ids]

        attention_masks = None
        if padding is True:
            padding = PaddingStrategy.LONGEST
        if padding:
            if padding == PaddingStrategy.MAX_LENGTH:
                if max_length is None:
                    raise ValueError("max_length must be specified with 'max_length' padding")
                target_length = max_length
            elif padding == PaddingStrategy.LONGEST:
                target_length = max((len(ids) for ids in all_input_ids), default=0)
            elif padding == PaddingStrategy.DO_NOT_PAD:
                target_length = 0
            else:
                raise ValueError(f"Unknown padding strategy: {padding!r}")

            if target_length > 0:
                pad_id = self._registry.pad_id
                if pad_id is None:
                    pad_id = self._registry.unk_id
                padded_ids = []
                attention_masks = []

                for ids in all_input_ids:
                    padding_length = max(target_length - len(ids), 0)
                    padded_ids.append(ids + [pad_id] * padding_length)
                    attention_masks.append([1] * len(ids) + [0] * padding_length)

                all_input_ids = padded_ids

        if return_attention_mask and attention_masks is None:
            attention_masks = [[1] * len(ids) for ids in all_input_ids]
        if not return_attention_mask:
            attention_masks = None

        return BatchEncoding(input_ids=all_input_ids, attention_mask=attention_masks)

    def __len__(self) -> int:
        """Return vocabulary size."""
        return len(self._registry)

    def __repr__(self) -> str:
        return (
            f"BytePairEncodingModel(vocab_size={len(self._registry)}, "
            f"user_defined={len(self._matcher)})"
        )
