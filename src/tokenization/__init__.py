"""
Tokenization module.

Provides the sentencepiece-style BPE encoder:
- Vocabulary registry (pieces, ids, scores, categories)
- Prefix matcher protecting user-defined symbols
- Greedy merge encoder with resegmentation of unused pieces
"""

from .errors import (
    TokenizationError,
    VocabularyError,
    InvalidVocabulary,
    DuplicatePiece,
    DuplicateUnknown,
    MissingUnknown,
    InvalidId,
    InvalidOffset,
)
from .vocabulary import PieceCategory, SentencePiece, VocabularyRegistry
from .prefix_matcher import PrefixMatcher
from .config import TokenizerConfig
from .bpe_model import (
    BatchEncoding,
    BytePairEncodingModel,
    EncodedPiece,
    PaddingStrategy,
)

__all__ = [
    'TokenizationError',
    'VocabularyError',
    'InvalidVocabulary',
    'DuplicatePiece',
    'DuplicateUnknown',
    'MissingUnknown',
    'InvalidId',
    'InvalidOffset',
    'PieceCategory',
    'SentencePiece',
    'VocabularyRegistry',
    'PrefixMatcher',
    'TokenizerConfig',
    'BatchEncoding',
    'BytePairEncodingModel',
    'EncodedPiece',
    'PaddingStrategy',
]
