"""
Configuration for the BPE piece model.

Only the reserved labels live here; the vocabulary itself is always passed in
as a list of pieces.

Example YAML:
    unk_piece: "<unk>"
    bos_piece: "<bos>"
    eos_piece: "<eos>"
    pad_piece: "<pad>"
"""

from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Union

import yaml

from .vocabulary import (
    DEFAULT_BOS_PIECE,
    DEFAULT_EOS_PIECE,
    DEFAULT_PAD_PIECE,
    DEFAULT_UNK_PIECE,
)


@dataclass
class TokenizerConfig:
    """
    Reserved piece labels used by the tokenizer.

    Args:
        unk_piece: Label of the unknown piece
        bos_piece: Label of the begin-of-sequence piece
        eos_piece: Label of the end-of-sequence piece
        pad_piece: Label of the padding piece
    """
    unk_piece: str = DEFAULT_UNK_PIECE
    bos_piece: str = DEFAULT_BOS_PIECE
    eos_piece: str = DEFAULT_EOS_PIECE
    pad_piece: str = DEFAULT_PAD_PIECE

    def __post_init__(self):
        """Validate configuration."""
        defaults = {
            "unk_piece": DEFAULT_UNK_PIECE,
            "bos_piece": DEFAULT_BOS_PIECE,
            "eos_piece": DEFAULT_EOS_PIECE,
            "pad_piece": DEFAULT_PAD_PIECE,
        }
        for name, default in defaults.items():
            value = getattr(self, name)
            if value is None or value == "":
                setattr(self, name, default)
            elif not isinstance(value, str):
                raise ValueError(f"{name} must be a string, got {type(value).__name__}")

        labels = [self.unk_piece, self.bos_piece, self.eos_piece, self.pad_piece]
        if len(set(labels)) != len(labels):
            raise ValueError(f"Reserved piece labels must be distinct, got {labels}")

    @classmethod
    def from_dict(cls, config_dict: Dict[str, Any]) -> "TokenizerConfig":
        known = {f.name for f in fields(cls)}
        unknown = set(config_dict) - known
        if unknown:
            raise ValueError(f"Unknown tokenizer config keys: {sorted(unknown)}")
        return cls(**config_dict)

    @classmethod
    def from_yaml(cls, path: Union[str, Path]) -> "TokenizerConfig":
        """
        Load configuration from a YAML file.

        Args:
            path: Path to a YAML file holding a mapping of label overrides

        Returns:
            Loaded configuration (defaults for an empty file)
        """
        with open(path, "r", encoding="utf-8") as f:
            config_dict = yaml.safe_load(f)

        if config_dict is None:
            return cls()
        if not isinstance(config_dict, dict):
            raise ValueError(f"Expected a mapping in {path}, got {type(config_dict).__name__}")
        return cls.from_dict(config_dict)

    def to_dict(self) -> Dict[str, str]:
        return {f.name: getattr(self, f.name) for f in fields(self)}
