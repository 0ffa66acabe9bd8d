"""
Smoke tests - Quick validation that core components work.

Run with: pytest tests/test_smoke.py -v
"""

import pytest
from pathlib import Path

PROJECT_ROOT = Path(__file__).parent.parent


class TestImports:
    """Test that all modules can be imported."""

    def test_import_tokenization_modules(self):
        """Test importing tokenization modules."""
        from src.tokenization import errors
        from src.tokenization import vocabulary
        from src.tokenization import prefix_matcher
        from src.tokenization import bpe_model
        from src.tokenization import config
        assert True

    def test_package_exports(self):
        import src.tokenization as tokenization

        for name in tokenization.__all__:
            assert hasattr(tokenization, name), f"Missing export: {name}"


class TestBasicFunctionality:
    """Test basic functionality of core components."""

    def test_registry_creation(self):
        from src.tokenization import PieceCategory, SentencePiece, VocabularyRegistry

        registry = VocabularyRegistry([
            SentencePiece("<unk>", category=PieceCategory.UNKNOWN),
            SentencePiece("a"),
        ])
        assert registry.vocabulary_size() == 2

    def test_prefix_matcher(self):
        from src.tokenization import PrefixMatcher

        matcher = PrefixMatcher(["<mask>"])
        assert matcher.find_longest_prefix("<mask>!", 0) == "<mask>"

    def test_encode(self):
        from src.tokenization import BytePairEncodingModel, PieceCategory, SentencePiece

        model = BytePairEncodingModel([
            SentencePiece("<unk>", category=PieceCategory.UNKNOWN),
            SentencePiece("ab", 1.0),
        ])
        assert model.encode("abc") == [("ab", 1), ("c", 0)]


class TestSystemHealth:
    """Test system configuration."""

    def test_project_structure(self):
        """Test that key directories exist."""
        key_dirs = [
            "src/tokenization",
            "configs",
            "tests",
        ]

        for dir_path in key_dirs:
            assert (PROJECT_ROOT / dir_path).exists(), f"Missing directory: {dir_path}"

    def test_config_files_load(self):
        """Test that shipped config files load."""
        from src.tokenization import TokenizerConfig

        config = TokenizerConfig.from_yaml(PROJECT_ROOT / "configs" / "tokenizer.yaml")
        assert config == TokenizerConfig()


if __name__ == "__main__":
    pytest.main([__file__, "-v", "-s"])
