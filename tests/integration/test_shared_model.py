"""
Integration tests: one model shared across threads and end-to-end flows.

Run with: pytest tests/integration/test_shared_model.py -v
"""

import random
import threading

import pytest

from src.tokenization import (
    BytePairEncodingModel,
    PieceCategory,
    SentencePiece,
    TokenizerConfig,
)


@pytest.fixture(scope="module")
def model():
    pieces = [
        SentencePiece("<unk>", category=PieceCategory.UNKNOWN),
        SentencePiece("<s>", category=PieceCategory.CONTROL),
        SentencePiece("</s>", category=PieceCategory.CONTROL),
        SentencePiece("<pad>", category=PieceCategory.CONTROL),
        SentencePiece("<mask>", category=PieceCategory.USER_DEFINED),
        SentencePiece("▁the", -1.0),
        SentencePiece("▁th", -2.0, PieceCategory.UNUSED),
        SentencePiece("the", -2.5),
        SentencePiece("th", -3.0),
        SentencePiece("he", -3.5),
        SentencePiece("▁t", -4.0),
        SentencePiece("er", -4.5),
        SentencePiece("▁", -5.0),
    ] + [SentencePiece(c, -6.0 - i * 0.01) for i, c in enumerate("abcdefghijklmnopqrstuvwxyz")]
    return BytePairEncodingModel.from_config(pieces, TokenizerConfig())


def make_corpus(seed, count):
    rng = random.Random(seed)
    words = ["the", "other", "there", "<mask>", "zebra", "東京", "them"]
    return [
        "".join("▁" + rng.choice(words) for _ in range(rng.randint(1, 12)))
        for _ in range(count)
    ]


class TestSharedModel:
    """A single model serves concurrent encode calls."""

    def test_concurrent_encode_matches_sequential(self, model):
        corpus = make_corpus(seed=7, count=400)
        expected = [model.encode(text) for text in corpus]

        results = {}
        errors = []

        def worker(worker_id):
            try:
                results[worker_id] = [model.encode(text) for text in corpus]
            except Exception as e:  # surface failures in the main thread
                errors.append(e)

        threads = [threading.Thread(target=worker, args=(i,)) for i in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert not errors
        assert len(results) == 8
        for encoded in results.values():
            assert encoded == expected

    def test_round_trip_corpus(self, model):
        for text in make_corpus(seed=11, count=200):
            assert "".join(model.tokenize(text)) == text

    def test_mask_is_kept_whole(self, model):
        tokens = model.tokenize("▁the<mask>▁other")
        assert "<mask>" in tokens

    def test_unused_piece_is_unwound(self, model):
        """'▁th' is only a stepping stone towards '▁the'."""
        tokens = model.tokenize("▁th")
        assert "▁th" not in tokens
        assert "".join(tokens) == "▁th"

    def test_encode_decode(self, model):
        text = "▁the▁other"
        ids = model.encode_ids(text, add_special_tokens=True)

        assert ids[0] == model.vocabulary.bos_id
        assert ids[-1] == model.vocabulary.eos_id
        assert model.decode(ids) == text

    def test_batch_encode_pads_with_pad_id(self, model):
        batch = model.batch_encode(
            ["▁the", "▁the▁other▁zebra"], padding="longest"
        )
        pad_id = model.vocabulary.pad_id

        assert len(batch.input_ids[0]) == len(batch.input_ids[1])
        assert batch.input_ids[0][-1] == pad_id
        assert sum(batch.attention_mask[0]) == 1
