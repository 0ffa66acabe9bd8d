"""BPE piece tokenizer package root."""
