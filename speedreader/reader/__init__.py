"""Reader core: tokenizer, pacing engine and word-index synchronizer."""
