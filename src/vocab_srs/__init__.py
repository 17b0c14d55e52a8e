"""vocab-srs: spaced-repetition scheduling for vocabulary flashcards."""

from vocab_srs.consts import VERSION

__version__ = VERSION
