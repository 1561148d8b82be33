"""memora: SM-2 spaced repetition scheduling with memory-strength decay."""

from memora.consts import VERSION

__version__ = VERSION
