"""Exceptions raised outside the pure scheduling core."""


class MemoraError(Exception):
    """Base class for all memora errors."""


class ReviewStoreError(MemoraError):
    """The review store could not be read or written."""


class InvalidSubmissionError(MemoraError):
    """A review submission is missing its card or deck identifier."""
