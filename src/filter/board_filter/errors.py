from __future__ import annotations


class FilterError(Exception):
    """Base class for errors raised by the content filter."""


class VocabularyError(FilterError):
    """The token vocabulary is missing or malformed. Fatal at startup."""


class InferenceError(FilterError):
    """The local model could not produce usable logits for a request."""


class ClassificationError(FilterError):
    """A remote classifier returned a response that could not be interpreted."""
