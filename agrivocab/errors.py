"""Errors raised by catalog loading, configuration and review scoring."""
from __future__ import annotations


class AgriVocabError(Exception):
    """Base class; the message is meant to be shown to the learner."""


class CatalogUnavailable(AgriVocabError):
    """The source table could not be retrieved or held no usable rows."""


class InvalidConfiguration(AgriVocabError):
    """Settings are malformed (bad sheet URL, rate out of range, ...)."""


class EmptyBatchError(AgriVocabError, ValueError):
    """Review scoring was called without any answered questions."""


class IncompleteReviewError(AgriVocabError, ValueError):
    """Review scoring was called before every question in the batch was answered."""
