"""Raw markup intake and normalization.

The intake reads the extractor's output directory; the normalizer turns the
raw documents into the cleaned vocabulary described in markup/config.py.
"""

from .document import CleanedDocument
from .intake import RawDocument, RawMarkupSet, read_raw_documents
from .normalizer import (
    MarkupNormalizer,
    NormalizedMarkup,
    RefTarget,
    normalize_index,
    normalize_markup,
)

__all__ = [
    "CleanedDocument",
    "RawDocument",
    "RawMarkupSet",
    "read_raw_documents",
    "MarkupNormalizer",
    "NormalizedMarkup",
    "RefTarget",
    "normalize_index",
    "normalize_markup",
]
