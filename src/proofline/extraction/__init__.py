"""Document traversal producing flat text and addressable segments."""

from .extractor import Extraction, ExtractionConfig, extract
from .keys import PLAIN_TEXT_KEYS, SKIP_KEYS, looks_like_prose
from .segments import PlainFieldRef, RichTextRef, Segment, SourceRef, TitleRef

__all__ = [
    "Extraction",
    "ExtractionConfig",
    "PLAIN_TEXT_KEYS",
    "PlainFieldRef",
    "RichTextRef",
    "SKIP_KEYS",
    "Segment",
    "SourceRef",
    "TitleRef",
    "extract",
    "looks_like_prose",
]
