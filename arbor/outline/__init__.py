"""
Outline text handling for content trees.

- OutlineParser: indented text -> content tree
- OutlineNormalizer: loose generated candidate -> content tree
- serialize: content tree -> minimal JSON or markdown list
"""

from arbor.outline.normalizer import OutlineNormalizer, extract_json, normalize_outline
from arbor.outline.parser import OutlineParser, infer_indent_unit, parse_outline
from arbor.outline.serializer import serialize, to_markdown, to_minimal

__all__ = [
    "OutlineNormalizer",
    "OutlineParser",
    "extract_json",
    "infer_indent_unit",
    "normalize_outline",
    "parse_outline",
    "serialize",
    "to_markdown",
    "to_minimal",
]
