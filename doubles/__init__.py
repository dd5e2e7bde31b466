from __future__ import annotations

from .matchers import ContainsMapping, contains_mapping, mappings_equal
from .recorder import CallRecorder, RecordedCall

__all__ = [
    "CallRecorder",
    "RecordedCall",
    "ContainsMapping",
    "contains_mapping",
    "mappings_equal",
]
