from __future__ import annotations

from .counter import CounterService
from .documents import DocumentService
from .files import FileService
from .greeter import Greeter, greet

__all__ = [
    "CounterService",
    "DocumentService",
    "FileService",
    "Greeter",
    "greet",
]
