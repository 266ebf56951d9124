"""
Emission adapters.

Serialize generated declaration records to source text:

- python: importable Python modules
- records: JSON dump of the abstract declarations
- output: writing rendered text and checking it is current
"""

from .output import is_current, write_source
from .python import PythonEmitter, is_up_to_date, render_module, write_module
from .records import render_json

__all__ = [
    "PythonEmitter",
    "render_module",
    "write_module",
    "is_up_to_date",
    "render_json",
    "write_source",
    "is_current",
]
