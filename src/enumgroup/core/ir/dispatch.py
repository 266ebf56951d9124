"""
Grouped-match dispatch requests.

A DispatchRequest asks the generator for a named function that routes a
detailed-enum value to one handler per group. Handlers are referenced as
``"package.module:attribute"`` strings and imported by the emitted code.
"""

from __future__ import annotations

import re

from pydantic import BaseModel, ConfigDict, Field

_HANDLER_REF_RE = re.compile(
    r"^[A-Za-z_][A-Za-z0-9_]*(\.[A-Za-z_][A-Za-z0-9_]*)*:[A-Za-z_][A-Za-z0-9_]*$"
)


class HandlerRef(BaseModel):
    """
    Import reference to a handler callable.

    Attributes:
        module: Dotted module path
        attribute: Callable name inside the module
    """

    module: str
    attribute: str

    model_config = ConfigDict(frozen=True)

    @classmethod
    def parse(cls, ref: str) -> HandlerRef | None:
        """Parse 'module:attribute'; None when the reference is malformed."""
        if not _HANDLER_REF_RE.match(ref):
            return None
        module, attribute = ref.split(":")
        return cls(module=module, attribute=attribute)

    def __str__(self) -> str:
        return f"{self.module}:{self.attribute}"


class DispatchRequest(BaseModel):
    """
    Request for a grouped-match dispatch function.

    Attributes:
        name: Name of the generated function
        handlers: Group name -> handler reference ('module:attribute')
        doc: Optional docstring for the generated function
    """

    name: str
    handlers: dict[str, str] = Field(default_factory=dict)
    doc: str | None = None

    model_config = ConfigDict(frozen=True)
