"""
One generation pass: validate, partition, generate.

Each pass is a pure function of one descriptor. Nothing is shared between
passes, so independent descriptors can be processed in any order or in
parallel.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence

from . import ir
from .generator import CodeGenerator, GenerationResult
from .partition import partition
from .validator import ensure_valid

logger = logging.getLogger(__name__)


def generate_declarations(
    descriptor: ir.EnumDescriptor,
    artifacts: Iterable[ir.Artifact] | None = None,
    dispatches: Sequence[ir.DispatchRequest] = (),
) -> GenerationResult:
    """
    Run a pass and return the raw result, including per-artifact errors.

    Raises:
        ValidationError: If the descriptor is invalid (nothing is generated)
    """
    logger.debug("Validating '%s'", descriptor.name)
    validated = ensure_valid(descriptor)

    logger.debug("Partitioning '%s'", descriptor.name)
    index = partition(validated)

    return CodeGenerator().generate(
        validated, index, artifacts=artifacts, dispatches=dispatches
    )


def run_pipeline(
    descriptor: ir.EnumDescriptor,
    artifacts: Iterable[ir.Artifact] | None = None,
    dispatches: Sequence[ir.DispatchRequest] = (),
) -> ir.GeneratedModule:
    """
    Run a pass and return the generated module.

    Args:
        descriptor: Parsed descriptor
        artifacts: Artifacts to emit; None for all
        dispatches: Named dispatch functions to emit

    Returns:
        GeneratedModule with every requested declaration

    Raises:
        ValidationError: If the descriptor is invalid
        GenerationError: If any requested artifact failed
    """
    module = generate_declarations(descriptor, artifacts, dispatches).raise_for_errors()
    logger.info(
        "Generated %d declaration(s) for '%s'", len(module.declarations), descriptor.name
    )
    return module
