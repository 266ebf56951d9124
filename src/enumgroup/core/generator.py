"""
Code generator for grouped enums.

Turns a validated descriptor and its partition index into abstract
declaration records. Each artifact is generated independently: a failing
dispatch request is reported and skipped while every other artifact is
still produced.

Generated artifacts:
- types: detailed base type, one base type per group, one type per variant
- group_enum: one payload-free member per group
- group_of: variant -> group member table
- variants_of: group member -> variant types table
- predicates: is_<group>(value) per group
- match_group: generic grouped match taking one handler per group
- dispatch: named grouped matches bound to imported handlers
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

from . import ir
from .errors import GenerationError, PreconditionError
from .naming import (
    GROUP_OF,
    MATCH_GROUP,
    RESERVED_HELPER_NAMES,
    RESERVED_MODULE_NAMES,
    VALUE_PARAM,
    VARIANTS_OF,
    handler_param,
    is_identifier,
    predicate_name,
)
from .partition import PartitionIndex
from .validator import ValidatedDescriptor

logger = logging.getLogger(__name__)

# Return type reference of handler-driven functions: whatever the handlers return.
HANDLER_RESULT = "handler_result"

ARTIFACT_DEPENDENCIES: dict[ir.Artifact, tuple[ir.Artifact, ...]] = {
    ir.Artifact.TYPES: (),
    ir.Artifact.GROUP_ENUM: (),
    ir.Artifact.GROUP_OF: (ir.Artifact.TYPES, ir.Artifact.GROUP_ENUM),
    ir.Artifact.VARIANTS_OF: (ir.Artifact.TYPES, ir.Artifact.GROUP_ENUM),
    ir.Artifact.PREDICATES: (ir.Artifact.GROUP_OF,),
    ir.Artifact.MATCH_GROUP: (ir.Artifact.GROUP_OF,),
    ir.Artifact.DISPATCH: (ir.Artifact.GROUP_OF,),
}


def resolve_artifacts(requested: Iterable[ir.Artifact] | None = None) -> list[ir.Artifact]:
    """
    Close a set of requested artifacts over their dependencies.

    Args:
        requested: Artifacts asked for; None means all of them

    Returns:
        Requested artifacts plus everything they depend on, in emission order
    """
    pending = list(ir.Artifact) if requested is None else list(requested)
    closed: set[ir.Artifact] = set()
    while pending:
        artifact = pending.pop()
        if artifact not in closed:
            closed.add(artifact)
            pending.extend(ARTIFACT_DEPENDENCIES[artifact])
    return [a for a in ir.Artifact if a in closed]


@dataclass
class GenerationResult:
    """
    Declarations produced by one pass, plus issues for artifacts that failed.

    Attributes:
        module: Successfully generated declarations
        errors: One issue per problem in a failed artifact
    """

    module: ir.GeneratedModule
    errors: list[ir.GenerationIssue] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors

    def raise_for_errors(self) -> ir.GeneratedModule:
        """Return the module, or raise GenerationError if anything failed."""
        if self.errors:
            raise GenerationError(self.errors)
        return self.module


class CodeGenerator:
    """
    Generate declaration records from a validated descriptor.

    The generator holds no state between calls; one instance may serve any
    number of descriptors.
    """

    def generate(
        self,
        validated: ValidatedDescriptor,
        index: PartitionIndex,
        *,
        artifacts: Iterable[ir.Artifact] | None = None,
        dispatches: Sequence[ir.DispatchRequest] = (),
    ) -> GenerationResult:
        """
        Generate the requested artifacts.

        Args:
            validated: Descriptor that passed validation
            index: Partition index built from the same descriptor
            artifacts: Artifacts to emit (dependencies are added); None for all
            dispatches: Named dispatch functions to emit

        Returns:
            GenerationResult with declarations and per-artifact errors

        Raises:
            PreconditionError: If the descriptor was not validated or the
                index belongs to another descriptor
        """
        if not isinstance(validated, ValidatedDescriptor):
            raise PreconditionError(
                f"generate() requires a ValidatedDescriptor, got {type(validated).__name__}"
            )
        descriptor = validated.descriptor
        if not index.describes(descriptor):
            raise PreconditionError(
                f"Partition index for '{index.enum_name}' does not match "
                f"descriptor '{validated.name}'"
            )

        wanted = set(ir.Artifact) if artifacts is None else set(artifacts)
        if dispatches:
            wanted.add(ir.Artifact.DISPATCH)
        selected = resolve_artifacts(wanted)
        logger.debug(
            "Generating %s for '%s'", ", ".join(a.value for a in selected), validated.name
        )

        declarations: list[ir.Declaration] = []
        errors: list[ir.GenerationIssue] = []

        for artifact in selected:
            if artifact == ir.Artifact.TYPES:
                declarations.extend(self._generate_types(descriptor, index))
            elif artifact == ir.Artifact.GROUP_ENUM:
                declarations.append(self._generate_group_enum(descriptor, index))
            elif artifact == ir.Artifact.GROUP_OF:
                declarations.append(self._generate_group_of(index))
            elif artifact == ir.Artifact.VARIANTS_OF:
                declarations.append(self._generate_variants_of(index))
            elif artifact == ir.Artifact.PREDICATES:
                declarations.extend(self._generate_predicates(index))
            elif artifact == ir.Artifact.MATCH_GROUP:
                declarations.append(self._generate_match_group(descriptor, index))
            elif artifact == ir.Artifact.DISPATCH:
                taken = self._taken_names(descriptor, index)
                for request in dispatches:
                    decl, issues = self._generate_dispatch(descriptor, index, request, taken)
                    if issues:
                        logger.debug(
                            "Dispatch '%s' for '%s' failed with %d issue(s)",
                            request.name,
                            descriptor.name,
                            len(issues),
                        )
                        errors.extend(issues)
                    else:
                        declarations.append(decl)
                    taken.add(request.name)

        module = ir.GeneratedModule(
            enum_name=descriptor.name,
            group_enum=descriptor.group_enum,
            imports=list(descriptor.imports),
            declarations=declarations,
        )
        return GenerationResult(module=module, errors=errors)

    # === Types ===

    def _generate_types(
        self, descriptor: ir.EnumDescriptor, index: PartitionIndex
    ) -> list[ir.Declaration]:
        declarations: list[ir.Declaration] = [
            ir.DetailedTypeDecl(
                name=descriptor.name,
                decorators=list(descriptor.decorators),
                doc=descriptor.doc,
            )
        ]
        for group in descriptor.groups:
            declarations.append(
                ir.GroupTypeDecl(
                    name=group.name,
                    base=descriptor.name,
                    variants=list(index.variants_of(group.name)),
                    decorators=list(descriptor.decorators),
                    doc=group.doc,
                )
            )
            for variant in group.variants:
                declarations.append(
                    ir.VariantTypeDecl(
                        name=variant.name,
                        base=group.name,
                        payload=variant.payload,
                        decorators=[*descriptor.decorators, *variant.decorators],
                        doc=variant.doc,
                    )
                )
        return declarations

    def _generate_group_enum(
        self, descriptor: ir.EnumDescriptor, index: PartitionIndex
    ) -> ir.GroupEnumDecl:
        return ir.GroupEnumDecl(
            name=descriptor.group_enum,
            members=list(index.groups),
            doc=f"Group tags of {descriptor.name}.",
        )

    # === Conversions ===

    def _value_param(self, index: PartitionIndex) -> ir.Parameter:
        return ir.Parameter(name=VALUE_PARAM, role=ir.ParamRole.VALUE, type_ref=index.enum_name)

    def _generate_group_of(self, index: PartitionIndex) -> ir.FunctionDecl:
        """Total variant -> group table; one arm per variant."""
        return ir.FunctionDecl(
            artifact=ir.Artifact.GROUP_OF,
            name=GROUP_OF,
            function=ir.FunctionKind.GROUP_OF,
            params=[self._value_param(index)],
            returns=index.group_enum,
            table=ir.DispatchTable(
                key=ir.TableKey.VARIANT,
                arms=[
                    ir.DispatchArm(match=variant, targets=[index.group_of(variant)])
                    for variant in index.variants
                ],
            ),
            doc=f"Return the {index.group_enum} member of a {index.enum_name} value.",
        )

    def _generate_variants_of(self, index: PartitionIndex) -> ir.FunctionDecl:
        return ir.FunctionDecl(
            artifact=ir.Artifact.VARIANTS_OF,
            name=VARIANTS_OF,
            function=ir.FunctionKind.VARIANTS_OF,
            params=[
                ir.Parameter(name="group", role=ir.ParamRole.GROUP, type_ref=index.group_enum)
            ],
            returns=index.enum_name,
            table=ir.DispatchTable(
                key=ir.TableKey.GROUP,
                arms=[
                    ir.DispatchArm(match=group, targets=list(index.variants_of(group)))
                    for group in index.groups
                ],
            ),
            doc=f"Return the {index.enum_name} variant types of a group, in declaration order.",
        )

    def _generate_predicates(self, index: PartitionIndex) -> list[ir.FunctionDecl]:
        return [
            ir.FunctionDecl(
                artifact=ir.Artifact.PREDICATES,
                name=predicate_name(group),
                function=ir.FunctionKind.PREDICATE,
                params=[self._value_param(index)],
                returns="bool",
                table=ir.DispatchTable(key=ir.TableKey.GROUP, arms=[ir.DispatchArm(match=group)]),
                doc=f"Check whether a {index.enum_name} value belongs to group {group}.",
            )
            for group in index.groups
        ]

    # === Grouped matching ===

    def _destructure(self, group: ir.GroupSpec) -> ir.PayloadShape | None:
        # Uniformity was checked by the validator.
        if group.destructure and group.variants:
            return group.variants[0].payload
        return None

    def _generate_match_group(
        self, descriptor: ir.EnumDescriptor, index: PartitionIndex
    ) -> ir.FunctionDecl:
        params = [self._value_param(index)]
        arms = []
        for group in descriptor.groups:
            param = handler_param(group.name)
            params.append(
                ir.Parameter(
                    name=param,
                    role=ir.ParamRole.HANDLER,
                    type_ref=group.name,
                    keyword_only=True,
                )
            )
            arms.append(
                ir.DispatchArm(
                    match=group.name, handler=param, destructure=self._destructure(group)
                )
            )
        return ir.FunctionDecl(
            artifact=ir.Artifact.MATCH_GROUP,
            name=MATCH_GROUP,
            function=ir.FunctionKind.MATCH_GROUP,
            params=params,
            returns=HANDLER_RESULT,
            table=ir.DispatchTable(key=ir.TableKey.GROUP, arms=arms),
            doc=f"Route a {index.enum_name} value to the handler of its group.",
        )

    def _taken_names(self, descriptor: ir.EnumDescriptor, index: PartitionIndex) -> set[str]:
        names = {descriptor.name, descriptor.group_enum, *index.groups, *index.variants}
        names |= RESERVED_HELPER_NAMES | RESERVED_MODULE_NAMES
        names |= {predicate_name(group) for group in index.groups}
        return names

    def _generate_dispatch(
        self,
        descriptor: ir.EnumDescriptor,
        index: PartitionIndex,
        request: ir.DispatchRequest,
        taken: set[str],
    ) -> tuple[ir.FunctionDecl | None, list[ir.GenerationIssue]]:
        """
        Generate one named dispatch function.

        Returns:
            (declaration, []) on success, (None, issues) on failure
        """

        def issue(
            rule: ir.GenerationRule, message: str, group: str | None = None
        ) -> ir.GenerationIssue:
            return ir.GenerationIssue(
                rule=rule,
                message=message,
                enum_name=descriptor.name,
                group=group,
                artifact=request.name,
            )

        issues: list[ir.GenerationIssue] = []

        if not is_identifier(request.name):
            issues.append(
                issue(
                    ir.GenerationRule.INVALID_DISPATCH_NAME,
                    f"Dispatch name '{request.name}' is not a valid identifier",
                )
            )
        elif request.name in taken:
            issues.append(
                issue(
                    ir.GenerationRule.DISPATCH_NAME_COLLISION,
                    f"Dispatch name '{request.name}' is already used in the generated module",
                )
            )

        for group in index.groups:
            if group not in request.handlers:
                issues.append(
                    issue(
                        ir.GenerationRule.MISSING_GROUP_HANDLER,
                        f"Dispatch '{request.name}' has no handler for group '{group}'",
                        group=group,
                    )
                )

        for group, ref in request.handlers.items():
            if group not in index.variants_by_group:
                issues.append(
                    issue(
                        ir.GenerationRule.UNKNOWN_GROUP_HANDLER,
                        f"Dispatch '{request.name}' names undeclared group '{group}'",
                        group=group,
                    )
                )
            elif ir.HandlerRef.parse(ref) is None:
                issues.append(
                    issue(
                        ir.GenerationRule.INVALID_HANDLER_REFERENCE,
                        f"Handler '{ref}' for group '{group}' is not a "
                        "'module:attribute' reference",
                        group=group,
                    )
                )

        if issues:
            return None, issues

        arms = [
            ir.DispatchArm(
                match=group.name,
                handler=request.handlers[group.name],
                destructure=self._destructure(group),
            )
            for group in descriptor.groups
        ]
        declaration = ir.FunctionDecl(
            artifact=ir.Artifact.DISPATCH,
            name=request.name,
            function=ir.FunctionKind.DISPATCH,
            params=[self._value_param(index)],
            returns=HANDLER_RESULT,
            table=ir.DispatchTable(key=ir.TableKey.GROUP, arms=arms),
            doc=request.doc or f"Dispatch a {index.enum_name} value to its group handler.",
        )
        return declaration, []
