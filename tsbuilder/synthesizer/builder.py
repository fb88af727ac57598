"""Builder synthesis: one structural declaration in, one builder spec out.

Pure and synchronous.  A declaration with no fields, a union-typed
declaration, or a generic declaration yields a :class:`Skip` instead of a
:class:`BuilderSpec`; the union and generic cases carry a warning.  A union
of primitives or literals counts as a union even though no fields are listed
for it, since its apparent type (String, Number, ...) has members.
"""

from __future__ import annotations

from typing import Optional

from tsbuilder.config import Config
from tsbuilder.parser.models import FieldModel, StructuralDeclaration
from tsbuilder.synthesizer.models import (
    AccumulatorSpec,
    BuilderSpec,
    ClassSpec,
    FunctionSpec,
    MethodKind,
    MethodSpec,
    ParameterSpec,
    Skip,
    SkipReason,
    TypeParameterSpec,
)
from tsbuilder.synthesizer.type_mapper import accepted_type
from tsbuilder.utils import to_pascal


def synthesize(
    declaration: StructuralDeclaration, config: Optional[Config] = None
) -> BuilderSpec | Skip:
    """Derive the builder for *declaration*, or the reason there is none."""
    config = config or Config()
    name = declaration.name

    if not declaration.fields and not declaration.is_primitive_union:
        return Skip(declaration_name=name, reason=SkipReason.NO_FIELDS)
    if declaration.is_union:
        return Skip(
            declaration_name=name,
            reason=SkipReason.UNION,
            diagnostic=f"Skipped type generation for union: {name}",
        )
    if declaration.type_parameters:
        return Skip(
            declaration_name=name,
            reason=SkipReason.GENERIC,
            diagnostic=f"Skipped type generation for generic: {name}",
        )

    emit, naming = config.emit, config.naming
    class_name = f"{name}{naming.class_suffix}"
    target_type = f"{emit.namespace_alias}.{name}"
    partial_target = f"{emit.partial_type}<{target_type}>"

    methods: list[MethodSpec] = []
    taken: set[str] = set()
    for field in declaration.fields:
        if field.name == naming.typename_field:
            continue
        setter = _setter(field, class_name, config, taken)
        taken.add(setter.name)
        methods.append(setter)

    methods.append(
        MethodSpec(
            name=naming.typename_method,
            kind=MethodKind.TYPENAME,
            return_type=class_name,
            field_name=naming.typename_field,
            value=name,
        )
    )
    methods.append(
        MethodSpec(
            name=naming.accessor_method,
            kind=MethodKind.ACCESSOR,
            return_type=target_type,
        )
    )

    return BuilderSpec(
        declaration_name=name,
        target_type=target_type,
        typename_field=naming.typename_field,
        builder_class=ClassSpec(
            name=class_name,
            accumulator=AccumulatorSpec(type=partial_target),
            methods=methods,
        ),
        factory=FunctionSpec(
            name=f"{naming.factory_prefix}{class_name}",
            type_parameters=[TypeParameterSpec(name="O", constraint=partial_target, default="{}")],
            parameters=[ParameterSpec(name="baseObj", type="O", optional=True)],
            return_type=class_name,
            constructs=class_name,
        ),
    )


def _setter(field: FieldModel, class_name: str, config: Config, taken: set[str]) -> MethodSpec:
    value_type = accepted_type(field.type, config.emit)
    name = f"{config.naming.setter_prefix}{to_pascal(field.name)}"
    candidate, n = name, 2
    while candidate in taken:
        candidate = f"{name}{n}"
        n += 1
    return MethodSpec(
        name=candidate,
        kind=MethodKind.SETTER,
        type_parameters=[TypeParameterSpec(name="P", constraint=value_type)],
        parameters=[ParameterSpec(name="val", type="P")],
        return_type=class_name,
        field_name=field.name,
        accepted_type=value_type,
    )
