"""Validation of generic type references.

Runs before schema resolution so a structurally invalid reference never
reaches the resolver. Declared parameter order always comes from the
resolver, never from the documentation.
"""

from openapi_docgen.errors import UndocumentedGenericTypeError, UnorderedGenericTypeError
from openapi_docgen.operation.base import TypeReference
from openapi_docgen.resolver import TypeSchemaResolver


def validate_type_reference(reference: TypeReference, resolver: TypeSchemaResolver) -> None:
    """Check argument completeness and order, innermost arguments first.

    Unknown types are skipped here; resolution reports them.
    """
    for argument in reference.arguments:
        validate_type_reference(argument, resolver)

    declared = resolver.generic_parameters(reference.name)
    if declared is None:
        return

    arguments = reference.arguments
    if not declared:
        if arguments:
            # type arguments on a non-generic type
            raise UndocumentedGenericTypeError(reference.name)
        return

    if len(arguments) != len(declared):
        raise UndocumentedGenericTypeError(reference.name)

    labels = [a.parameter for a in arguments]
    if not any(labels):
        return  # positional, taken in declaration order
    if None in labels or set(labels) != set(declared):
        raise UndocumentedGenericTypeError(reference.name)
    if labels != declared:
        raise UnorderedGenericTypeError(reference.name, declared)
