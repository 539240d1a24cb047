"""Sub-query reprojection - rebuilds a field list from a parsed selection."""

from __future__ import annotations

from typing import Iterable, Mapping

from graphql import (
    FieldNode,
    FragmentDefinitionNode,
    FragmentSpreadNode,
    InlineFragmentNode,
    OperationDefinitionNode,
    SelectionNode,
    parse,
)


def get_sub_query(
    selections: Iterable[SelectionNode],
    fragments: Mapping[str, FragmentDefinitionNode] | None = None,
) -> str:
    """
    Reproject a selection set into the field-selection grammar.

    Fields are rendered depth-first, left to right, as ``" name"``; a field
    with its own selection is followed by ``" { ... } "``. No reordering,
    de-duplication or validation is done.

    Named fragment spreads found in ``fragments`` are inlined as
    ``... on Type { ... }`` so the result needs no fragment definitions.
    Spreads of unknown fragments are kept as ``...Name``.

    Example:
        selections of ``{ uuid key { uuid token } }`` reproject to
        ``" uuid key {  uuid token } "``
    """
    collect_query = ""

    for selection in selections:
        if isinstance(selection, FieldNode):
            collect_query += " " + selection.name.value
            if selection.selection_set is not None:
                collect_query += " { " + get_sub_query(selection.selection_set.selections, fragments) + " } "
        elif isinstance(selection, InlineFragmentNode):
            collect_query += " ..."
            if selection.type_condition is not None:
                collect_query += " on " + selection.type_condition.name.value
            collect_query += " { " + get_sub_query(selection.selection_set.selections, fragments) + " } "
        elif isinstance(selection, FragmentSpreadNode):
            fragment = fragments.get(selection.name.value) if fragments else None
            if fragment is None:
                collect_query += " ..." + selection.name.value
            else:
                collect_query += " ... on " + fragment.type_condition.name.value
                collect_query += " { " + get_sub_query(fragment.selection_set.selections, fragments) + " } "

    return collect_query


def get_field_sub_query(
    field_nodes: Iterable[FieldNode],
    fragments: Mapping[str, FragmentDefinitionNode] | None = None,
) -> str:
    """Reproject the selections under the given field nodes."""
    collect_query = ""
    for node in field_nodes:
        if node.selection_set is not None:
            collect_query += get_sub_query(node.selection_set.selections, fragments)
    return collect_query


def parse_selections(text: str) -> tuple[SelectionNode, ...]:
    """
    Parse a field list (with or without surrounding braces) into selections.

    Raises:
        graphql.GraphQLError: If the text is not a valid selection set
    """
    stripped = text.strip()
    if not stripped.startswith("{"):
        stripped = "{" + stripped + "}"

    document = parse(stripped, no_location=True)
    operation = document.definitions[0]
    if not isinstance(operation, OperationDefinitionNode):
        raise ValueError(f"Not a selection set: {text!r}")
    return tuple(operation.selection_set.selections)
