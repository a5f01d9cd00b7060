"""
Expression builder: field-access and validity-check expression strings.

Every function here is a pure string constructor. Outputs use the renderer's
expression language (`datum[...]` access, `isValid`, `isFinite`, `isDate`,
`inrange`, `indexof`).

Responsibilities
- Split and flatten field access paths (`a.b`, `a["b"]`, escaped dots).
- Build datum accessors for raw and synthetic field names.
- Build validity predicates used by invalid-value filtering and conditional encodings.
- Render field predicates and logical compositions used in `condition.test`.

Examples
--------
>>> from chartc.expr import flat_access_with_datum, is_valid_finite_number_expr
>>> ref = flat_access_with_datum("price")
>>> ref
'datum["price"]'
>>> is_valid_finite_number_expr(ref)
'isValid(datum["price"]) && isFinite(+datum["price"])'
"""

from __future__ import annotations

import json
from collections.abc import Mapping, Sequence
from typing import Any

from chartc.core.errors import SpecError

__all__ = [
    "split_access_path",
    "remove_path_from_field",
    "replace_path_in_field",
    "string_value",
    "format_number",
    "literal",
    "flat_access_with_datum",
    "datum_access",
    "is_valid_finite_number_expr",
    "field_valid_predicate",
    "predicate_expression",
]


def split_access_path(path: str) -> list[str]:
    """
    Split a field access path into its segments.

    Dots separate segments unless escaped with a backslash; bracket access with
    quoted keys (`a["b.c"]`) keeps the quoted key as one segment.

    Raises:
        SpecError: If a bracket or quote is left open.

    Examples:
        >>> split_access_path('a.b')
        ['a', 'b']
        >>> split_access_path('a["b.c"]')
        ['a', 'b.c']
        >>> split_access_path('a\\\\.b')
        ['a.b']
    """
    p = str(path)
    n = len(p)
    segments: list[str] = []
    quote: str | None = None
    bracket = 0
    prefix = ""
    i = j = 0

    def push(end: int) -> None:
        nonlocal prefix, i
        segments.append(prefix + p[i:end])
        prefix = ""
        i = end + 1

    while j < n:
        c = p[j]
        if c == "\\":
            prefix += p[i:j]
            j += 1
            i = j
        elif c == quote:
            push(j)
            quote = None
            bracket = -1
        elif quote:
            pass
        elif i == bracket and c in ('"', "'"):
            i = j + 1
            quote = c
        elif c == "." and not bracket:
            if j > i:
                push(j)
            else:
                i = j + 1
        elif c == "[":
            if j > i:
                push(j)
            bracket = i = j + 1
        elif c == "]":
            if not bracket:
                raise SpecError(f"Access path missing open bracket: {path}")
            if j > i:
                push(j)
            bracket = 0
            i = j + 1
        j += 1

    if bracket:
        raise SpecError(f"Access path missing closing bracket: {path}")
    if quote:
        raise SpecError(f"Access path missing closing quote: {path}")
    if j > i:
        push(j)
    return segments


def remove_path_from_field(path: str) -> str:
    """Flatten a path for use as an output name: `a["b"].c` becomes `a.b.c`."""
    return ".".join(split_access_path(path))


def replace_path_in_field(path: str) -> str:
    """Flatten a path while escaping its dots: `a["b"].c` becomes `a\\.b\\.c`."""
    return "\\.".join(seg.replace(".", "\\.") for seg in split_access_path(path))


def string_value(s: str) -> str:
    """Quote a string as an expression-language literal."""
    return json.dumps(s, ensure_ascii=False)


def format_number(n: float | int) -> str:
    """Render a number the way the expression language prints it (`3`, not `3.0`)."""
    if isinstance(n, bool):
        raise TypeError("booleans are not numbers here")
    if isinstance(n, float) and n.is_integer():
        return str(int(n))
    return repr(n)


def literal(value: Any) -> str:
    """Render a scalar or list as an expression-language literal."""
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return format_number(value)
    if isinstance(value, (list, tuple)):
        return "[" + ", ".join(literal(v) for v in value) + "]"
    return json.dumps(value, ensure_ascii=False)


def flat_access_with_datum(path: str, datum: str = "datum") -> str:
    """Access a (possibly nested) field through its flattened name on `datum`."""
    return f"{datum}[{string_value(remove_path_from_field(path))}]"


def datum_access(name: str) -> str:
    """Access a synthetic field name verbatim, e.g. `datum["lower_box_value"]`."""
    return f"datum[{string_value(name)}]"


def is_valid_finite_number_expr(ref: str) -> str:
    return f"isValid({ref}) && isFinite(+{ref})"


def field_valid_predicate(ref: str, valid: bool = True) -> str:
    """Predicate that is true when `ref` is valid (or, with valid=False, invalid)."""
    if valid:
        return is_valid_finite_number_expr(ref)
    return f"!isValid({ref}) || !isFinite(+{ref})"


def _field_predicate_expression(predicate: Mapping[str, Any]) -> str:
    if "timeUnit" in predicate:
        raise SpecError("time-unit field predicates are not supported")
    ref = flat_access_with_datum(predicate["field"])
    if "equal" in predicate:
        return f"{ref}==={literal(predicate['equal'])}"
    if "lt" in predicate:
        return f"{ref}<{literal(predicate['lt'])}"
    if "lte" in predicate:
        return f"{ref}<={literal(predicate['lte'])}"
    if "gt" in predicate:
        return f"{ref}>{literal(predicate['gt'])}"
    if "gte" in predicate:
        return f"{ref}>={literal(predicate['gte'])}"
    if "range" in predicate:
        lower, upper = predicate["range"]
        if lower is not None and upper is not None:
            return f"inrange({ref}, [{literal(lower)}, {literal(upper)}])"
        if lower is not None:
            return f"{ref} >= {literal(lower)}"
        if upper is not None:
            return f"{ref} <= {literal(upper)}"
        return "true"
    one_of = predicate.get("oneOf", predicate.get("in"))
    if one_of is not None:
        return f"indexof({literal(list(one_of))}, {ref}) !== -1"
    if "valid" in predicate:
        return field_valid_predicate(ref, bool(predicate["valid"]))
    raise SpecError(f"Unrecognized field predicate: {dict(predicate)!r}")


def predicate_expression(predicate: Any) -> str:
    """
    Render a test predicate as an expression string.

    Strings pass through unchanged. Mappings may be field predicates
    (`{"field": "a", "gt": 3}`) or logical compositions
    (`{"and": [...]}`, `{"or": [...]}`, `{"not": ...}`).

    Examples:
        >>> predicate_expression({"field": "a", "gt": 3})
        'datum["a"]>3'
        >>> predicate_expression({"not": "datum.a > 1"})
        '!(datum.a > 1)'
    """
    if isinstance(predicate, str):
        return predicate
    if isinstance(predicate, Mapping):
        if "and" in predicate:
            return " && ".join(f"({predicate_expression(p)})" for p in _seq(predicate["and"]))
        if "or" in predicate:
            return " || ".join(f"({predicate_expression(p)})" for p in _seq(predicate["or"]))
        if "not" in predicate:
            return f"!({predicate_expression(predicate['not'])})"
        if "field" in predicate:
            return _field_predicate_expression(predicate)
    raise SpecError(f"Unrecognized predicate: {predicate!r}")


def _seq(value: Any) -> Sequence[Any]:
    return value if isinstance(value, (list, tuple)) else [value]
