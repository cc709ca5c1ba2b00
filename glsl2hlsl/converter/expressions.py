"""
Expression-level rewrites.

Each rewrite is a single left-to-right pass over the buffer that copies unmatched
regions verbatim. Call sites and operands are delimited with the balanced-scan
helpers, so nested calls inside arguments never truncate a match.
"""

import re

from loguru import logger

from glsl2hlsl.converter.constants import (
    SATURATE_LOWER,
    SATURATE_UPPER,
    STATIC_CONST_TYPES,
    VECTOR_ELEMENT_TYPES,
)
from glsl2hlsl.converter.scanner import (
    match_close,
    operand_end,
    operand_start,
    rewrite_calls,
    split_top_level,
)

_MATRIX_DECLARATION = re.compile(r"\bfloat[234]x[234]\s+([A-Za-z_]\w*)")
_MATRIX_OPERAND = re.compile(r"([A-Za-z_]\w*)\s*(?:\(.*\))?", re.DOTALL)
_SCALAR_LITERAL = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?[fF]?")

_VECTOR_CONSTRUCTOR = re.compile(
    r"\b((?:" + "|".join(VECTOR_ELEMENT_TYPES) + r")[234])\s*\("
)

_ARRAY_CONSTRUCTOR = re.compile(r"\b([A-Za-z_]\w*)\s*\[\s*(\d*)\s*\]\s*\(")
_DECLARATOR_TYPE = re.compile(r"\b([A-Za-z_]\w*)$")
_NON_TYPE_KEYWORDS = frozenset({"return", "else", "case", "in", "out", "inout"})

_ATAN_CALL = re.compile(r"\batan\s*\(")
_CLAMP_CALL = re.compile(r"\bclamp\s*\(")

_CONST_DECLARATION = re.compile(
    r"(^|[;{}])(\s*)const\s+((?:"
    + "|".join(STATIC_CONST_TYPES)
    + r"|bool)(?:[234](?:x[234])?)?)\b",
    re.MULTILINE,
)


def _skip_space(text: str, index: int) -> int:
    while index < len(text) and text[index].isspace():
        index += 1
    return index


def _skip_space_back(text: str, index: int) -> int:
    while index > 0 and text[index - 1].isspace():
        index -= 1
    return index


def collect_matrix_variables(text: str) -> frozenset[str]:
    """Collect every identifier declared with an HLSL matrix type.

    Args:
        text: Buffer whose types were already renamed to HLSL

    Returns:
        Names of matrix-typed locals, parameters and matrix-returning functions
    """
    return frozenset(match.group(1) for match in _MATRIX_DECLARATION.finditer(text))


def _is_matrix_valued(operand: str, matrix_names: frozenset[str]) -> bool:
    """Whether a product with a matrix factor stays a matrix."""
    if _SCALAR_LITERAL.fullmatch(operand):
        return True
    match = _MATRIX_OPERAND.fullmatch(operand)
    return match is not None and match.group(1) in matrix_names


def _product_chain_start(text: str, start: int, limit: int) -> int:
    """Extend a left operand over the ``*`` and ``/`` factors before it.

    Both operators group left to right, so ``a * b * m`` multiplies ``m`` by
    ``a * b`` rather than by ``b``.
    """
    while True:
        operator_end = _skip_space_back(text, start)
        if operator_end < 1 or text[operator_end - 1] not in "*/":
            return start
        if operator_end >= 2 and text[operator_end - 2] in "*/":
            return start
        factor_end = _skip_space_back(text, operator_end - 1)
        factor_start = operand_start(text, factor_end)
        if not limit <= factor_start < factor_end:
            return start
        start = factor_start


def _fold_trailing_factors(
    text: str,
    product: str,
    end: int,
    is_matrix: bool,
    matrix_names: frozenset[str],
) -> tuple[str, int]:
    """Keep wrapping a matrix-valued product in ``mul()`` while ``*`` follows.

    Returns:
        The product expression and the index just past its last factor
    """
    while is_matrix:
        after = _skip_space(text, end)
        if not text.startswith("*", after) or text.startswith("*=", after):
            break
        right_start = _skip_space(text, after + 1)
        right_end = operand_end(text, right_start)
        if right_end == right_start:
            break
        right = text[right_start:right_end]
        product = f"mul({product}, {right})"
        is_matrix = _is_matrix_valued(right, matrix_names)
        end = right_end
    return product, end


def _rewrite_matrix_name(text: str, name: str, matrix_names: frozenset[str]) -> str:
    """Wrap every infix multiply touching ``name`` in ``mul()``."""
    occurrence = re.compile(rf"(?<![\w.]){re.escape(name)}\b")
    pieces: list[str] = []
    cursor = 0
    search_from = 0

    while True:
        match = occurrence.search(text, search_from)
        if match is None:
            break

        start = match.start()
        end = match.end()
        search_from = end

        # Calls of matrix-returning functions are matrix operands too
        if end < len(text) and text[end] == "(":
            close_index = match_close(text, end)
            if close_index >= len(text):
                continue
            end = close_index + 1
        # Rows and swizzles are not matrices
        if end < len(text) and text[end] in "[.":
            continue

        matrix = text[start:end]
        before = _skip_space_back(text, start)
        after = _skip_space(text, end)

        # lvalue *= matrix, with the matrix as the whole right-hand side
        if (
            before >= 2
            and text[before - 2 : before] == "*="
            and text[after : after + 1] in (";", ")", ",")
        ):
            lvalue_end = _skip_space_back(text, before - 2)
            lvalue_start = operand_start(text, lvalue_end)
            if cursor <= lvalue_start < lvalue_end:
                lvalue = text[lvalue_start:lvalue_end]
                pieces.append(text[cursor:lvalue_end])
                pieces.append(f" = mul({lvalue}, {matrix})")
                cursor = search_from = end
                continue

        # operand * matrix
        if before >= 1 and text[before - 1] == "*" and text[before - 2 : before] != "**":
            left_end = _skip_space_back(text, before - 1)
            left_start = _product_chain_start(
                text, operand_start(text, left_end), cursor
            )
            if cursor <= left_start < left_end:
                left = text[left_start:left_end]
                product, product_end = _fold_trailing_factors(
                    text,
                    f"mul({left}, {matrix})",
                    end,
                    _is_matrix_valued(left, matrix_names),
                    matrix_names,
                )
                pieces.append(text[cursor:left_start])
                pieces.append(product)
                cursor = search_from = product_end
                continue

        # matrix * operand
        if text.startswith("*", after) and not text.startswith("*=", after):
            right_start = _skip_space(text, after + 1)
            right_end = operand_end(text, right_start)
            if right_end > right_start:
                right = text[right_start:right_end]
                product, product_end = _fold_trailing_factors(
                    text,
                    f"mul({matrix}, {right})",
                    right_end,
                    _is_matrix_valued(right, matrix_names),
                    matrix_names,
                )
                pieces.append(text[cursor:start])
                pieces.append(product)
                cursor = search_from = product_end

    pieces.append(text[cursor:])
    return "".join(pieces)


def rewrite_matrix_multiply(text: str) -> str:
    """Replace ``*`` products involving matrix variables with ``mul()``.

    HLSL does not overload ``*`` for matrix products. Matrix variables are found
    by name in a first pass; the second pass rewrites products with any of them.
    A non-matrix identifier sharing a matrix variable's name is rewritten too.

    Args:
        text: Buffer whose types were already renamed to HLSL

    Returns:
        The rewritten buffer
    """
    matrix_names = collect_matrix_variables(text)
    if matrix_names:
        logger.debug(f"Matrix variables: {sorted(matrix_names)}")

    for name in sorted(matrix_names):
        text = _rewrite_matrix_name(text, name, matrix_names)
    return text


def _broadcast_to_cast(match: re.Match[str], inner: str) -> str | None:
    args = split_top_level(inner)
    if len(args) != 1 or not args[0].strip():
        return None
    return f"(({match.group(1)})({args[0].strip()}))"


def rewrite_scalar_broadcast(text: str) -> str:
    """Rewrite single-argument vector constructors to casts.

    GLSL ``vec3(0.5)`` broadcasts the scalar; HLSL rejects ``float3(0.5)``
    (X3014) but accepts the cast ``((float3)(0.5))``.
    """
    return rewrite_calls(text, _VECTOR_CONSTRUCTOR, _broadcast_to_cast)


def _array_to_initializer(match: re.Match[str], inner: str) -> str:
    initializer = f"{{ {inner.strip()} }}"

    # "uint idx[3](...)" declares idx rather than constructing a uint[3]
    head = match.string[: match.start()].rstrip()
    preceding = _DECLARATOR_TYPE.search(head[-64:])
    if preceding and preceding.group(1) not in _NON_TYPE_KEYWORDS:
        return f"{match.group(1)}[{match.group(2)}] = {initializer}"
    return initializer


def rewrite_array_constructors(text: str) -> str:
    """Rewrite ``T[N](a, b, ...)`` array constructors to ``{ a, b, ... }``."""
    return rewrite_calls(text, _ARRAY_CONSTRUCTOR, _array_to_initializer)


def _atan_by_arity(match: re.Match[str], inner: str) -> str:
    if len(split_top_level(inner)) >= 2:
        return f"atan2({inner})"
    return f"atan({inner})"


def rewrite_atan(text: str) -> str:
    """Use ``atan2`` for two-argument ``atan`` calls."""
    return rewrite_calls(text, _ATAN_CALL, _atan_by_arity)


def _clamp_to_saturate(match: re.Match[str], inner: str) -> str:
    args = split_top_level(inner)
    if (
        len(args) == 3
        and args[1].strip() == SATURATE_LOWER
        and args[2].strip() == SATURATE_UPPER
    ):
        return f"saturate({args[0].strip()})"
    return "clamp(" + ", ".join(arg.strip() for arg in args) + ")"


def rewrite_clamp_saturate(text: str) -> str:
    """Fold ``clamp(x, 0.0, 1.0)`` into ``saturate(x)``.

    Only the exact literal bounds ``0.0`` and ``1.0`` qualify.
    """
    return rewrite_calls(text, _CLAMP_CALL, _clamp_to_saturate)


def rewrite_static_const(text: str) -> str:
    """Mark ``const`` declarations ``static const``.

    Non-static globals are uniforms in HLSL and ignore their initializers.
    """
    return _CONST_DECLARATION.sub(r"\1\2static const \3", text)
