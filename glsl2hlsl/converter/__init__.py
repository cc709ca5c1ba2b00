"""
GLSL to HLSL conversion.

This module provides the top-level interface for converting fixed-contract GLSL
fragment shaders to HLSL (Shader Model 5). The conversion is a fixed sequence of
text rewrite passes; each pass is a total function from text to text.
"""

from collections.abc import Callable, Sequence

from loguru import logger

from glsl2hlsl.converter.contracts import (
    Contract,
    InputContract,
    create_contract,
    detect_contract,
)
from glsl2hlsl.converter.expressions import (
    rewrite_array_constructors,
    rewrite_atan,
    rewrite_clamp_saturate,
    rewrite_matrix_multiply,
    rewrite_scalar_broadcast,
    rewrite_static_const,
)
from glsl2hlsl.converter.formatter import tidy_blank_lines
from glsl2hlsl.converter.renamer import rename_builtins, rename_types
from glsl2hlsl.models import UniformSpec

Pass = Callable[[str], str]


def _build_passes(contract: Contract, uniforms: Sequence[UniformSpec]) -> list[Pass]:
    """List the passes in the order their data dependencies require.

    Types are renamed before the matrix scan, which looks for HLSL matrix tokens.
    The header introduces the resolution name that the entry point's origin flip
    uses, so it comes before the entry-point transform.
    """
    return [
        lambda text: contract.rewrite_header(text, uniforms),
        rename_types,
        rewrite_matrix_multiply,
        rewrite_scalar_broadcast,
        rename_builtins,
        rewrite_atan,
        contract.rename_runtime_names,
        rewrite_clamp_saturate,
        contract.rewrite_entry_point,
        rewrite_array_constructors,
        rewrite_static_const,
        tidy_blank_lines,
    ]


def convert_glsl_to_hlsl(
    source: str,
    uniforms: Sequence[UniformSpec] | None = None,
    contract: InputContract | None = None,
) -> str:
    """Convert a GLSL fragment shader to HLSL.

    Args:
        source: GLSL source following the input contract
        uniforms: Manifest-declared custom uniforms, in declaration order
        contract: Input contract; detected from the source when omitted

    Returns:
        HLSL source
    """
    if contract is None:
        contract = detect_contract(source)
        logger.debug(f"Detected {contract.name} input contract")

    contract_impl = create_contract(contract)
    text = source
    for rewrite in _build_passes(contract_impl, uniforms or ()):
        text = rewrite(text)

    logger.debug(
        f"Converted {len(source)} chars of GLSL to {len(text)} chars of HLSL "
        f"({contract_impl.config.name} contract)"
    )
    return text


__all__ = [
    "InputContract",
    "convert_glsl_to_hlsl",
    "detect_contract",
]
