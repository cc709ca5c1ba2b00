"""Whole-token renaming of GLSL types, builtins and runtime names."""

import re

from glsl2hlsl.converter.constants import (
    BUILTIN_RENAMES,
    RESOLUTION_NAME,
    SAMPLER_NAME,
    TEXTURE_NAME,
    TIME_NAME,
    TYPE_RENAMES,
)


def _token_pattern(table: dict[str, str]) -> re.Pattern[str]:
    # Table order is kept, so longer tokens are tried first
    return re.compile(r"\b(" + "|".join(re.escape(name) for name in table) + r")\b")


_TYPE_PATTERN = _token_pattern(TYPE_RENAMES)
_BUILTIN_PATTERN = _token_pattern(BUILTIN_RENAMES)


def rename_types(text: str) -> str:
    """Replace GLSL vector and matrix type names with HLSL ones."""
    return _TYPE_PATTERN.sub(lambda m: TYPE_RENAMES[m.group(1)], text)


def rename_builtins(text: str) -> str:
    """Replace GLSL builtin function names that HLSL spells differently."""
    return _BUILTIN_PATTERN.sub(lambda m: BUILTIN_RENAMES[m.group(1)], text)


def rename_runtime_names(
    text: str,
    time_uniform: str,
    resolution_uniform: str | None,
    channel_uniform: str,
) -> str:
    """Point references to runtime uniforms at the HLSL resources.

    Args:
        text: Buffer to rewrite
        time_uniform: GLSL name of the time uniform (e.g. ``iTime``)
        resolution_uniform: GLSL name of the resolution uniform, if any
        channel_uniform: GLSL name of the channel sampler (e.g. ``iChannel0``)

    Returns:
        The rewritten buffer
    """
    text = re.sub(rf"\b{re.escape(time_uniform)}\b", TIME_NAME, text)
    if resolution_uniform:
        text = re.sub(rf"\b{re.escape(resolution_uniform)}\b", RESOLUTION_NAME, text)

    channel = re.escape(channel_uniform)
    text = re.sub(
        rf"\btextureLod\s*\(\s*{channel}\s*,",
        f"{TEXTURE_NAME}.SampleLevel({SAMPLER_NAME},",
        text,
    )
    text = re.sub(
        rf"\btexture\s*\(\s*{channel}\s*,",
        f"{TEXTURE_NAME}.Sample({SAMPLER_NAME},",
        text,
    )
    return text
