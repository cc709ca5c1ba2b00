"""
Structural contract checks for GLSL input and HLSL output.

The converter does not validate what it is given. These checks report contract
violations as human readable strings so that callers can reject a shader before
conversion or catch converter limitations afterwards.
"""

import re
from collections.abc import Sequence

from glsl2hlsl.converter.constants import CUSTOM_BUFFER_NAME
from glsl2hlsl.converter.scanner import match_close, split_top_level
from glsl2hlsl.models import UniformSpec

# (pattern, violation) pairs that must match in the GLSL source
_GLSL_REQUIRED = [
    (
        re.compile(
            r"void\s+mainImage\s*\(\s*out\s+vec4\s+fragColor\s*,\s*in\s+vec2\s+fragCoord\s*\)"
        ),
        "missing void mainImage(out vec4 fragColor, in vec2 fragCoord)",
    ),
    (re.compile(r"fragColor\s*="), "never assigns to fragColor"),
]

# (pattern, violation) pairs that must not match in the GLSL source
_GLSL_FORBIDDEN = [
    (re.compile(r"#version"), "has a #version directive"),
    (re.compile(r"precision\s+\w+p\b"), "has a precision qualifier"),
    (re.compile(r"\buniform\b"), "has uniform declarations"),
    (re.compile(r"out\s+vec4\s+fragColor\s*;"), "has an out vec4 fragColor declaration"),
    (re.compile(r"void\s+main\s*\(\s*\)"), "has void main()"),
    (re.compile(r"\bgl_FragCoord\b"), "uses gl_FragCoord"),
    (re.compile(r"1920\.0"), "hardcodes a 1920 resolution"),
    (re.compile(r"1080\.0"), "hardcodes a 1080 resolution"),
]

_HLSL_REQUIRED = [
    (re.compile(r"Texture2D\s+tex0"), "missing Texture2D tex0"),
    (re.compile(r"SamplerState\s+sampler0"), "missing SamplerState sampler0"),
    (re.compile(r"cbuffer\s+TimeBuffer"), "missing cbuffer TimeBuffer"),
    (re.compile(r"\btime\b"), "missing time"),
    (
        re.compile(r"float4\s+main\s*\(\s*float4\s+pos\s*:\s*SV_Position"),
        "missing float4 main(float4 pos : SV_Position, ...)",
    ),
    (re.compile(r"\breturn\s+"), "main body has no return statement"),
]

_HLSL_FORBIDDEN = [
    (re.compile(r"\bvec[234]\b"), "has vec2/vec3/vec4 types"),
    (re.compile(r"\bfract\s*\("), "has fract( calls"),
    (re.compile(r"\bmix\s*\("), "has mix( calls"),
    (re.compile(r"\bgl_FragCoord\b"), "uses gl_FragCoord"),
    (re.compile(r"\bfragColor\b"), "uses fragColor"),
    (re.compile(r"#version"), "has a #version directive"),
    (re.compile(r"precision\s+mediump"), "has a precision qualifier"),
    (re.compile(r"\biTime\b"), "uses iTime"),
    (re.compile(r"\biResolution\b"), "uses iResolution"),
    (re.compile(r"\w+\[\d+\]\s*\("), "has a GLSL-style array constructor"),
    (
        re.compile(r"\bfloat2\s+uv\s*="),
        "redeclares uv, which is a main() parameter",
    ),
]

_NON_STATIC_CONST = re.compile(r"(?<!static\s)\bconst\s+(uint|int|float)\b")
_FLOAT_CONSTRUCTOR = re.compile(r"\bfloat([234])\s*\(")
_CUSTOM_BUFFER = re.compile(rf"cbuffer\s+{CUSTOM_BUFFER_NAME}\b[^{{]*\{{")


def _check_patterns(
    text: str,
    required: list[tuple[re.Pattern[str], str]],
    forbidden: list[tuple[re.Pattern[str], str]],
) -> list[str]:
    violations = [message for pattern, message in required if not pattern.search(text)]
    violations.extend(message for pattern, message in forbidden if pattern.search(text))
    return violations


def check_glsl_contract(source: str) -> list[str]:
    """Check GLSL source against the Shadertoy-style input contract.

    Args:
        source: GLSL shader source

    Returns:
        Violations, empty when the source follows the contract
    """
    return _check_patterns(source, _GLSL_REQUIRED, _GLSL_FORBIDDEN)


def find_single_arg_constructors(hlsl: str) -> list[str]:
    """Find ``floatN(x)`` calls, which fxc rejects with X3014.

    Cast syntax ``((float3)(x))`` is valid and ignored.

    Args:
        hlsl: HLSL source

    Returns:
        One ``line N: floatN(arg)`` entry per offending call
    """
    results: list[str] = []
    cursor = 0
    while True:
        match = _FLOAT_CONSTRUCTOR.search(hlsl, cursor)
        if match is None:
            break
        open_index = match.end() - 1
        close_index = match_close(hlsl, open_index)
        cursor = match.end()

        if match.start() > 0 and hlsl[match.start() - 1] == "(":
            continue
        inner = hlsl[open_index + 1 : close_index]
        if len(split_top_level(inner)) == 1:
            line_number = hlsl.count("\n", 0, match.start()) + 1
            results.append(f"line {line_number}: float{match.group(1)}({inner.strip()})")
    return results


def _custom_buffer_body(hlsl: str) -> str | None:
    match = _CUSTOM_BUFFER.search(hlsl)
    if match is None:
        return None
    open_index = match.end() - 1
    close_index = match_close(hlsl, open_index)
    if close_index >= len(hlsl):
        return None
    return hlsl[open_index + 1 : close_index]


def check_hlsl_output(
    hlsl: str,
    uniforms: Sequence[UniformSpec] = (),
    uses_texture: bool = False,
) -> list[str]:
    """Check converted HLSL against the output contract.

    Args:
        hlsl: Converter output
        uniforms: Custom uniforms the manifest declares
        uses_texture: Whether the shader samples the channel texture

    Returns:
        Violations, empty when the output follows the contract
    """
    violations = _check_patterns(hlsl, _HLSL_REQUIRED, _HLSL_FORBIDDEN)

    const_arrays = _NON_STATIC_CONST.findall(hlsl)
    if const_arrays:
        violations.append(f"has non-static const declarations: {const_arrays}")

    for constructor in find_single_arg_constructors(hlsl):
        violations.append(f"has a single-arg float constructor (X3014): {constructor}")

    if uses_texture:
        if re.search(r"texture(?:Lod)?\s*\(\s*iChannel0", hlsl):
            violations.append("still samples iChannel0 with texture()/textureLod()")
        if not re.search(r"tex0\.Sample(?:Level)?\(sampler0", hlsl):
            violations.append("never samples tex0 with sampler0")

    if uniforms:
        body = _custom_buffer_body(hlsl)
        if body is None:
            violations.append(f"missing cbuffer {CUSTOM_BUFFER_NAME}")
        else:
            for uniform in uniforms:
                if not re.search(rf"\b{re.escape(uniform.name)}\s*;", body):
                    violations.append(
                        f"custom uniform {uniform.name} not declared in "
                        f"cbuffer {CUSTOM_BUFFER_NAME}"
                    )

    return violations
