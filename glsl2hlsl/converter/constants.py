"""
Constants and rename tables for the GLSL to HLSL converter.

This module contains the dictionaries used throughout the converter, including the
type and builtin function mappings and the fixed resource names of the output.
"""

# GLSL vector and matrix types mapped to their HLSL equivalents.
# Longer tokens come first so the alternation built from this table never
# stops at a shorter overlapping name.
TYPE_RENAMES: dict[str, str] = {
    "mat4": "float4x4",
    "mat3": "float3x3",
    "mat2": "float2x2",
    "ivec4": "int4",
    "ivec3": "int3",
    "ivec2": "int2",
    "uvec4": "uint4",
    "uvec3": "uint3",
    "uvec2": "uint2",
    "bvec4": "bool4",
    "bvec3": "bool3",
    "bvec2": "bool2",
    "vec4": "float4",
    "vec3": "float3",
    "vec2": "float2",
}

# Builtin functions whose HLSL name differs
BUILTIN_RENAMES: dict[str, str] = {
    "mix": "lerp",
    "fract": "frac",
    "mod": "fmod",
    "inversesqrt": "rsqrt",
    "dFdx": "ddx",
    "dFdy": "ddy",
}

# HLSL scalar element types that have 2/3/4 component vector forms
VECTOR_ELEMENT_TYPES: tuple[str, ...] = ("float", "int", "uint", "bool")

# Scalar types whose const declarations must become static const
STATIC_CONST_TYPES: tuple[str, ...] = ("uint", "int", "float")

# Literal bounds that let clamp() fold into saturate()
SATURATE_LOWER = "0.0"
SATURATE_UPPER = "1.0"

# Output resources
TEXTURE_NAME = "tex0"
SAMPLER_NAME = "sampler0"
TIME_NAME = "time"
RESOLUTION_NAME = "resolution"
TIME_BUFFER_NAME = "TimeBuffer"
CUSTOM_BUFFER_NAME = "CustomUniforms"

# Output entry point
ENTRY_POSITION = "pos"
ENTRY_TEXCOORD = "uv"
ENTRY_SIGNATURE = (
    f"float4 main(float4 {ENTRY_POSITION} : SV_Position, "
    f"float2 {ENTRY_TEXCOORD} : TEXCOORD0) : SV_Target"
)

# Constant buffer registers are 16 bytes wide
REGISTER_SIZE = 16
