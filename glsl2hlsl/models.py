"""
Data models shared by the converter, the manifest loader and the CLI.

This module contains the dataclass definitions used to describe manifest-declared
custom uniforms.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Any

from glsl2hlsl.errors import ManifestError

UNIFORM_NAME_PATTERN = re.compile(r"^[a-zA-Z_]\w*$")


class UniformType(Enum):
    """Types a manifest uniform may declare."""

    FLOAT = "float"
    VEC2 = "vec2"
    VEC3 = "vec3"
    VEC4 = "vec4"
    COLOR = "color"

    @property
    def glsl_type(self) -> str:
        """GLSL type used when declaring the uniform."""
        if self is UniformType.COLOR:
            return "vec3"
        return self.value

    @property
    def hlsl_type(self) -> str:
        """HLSL type used inside the custom constant buffer."""
        return {
            UniformType.FLOAT: "float",
            UniformType.VEC2: "float2",
            UniformType.VEC3: "float3",
            UniformType.VEC4: "float4",
            UniformType.COLOR: "float3",
        }[self]

    @property
    def components(self) -> int:
        """Number of float components."""
        return {
            UniformType.FLOAT: 1,
            UniformType.VEC2: 2,
            UniformType.VEC3: 3,
            UniformType.VEC4: 4,
            UniformType.COLOR: 3,
        }[self]


def _is_number(value: Any) -> bool:
    return isinstance(value, int | float) and not isinstance(value, bool)


def _default_matches(uniform_type: UniformType, value: Any) -> bool:
    """Check that a default value has the shape of its uniform type."""
    if uniform_type is UniformType.FLOAT:
        return _is_number(value)
    # Colors may also be given as hex strings
    if uniform_type is UniformType.COLOR and isinstance(value, str):
        return value.startswith("#")
    return (
        isinstance(value, list)
        and len(value) == uniform_type.components
        and all(_is_number(v) for v in value)
    )


@dataclass(frozen=True)
class UniformSpec:
    """Custom uniform declared by a shader manifest.

    Attributes:
        name: Identifier used in the shader source
        display_name: Human readable label
        type: Declared uniform type
        default: Default value matching the type
    """

    name: str
    display_name: str
    type: UniformType
    default: Any

    @classmethod
    def from_dict(cls, data: Any) -> "UniformSpec":
        """Build a uniform from its manifest JSON object.

        Args:
            data: One entry of the manifest ``uniforms`` array

        Returns:
            The validated uniform

        Raises:
            ManifestError: If a field is missing or invalid
        """
        if not isinstance(data, dict):
            raise ManifestError("uniform entry must be an object", field="uniforms")

        name = data.get("name")
        if not name:
            raise ManifestError("uniform missing name", field="uniforms.name")
        if not isinstance(name, str) or not UNIFORM_NAME_PATTERN.match(name):
            raise ManifestError(f"invalid uniform name: {name}", field="uniforms.name")

        display_name = data.get("displayName")
        if not display_name:
            raise ManifestError(
                f"uniform {name} missing displayName", field="uniforms.displayName"
            )

        try:
            uniform_type = UniformType(data.get("type"))
        except ValueError as e:
            raise ManifestError(
                f"uniform {name} has invalid type: {data.get('type')}",
                field="uniforms.type",
            ) from e

        if "default" not in data or data["default"] is None:
            raise ManifestError(
                f"uniform {name} missing default", field="uniforms.default"
            )
        if not _default_matches(uniform_type, data["default"]):
            raise ManifestError(
                f"uniform {name} default does not match type {uniform_type.value}",
                field="uniforms.default",
            )

        return cls(
            name=name,
            display_name=display_name,
            type=uniform_type,
            default=data["default"],
        )
