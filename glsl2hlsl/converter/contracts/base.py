"""Shared behavior of the GLSL input contracts."""

import re
from abc import ABC, abstractmethod
from collections.abc import Sequence

from glsl2hlsl.converter.constants import (
    CUSTOM_BUFFER_NAME,
    ENTRY_POSITION,
    ENTRY_TEXCOORD,
    RESOLUTION_NAME,
    SAMPLER_NAME,
    TEXTURE_NAME,
    TIME_BUFFER_NAME,
    TIME_NAME,
)
from glsl2hlsl.converter.contracts.models import ContractConfig
from glsl2hlsl.converter.layout import BufferMember, format_cbuffer, pack_members
from glsl2hlsl.converter.renamer import rename_runtime_names
from glsl2hlsl.models import UniformSpec

_VERSION_LINE = re.compile(r"^[ \t]*#version\b.*$", re.MULTILINE)
_PRECISION_LINE = re.compile(r"^[ \t]*precision\s+.*$", re.MULTILINE)

# Entry parameters may not be declared again inside the entry body
_PARAMETER_REDECLARATIONS = [
    (re.compile(rf"[ \t]*\bfloat2\s+{ENTRY_TEXCOORD}\s*;[ \t]*\n?"), ""),
    (re.compile(rf"\bfloat2\s+{ENTRY_TEXCOORD}\s*=(?!=)"), f"{ENTRY_TEXCOORD} ="),
    (re.compile(rf"\bfloat4\s+{ENTRY_POSITION}\s*=(?!=)"), f"{ENTRY_POSITION} ="),
]

_RETURN_THEN_BARE_RETURN = re.compile(r"(\breturn\s[^;]*;)\s*return\s*;")


class Contract(ABC):
    """Header and entry-point handling for one GLSL input contract.

    The expression rewrites are shared by every contract; only the uniform header
    and the entry point differ.
    """

    def __init__(self, config: ContractConfig):
        self.config = config

    @abstractmethod
    def rewrite_header(self, text: str, uniforms: Sequence[UniformSpec]) -> str:
        """Replace the uniform declarations with HLSL resource bindings."""

    @abstractmethod
    def rewrite_entry_point(self, text: str) -> str:
        """Turn the GLSL entry point into an HLSL return-by-value entry point."""

    def strip_directives(self, text: str) -> str:
        """Remove ``#version`` and ``precision`` lines."""
        text = _VERSION_LINE.sub("", text)
        return _PRECISION_LINE.sub("", text)

    def rename_runtime_names(self, text: str) -> str:
        """Point runtime uniform references at the HLSL resources."""
        return rename_runtime_names(
            text,
            time_uniform=self.config.time_uniform,
            resolution_uniform=self.config.resolution_uniform,
            channel_uniform=self.config.channel_uniform,
        )

    def build_header(
        self,
        uniforms: Sequence[UniformSpec],
        resolution_components: int | None,
    ) -> str:
        """Build the texture, sampler and constant buffer declarations.

        Args:
            uniforms: Manifest-declared custom uniforms, in declaration order
            resolution_components: Size of the resolution vector, or None to omit it

        Returns:
            HLSL header source
        """
        time_members = [BufferMember("float", TIME_NAME, 1)]
        if resolution_components:
            time_members.append(
                BufferMember(
                    f"float{resolution_components}",
                    RESOLUTION_NAME,
                    resolution_components,
                )
            )

        blocks = [
            f"Texture2D {TEXTURE_NAME} : register(t{self.config.texture_register});\n"
            f"SamplerState {SAMPLER_NAME} : register(s{self.config.sampler_register});",
            format_cbuffer(
                TIME_BUFFER_NAME,
                self.config.time_buffer_register,
                pack_members(time_members),
            ),
        ]

        if uniforms:
            custom_members = [
                BufferMember(u.type.hlsl_type, u.name, u.type.components)
                for u in uniforms
            ]
            blocks.append(
                format_cbuffer(
                    CUSTOM_BUFFER_NAME,
                    self.config.custom_buffer_register,
                    pack_members(custom_members, pad_prefix="_custom_pad"),
                )
            )

        return "\n\n".join(blocks)

    def rewrite_entry_body(self, body: str, output_name: str) -> str:
        """Rewrite output assignments to returns and drop parameter redeclarations.

        Every ``<output> = expr;`` becomes ``return expr;``. This relies on each
        control-flow path assigning the output exactly once.

        Args:
            body: Entry function body or the whole buffer
            output_name: Name of the output color

        Returns:
            The rewritten text
        """
        body = re.sub(rf"\b{re.escape(output_name)}\s*=(?!=)\s*", "return ", body)
        body = _RETURN_THEN_BARE_RETURN.sub(r"\1", body)
        for pattern, replacement in _PARAMETER_REDECLARATIONS:
            body = pattern.sub(replacement, body)
        return body
