import re
from collections.abc import Sequence

from loguru import logger

from glsl2hlsl.converter.constants import (
    ENTRY_POSITION,
    ENTRY_SIGNATURE,
    RESOLUTION_NAME,
)
from glsl2hlsl.converter.contracts.base import Contract
from glsl2hlsl.converter.contracts.models import ContractConfig
from glsl2hlsl.converter.scanner import match_close
from glsl2hlsl.models import UniformSpec

MAIN_IMAGE_SIGNATURE = re.compile(
    r"\bvoid\s+mainImage\s*\(\s*out\s+(?:vec4|float4)\s+([A-Za-z_]\w*)\s*,"
    r"\s*(?:in\s+)?(?:vec2|float2)\s+([A-Za-z_]\w*)\s*\)"
)
_BODY_INDENT = re.compile(r"\n([ \t]+)\S")
_BODY_POSITION = re.compile(rf"(?<![\w.]){ENTRY_POSITION}\b")


class MainImageContract(Contract):
    """Shadertoy-style GLSL with a single ``mainImage`` entry point.

    The runtime supplies channel, time and resolution, so nothing is declared in
    the source and the whole header is prepended.
    """

    def rewrite_header(self, text: str, uniforms: Sequence[UniformSpec]) -> str:
        text = self.strip_directives(text)
        header = self.build_header(uniforms, resolution_components=3)
        return f"{header}\n\n{text.lstrip()}"

    def rewrite_entry_point(self, text: str) -> str:
        signature = MAIN_IMAGE_SIGNATURE.search(text)
        if signature is None:
            logger.debug("No mainImage() found, leaving entry point as is")
            return text

        open_index = text.find("{", signature.end())
        if open_index < 0 or text[signature.end() : open_index].strip():
            return text
        close_index = match_close(text, open_index)
        body = text[open_index + 1 : close_index]

        # The position parameter would shadow a user identifier of the same name
        local_position = f"{ENTRY_POSITION}_"
        output_name = _BODY_POSITION.sub(local_position, signature.group(1))
        coord_name = _BODY_POSITION.sub(local_position, signature.group(2))
        body = _BODY_POSITION.sub(local_position, body)

        indent_match = _BODY_INDENT.search(body)
        indent = indent_match.group(1) if indent_match else "    "

        # GL puts the vertical origin at the bottom, D3D at the top
        prologue = (
            f"\n{indent}{ENTRY_POSITION}.y = {RESOLUTION_NAME}.y - {ENTRY_POSITION}.y;"
            f"\n{indent}float2 {coord_name} = {ENTRY_POSITION}.xy;"
        )
        body = self.rewrite_entry_body(body, output_name)
        return (
            text[: signature.start()]
            + ENTRY_SIGNATURE
            + " {"
            + prologue
            + body
            + text[close_index:]
        )


def create_main_image_contract() -> MainImageContract:
    """Create the Shadertoy ``mainImage`` contract."""
    config = ContractConfig(name="main-image")
    return MainImageContract(config)
