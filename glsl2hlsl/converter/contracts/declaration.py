import re
from collections.abc import Sequence

from loguru import logger

from glsl2hlsl.converter.constants import ENTRY_POSITION, ENTRY_SIGNATURE
from glsl2hlsl.converter.contracts.base import Contract
from glsl2hlsl.converter.contracts.models import ContractConfig
from glsl2hlsl.converter.scanner import match_close
from glsl2hlsl.models import UniformSpec

_OUTPUT_DECLARATION = re.compile(r"\bout\s+(?:vec4|float4)\s+([A-Za-z_]\w*)\s*;[ \t]*\n?")
_MAIN_SIGNATURE = re.compile(r"\bvoid\s+main\s*\(\s*(?:void)?\s*\)\s*\{")
_UV_FROM_FRAG_COORD = re.compile(
    r"\s*float2\s+uv\s*=\s*gl_FragCoord\.xy\s*/[^;]+;"
)


class DeclarationContract(Contract):
    """GLSL with explicit ``uniform`` and ``out`` declarations and ``void main()``.

    The uniform declarations are replaced in place by the HLSL header and
    ``gl_FragCoord`` maps straight onto the position input, without an origin flip.
    """

    def _uniform_declaration(self, type_pattern: str, name: str) -> re.Pattern[str]:
        return re.compile(
            rf"\buniform\s+({type_pattern})\s+{re.escape(name)}\s*;[ \t]*\n?"
        )

    def rewrite_header(self, text: str, uniforms: Sequence[UniformSpec]) -> str:
        text = self.strip_directives(text)

        spans: list[tuple[int, int]] = []
        for pattern in (
            self._uniform_declaration("sampler2D", self.config.channel_uniform),
            self._uniform_declaration("float", self.config.time_uniform),
        ):
            match = pattern.search(text)
            if match:
                spans.append(match.span())

        resolution_components = None
        resolution = self._uniform_declaration(
            r"vec[234]", self.config.resolution_uniform
        ).search(text)
        if resolution:
            spans.append(resolution.span())
            # The runtime fills at most a vec3 worth of resolution
            resolution_components = min(int(resolution.group(1)[-1]), 3)

        for uniform in uniforms:
            match = self._uniform_declaration(r"\w+", uniform.name).search(text)
            if match:
                spans.append(match.span())

        header = self.build_header(uniforms, resolution_components)
        if not spans:
            logger.debug("No uniform declarations found, prepending header")
            return f"{header}\n\n{text}"

        spans.sort()
        pieces = [text[: spans[0][0]], header, "\n"]
        cursor = spans[0][1]
        for start, end in spans[1:]:
            pieces.append(text[cursor:start])
            cursor = end
        pieces.append(text[cursor:])
        return "".join(pieces)

    def rewrite_entry_point(self, text: str) -> str:
        output_name = self.config.output_name
        output = _OUTPUT_DECLARATION.search(text)
        if output:
            output_name = output.group(1)
            text = text[: output.start()] + text[output.end() :]

        text = _UV_FROM_FRAG_COORD.sub("", text, count=1)
        text = re.sub(r"\bgl_FragCoord\b", ENTRY_POSITION, text)

        signature = _MAIN_SIGNATURE.search(text)
        if signature is None:
            logger.debug("No void main() found, leaving entry point as is")
            return text

        open_index = signature.end() - 1
        close_index = match_close(text, open_index)
        body = self.rewrite_entry_body(text[open_index + 1 : close_index], output_name)
        return (
            text[: signature.start()]
            + ENTRY_SIGNATURE
            + " {"
            + body
            + text[close_index:]
        )


def create_declaration_contract() -> DeclarationContract:
    """Create the declaration-style contract."""
    config = ContractConfig(name="declaration")
    return DeclarationContract(config)
