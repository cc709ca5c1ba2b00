"""HLSL output formatting utilities."""

import re

import arrow

_EXCESS_BLANK_LINES = re.compile(r"\n[ \t]*\n(?:[ \t]*\n)+")
_TRAILING_SPACE = re.compile(r"[ \t]+$", re.MULTILINE)


def tidy_blank_lines(code: str) -> str:
    """Collapse runs of blank lines into one and end with a single newline."""
    code = _TRAILING_SPACE.sub("", code)
    code = _EXCESS_BLANK_LINES.sub("\n\n", code)
    return code.strip() + "\n"


def add_header_comments(
    code: str, version: str, source_file: str | None, contract_name: str
) -> str:
    """Add a generated-by comment block to the code.

    Args:
        code: HLSL source
        version: Converter version
        source_file: Name of the GLSL source file, if any
        contract_name: Input contract the source was converted with

    Returns:
        Code with header comments
    """
    timestamp = arrow.utcnow().format("YYYY-MM-DD HH:mm:ss UTC")
    header = f"// Generated by glsl2hlsl v{version}\n"
    header += f"// Generation time: {timestamp}\n"
    if source_file:
        header += f"// Source file: {source_file}\n"
    header += f"// Input contract: {contract_name}\n"
    header += "\n"
    return header + code
