"""
GLSL acceptance compile through an external SPIR-V compiler.

Shaders are wrapped into a complete program that declares the runtime uniforms
the same way the GL runtime does, then compiled out of process.
"""

import shutil
import subprocess
import tempfile
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from loguru import logger

from glsl2hlsl.models import UniformSpec

DEFAULT_COMPILER = "glslangValidator"

_PROGRAM_PREAMBLE = (
    "#version 310 es\n"
    "precision mediump float;\n"
    "layout(binding=0) uniform sampler2D iChannel0;\n"
    "layout(std140, binding=1) uniform UB { float iTime; float _pad; vec4 iResolution; };\n"
)
_PROGRAM_OUTPUT = "layout(location=0) out vec4 _fragColor;\n"
_PROGRAM_MAIN = "void main() { mainImage(_fragColor, gl_FragCoord.xy); }\n"


@dataclass
class SpirvCompileResult:
    """Outcome of a SPIR-V compile.

    Attributes:
        ok: Whether the compiler accepted the program
        size: Size of the SPIR-V binary in bytes
        error: Compiler diagnostics when it did not
    """

    ok: bool
    size: int = 0
    error: str = ""


def wrap_for_spirv(source: str, uniforms: Sequence[UniformSpec] = ()) -> str:
    """Wrap a ``mainImage`` shader in a complete GLSL program.

    Args:
        source: Shader source following the input contract
        uniforms: Custom uniforms, declared in a ``CustomUB`` block at binding 2

    Returns:
        Complete GLSL ES 3.1 fragment program
    """
    custom_block = ""
    if uniforms:
        members = "\n".join(f"  {u.type.glsl_type} {u.name};" for u in uniforms)
        custom_block = (
            f"layout(std140, binding=2) uniform CustomUB {{\n{members}\n}};\n"
        )

    return (
        _PROGRAM_PREAMBLE
        + custom_block
        + _PROGRAM_OUTPUT
        + "\n"
        + source
        + "\n"
        + _PROGRAM_MAIN
    )


def find_compiler(compiler: str = DEFAULT_COMPILER) -> str | None:
    """Locate the compiler executable on PATH."""
    return shutil.which(compiler)


def compile_to_spirv(
    source: str,
    uniforms: Sequence[UniformSpec] = (),
    compiler: str = DEFAULT_COMPILER,
    timeout: float = 30.0,
) -> SpirvCompileResult:
    """Compile a wrapped shader to SPIR-V in a child process.

    Args:
        source: Shader source following the input contract
        uniforms: Custom uniforms the manifest declares
        compiler: Compiler executable name or path
        timeout: Seconds to wait for the compiler

    Returns:
        The compile outcome; failures are reported, never raised
    """
    executable = find_compiler(compiler)
    if executable is None:
        return SpirvCompileResult(ok=False, error=f"{compiler} not found on PATH")

    with tempfile.TemporaryDirectory(prefix="glsl2hlsl_") as temp_dir:
        glsl_path = Path(temp_dir) / "shader.frag"
        spirv_path = Path(temp_dir) / "shader.spv"
        glsl_path.write_text(wrap_for_spirv(source, uniforms), encoding="utf-8")

        command = [executable, "-V", "-S", "frag", "-o", str(spirv_path), str(glsl_path)]
        logger.debug(f"Running {' '.join(command)}")
        try:
            result = subprocess.run(
                command, capture_output=True, text=True, timeout=timeout
            )
        except subprocess.TimeoutExpired:
            return SpirvCompileResult(ok=False, error=f"{compiler} timed out")
        except OSError as e:
            return SpirvCompileResult(ok=False, error=str(e))

        if result.returncode != 0:
            output = (result.stdout + result.stderr).strip()
            first_line = next(
                (line for line in output.splitlines() if "ERROR" in line),
                output.splitlines()[0] if output else "compilation failed",
            )
            return SpirvCompileResult(ok=False, error=first_line)

        size = spirv_path.stat().st_size if spirv_path.exists() else 0
        if size == 0:
            return SpirvCompileResult(ok=False, error="SPIR-V output is empty")
        return SpirvCompileResult(ok=True, size=size)
