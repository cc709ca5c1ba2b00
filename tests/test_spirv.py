"""Tests for the SPIR-V acceptance compile."""

import subprocess
from unittest.mock import patch

import pytest

from glsl2hlsl import UniformSpec, UniformType
from glsl2hlsl.spirv import (
    DEFAULT_COMPILER,
    compile_to_spirv,
    find_compiler,
    wrap_for_spirv,
)

SOURCE = """void mainImage(out vec4 fragColor, in vec2 fragCoord) {
    fragColor = vec4(fragCoord / iResolution.xy, 0.5 + 0.5 * sin(iTime), 1.0);
}
"""

requires_compiler = pytest.mark.skipif(
    find_compiler() is None, reason=f"{DEFAULT_COMPILER} not found on PATH"
)


class TestWrapForSpirv:
    """Test wrapping a mainImage shader into a full program."""

    def test_program_structure(self):
        program = wrap_for_spirv(SOURCE)
        lines = program.splitlines()

        assert lines[0] == "#version 310 es"
        assert "layout(binding=0) uniform sampler2D iChannel0;" in lines
        assert "layout(location=0) out vec4 _fragColor;" in lines
        assert lines[-1] == "void main() { mainImage(_fragColor, gl_FragCoord.xy); }"
        assert SOURCE in program
        assert "CustomUB" not in program

    def test_custom_uniform_block(self):
        uniforms = [
            UniformSpec("speed", "Speed", UniformType.FLOAT, 1.0),
            UniformSpec("tint", "Tint", UniformType.COLOR, "#ffffff"),
        ]
        program = wrap_for_spirv(SOURCE, uniforms)

        assert (
            "layout(std140, binding=2) uniform CustomUB {\n"
            "  float speed;\n"
            "  vec3 tint;\n"
            "};\n"
        ) in program
        assert program.index("CustomUB") < program.index("_fragColor")


class TestCompileToSpirv:
    """Test the compiler invocation."""

    def test_compiler_not_found(self):
        result = compile_to_spirv(SOURCE, compiler="no-such-compiler-xyz")
        assert not result.ok
        assert result.error == "no-such-compiler-xyz not found on PATH"

    def test_compiler_error_reported(self):
        failed = subprocess.CompletedProcess(
            args=[], returncode=2, stdout="shader.frag\nERROR: 0:5: 'x' : undeclared\n", stderr=""
        )
        with patch("glsl2hlsl.spirv.find_compiler", return_value="/usr/bin/glslangValidator"), patch(
            "glsl2hlsl.spirv.subprocess.run", return_value=failed
        ) as run:
            result = compile_to_spirv(SOURCE)

        assert not result.ok
        assert result.error == "ERROR: 0:5: 'x' : undeclared"
        command = run.call_args.args[0]
        assert command[:4] == ["/usr/bin/glslangValidator", "-V", "-S", "frag"]

    def test_timeout_reported(self):
        with patch("glsl2hlsl.spirv.find_compiler", return_value="glslangValidator"), patch(
            "glsl2hlsl.spirv.subprocess.run",
            side_effect=subprocess.TimeoutExpired(cmd="glslangValidator", timeout=1),
        ):
            result = compile_to_spirv(SOURCE, timeout=1)

        assert not result.ok
        assert "timed out" in result.error

    def test_empty_output_is_a_failure(self):
        succeeded = subprocess.CompletedProcess(args=[], returncode=0, stdout="", stderr="")
        with patch("glsl2hlsl.spirv.find_compiler", return_value="glslangValidator"), patch(
            "glsl2hlsl.spirv.subprocess.run", return_value=succeeded
        ):
            result = compile_to_spirv(SOURCE)

        assert not result.ok
        assert result.error == "SPIR-V output is empty"

    @pytest.mark.spirv
    @requires_compiler
    def test_compiles(self):
        result = compile_to_spirv(SOURCE)
        assert result.ok, result.error
        assert result.size > 0

    @pytest.mark.spirv
    @requires_compiler
    def test_rejects_invalid_source(self):
        result = compile_to_spirv(SOURCE.replace("iTime", "undefinedName"))
        assert not result.ok
