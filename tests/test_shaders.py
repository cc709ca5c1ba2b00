"""Checks every bundled example shader against the shader contract.

Each shader directory under examples/shaders/ is validated the way a shader
package is accepted: manifest fields, the GLSL input contract, the converted HLSL
and, when glslangValidator is on PATH, a SPIR-V compile.
"""

from pathlib import Path

import pytest

from glsl2hlsl import convert_glsl_to_hlsl, discover_shaders, load_manifest
from glsl2hlsl.contract import check_glsl_contract, check_hlsl_output
from glsl2hlsl.manifest import read_entry_source
from glsl2hlsl.spirv import DEFAULT_COMPILER, compile_to_spirv, find_compiler

EXAMPLE_SHADERS_DIR = Path(__file__).parent.parent / "examples" / "shaders"
MANIFESTS = discover_shaders(EXAMPLE_SHADERS_DIR)


def test_examples_found():
    """Test that the example shaders are discovered."""
    assert [m.parent.name for m in MANIFESTS] == ["plasma", "ripple", "starfield"]


@pytest.mark.parametrize("manifest_path", MANIFESTS, ids=lambda p: p.parent.name)
class TestExampleShader:
    """Run the full acceptance checks on one shader."""

    def test_manifest(self, manifest_path):
        manifest = load_manifest(manifest_path)
        assert manifest.shader_name == f"junctionrelay.{manifest_path.parent.name}"

    def test_glsl_contract(self, manifest_path):
        source = read_entry_source(load_manifest(manifest_path))
        assert check_glsl_contract(source) == []

    def test_hlsl_output(self, manifest_path):
        manifest = load_manifest(manifest_path)
        hlsl = convert_glsl_to_hlsl(read_entry_source(manifest), manifest.uniforms)
        assert check_hlsl_output(hlsl, manifest.uniforms, manifest.uses_texture) == []

    @pytest.mark.spirv
    @pytest.mark.skipif(
        find_compiler() is None, reason=f"{DEFAULT_COMPILER} not found on PATH"
    )
    def test_spirv_compile(self, manifest_path):
        manifest = load_manifest(manifest_path)
        result = compile_to_spirv(read_entry_source(manifest), manifest.uniforms)
        assert result.ok, result.error
