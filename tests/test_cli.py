"""Tests for the glsl2hlsl command-line interface."""

from pathlib import Path
from unittest.mock import patch

import pytest
from typer.testing import CliRunner

from glsl2hlsl.converter import InputContract
from glsl2hlsl.main import ShaderChangeHandler, _map_contract, app

runner = CliRunner()

EXAMPLE_SHADERS = Path(__file__).parent.parent / "examples" / "shaders"


@pytest.fixture
def sample_shader_file(tmp_path):
    """Create a temporary mainImage shader file for testing."""
    path = tmp_path / "shader.glsl"
    path.write_text(
        "void mainImage(out vec4 fragColor, in vec2 fragCoord) {\n"
        "    vec2 uv = fragCoord / iResolution.xy;\n"
        "    fragColor = vec4(vec3(uv.x), 1.0);\n"
        "}\n"
    )
    return path


def test_help():
    """Test that the CLI help command works."""
    result = runner.invoke(app, ["--help"])
    assert result.exit_code == 0
    assert "Convert GLSL fragment shaders into HLSL" in result.stdout


def test_convert_help():
    """Test that the convert command help works."""
    result = runner.invoke(app, ["convert", "--help"])
    assert result.exit_code == 0
    assert "--manifest" in result.stdout


def test_convert_to_stdout(sample_shader_file):
    """Test conversion to stdout (no output file)."""
    result = runner.invoke(app, ["convert", str(sample_shader_file)])
    assert result.exit_code == 0
    assert result.stdout.startswith("Texture2D tex0 : register(t0);")
    assert "return float4(((float3)(uv.x)), 1.0);" in result.stdout


def test_convert_to_file(sample_shader_file, tmp_path):
    """Test conversion to a file."""
    output_file = tmp_path / "shader.hlsl"
    result = runner.invoke(app, ["convert", str(sample_shader_file), str(output_file)])
    assert result.exit_code == 0
    assert output_file.exists()
    assert "SV_Target" in output_file.read_text()


def test_convert_with_header(sample_shader_file):
    """Test the generated-by header."""
    result = runner.invoke(app, ["convert", str(sample_shader_file), "--header"])
    assert result.exit_code == 0
    assert result.stdout.startswith("// Generated by glsl2hlsl v")
    assert "// Source file: shader.glsl" in result.stdout
    assert "// Input contract: MAIN_IMAGE" in result.stdout


def test_convert_with_manifest():
    """Test that manifest uniforms end up in the custom buffer."""
    shader_dir = EXAMPLE_SHADERS / "plasma"
    result = runner.invoke(
        app,
        [
            "convert",
            str(shader_dir / "shader.glsl"),
            "-m",
            str(shader_dir / "package.json"),
        ],
    )
    assert result.exit_code == 0
    assert "cbuffer CustomUniforms : register(b1)" in result.stdout
    assert "    float3 tint;" in result.stdout


def test_convert_with_invalid_manifest(sample_shader_file, tmp_path):
    """Test that an invalid manifest fails the command."""
    manifest = tmp_path / "package.json"
    manifest.write_text('{"junctionrelay": {"type": "plugin"}}')
    result = runner.invoke(
        app, ["convert", str(sample_shader_file), "--manifest", str(manifest)]
    )
    assert result.exit_code == 1


def test_convert_missing_source(tmp_path):
    """Test that a missing source file fails the command."""
    result = runner.invoke(app, ["convert", str(tmp_path / "missing.glsl")])
    assert result.exit_code == 1


def test_convert_forced_contract(sample_shader_file):
    """Test overriding contract detection."""
    result = runner.invoke(
        app, ["convert", str(sample_shader_file), "-c", "declaration"]
    )
    assert result.exit_code == 0
    assert "void mainImage" in result.stdout


@pytest.mark.parametrize(
    "value,expected",
    [
        ("auto", None),
        ("declaration", InputContract.DECLARATION),
        ("main-image", InputContract.MAIN_IMAGE),
        ("Shadertoy", InputContract.MAIN_IMAGE),
        ("unknown", None),
    ],
)
def test_map_contract(value, expected):
    """Test contract name mapping."""
    assert _map_contract(value) == expected


def test_check_examples():
    """Test that the bundled example shaders pass every check."""
    result = runner.invoke(app, ["check", str(EXAMPLE_SHADERS)])
    assert result.exit_code == 0


def test_check_reports_failures(make_shader, manifest_fields, tmp_path):
    """Test that a shader breaking the contract fails the check."""
    make_shader("good", manifest_fields)
    make_shader(
        "bad",
        manifest_fields,
        source="#version 300 es\nvoid mainImage(out vec4 fragColor, in vec2 fragCoord) {}\n",
    )
    result = runner.invoke(app, ["check", str(tmp_path)])
    assert result.exit_code == 1


def test_check_invalid_manifest(make_shader, manifest_fields, tmp_path):
    """Test that an invalid manifest fails the check."""
    manifest_fields["usesTexture"] = "no"
    make_shader("broken", manifest_fields)
    result = runner.invoke(app, ["check", str(tmp_path)])
    assert result.exit_code == 1


def test_check_empty_directory(tmp_path):
    """Test that a directory without shaders fails the check."""
    result = runner.invoke(app, ["check", str(tmp_path)])
    assert result.exit_code == 1


def test_check_spirv_without_compiler(make_shader, manifest_fields, tmp_path):
    """Test that a missing compiler skips compilation instead of failing."""
    make_shader("good", manifest_fields)
    with patch("glsl2hlsl.main.find_compiler", return_value=None), patch(
        "glsl2hlsl.main.compile_to_spirv"
    ) as compile_mock:
        result = runner.invoke(app, ["check", str(tmp_path), "--spirv"])
    assert result.exit_code == 0
    compile_mock.assert_not_called()


class TestShaderChangeHandler:
    """Test the watch command's file event handler."""

    def test_convert_writes_output(self, sample_shader_file, tmp_path):
        output = tmp_path / "out.hlsl"
        handler = ShaderChangeHandler(sample_shader_file, output, None, "auto", False)

        assert handler.convert()
        assert "SV_Target" in output.read_text()

    def test_convert_failure(self, tmp_path):
        output = tmp_path / "out.hlsl"
        handler = ShaderChangeHandler(
            tmp_path / "missing.glsl", output, None, "auto", False
        )

        assert not handler.convert()
        assert not output.exists()

    def test_only_watched_files_trigger(self, sample_shader_file, tmp_path):
        handler = ShaderChangeHandler(
            sample_shader_file, tmp_path / "out.hlsl", None, "auto", False
        )
        with patch.object(handler, "convert") as convert:
            handler.on_modified(type("Event", (), {"src_path": str(tmp_path / "other.glsl")}))
            convert.assert_not_called()
            handler.on_modified(type("Event", (), {"src_path": str(sample_shader_file)}))
            convert.assert_called_once()
