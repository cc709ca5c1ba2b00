"""Fixtures and configuration for pytest."""

import json

import pytest

MAIN_IMAGE_SOURCE = """void mainImage(out vec4 fragColor, in vec2 fragCoord) {
    vec2 uv = fragCoord / iResolution.xy;
    fragColor = vec4(uv, 0.5 + 0.5 * sin(iTime), 1.0);
}
"""


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "spirv: mark test as requiring an external SPIR-V compiler"
    )


@pytest.fixture
def manifest_fields():
    """Manifest fields of a minimal valid shader."""
    return {
        "type": "shader",
        "shaderName": "test.gradient",
        "displayName": "Gradient",
        "entry": "shader.glsl",
        "usesTexture": False,
        "uniforms": [],
    }


@pytest.fixture
def make_shader(tmp_path):
    """Create shader package directories under tmp_path.

    Returns a factory taking the shader directory name, the manifest fields and
    the GLSL source. Fields are nested under ``junctionrelay`` in a package.json.
    """

    def _make(name="gradient", fields=None, source=MAIN_IMAGE_SOURCE):
        shader_dir = tmp_path / name
        shader_dir.mkdir()
        document = {"name": f"@test/{name}", "junctionrelay": fields or {}}
        (shader_dir / "package.json").write_text(json.dumps(document))
        if source is not None:
            (shader_dir / "shader.glsl").write_text(source)
        return shader_dir / "package.json"

    return _make
