"""
Shader manifest loading and validation.

A shader ships as a directory holding a JSON manifest and the GLSL entry file it
names. The manifest fields may sit at the top level of the JSON document or under
a ``junctionrelay`` key of a ``package.json``.
"""

import json
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from loguru import logger

from glsl2hlsl.errors import ManifestError
from glsl2hlsl.models import UniformSpec

SHADER_NAME_PATTERN = re.compile(
    r"^[a-z][a-z0-9]*(-[a-z0-9]+)*\.[a-z][a-z0-9]*(-[a-z0-9]+)*$"
)

MANIFEST_FILE_NAMES = ("package.json", "manifest.json")
MANIFEST_SECTION = "junctionrelay"


@dataclass
class ShaderManifest:
    """Validated shader manifest.

    Attributes:
        path: Manifest file
        shader_name: ``namespace.name`` identifier
        display_name: Human readable name
        entry: GLSL entry file, relative to the manifest
        uses_texture: Whether the shader samples the channel texture
        uniforms: Custom uniforms in declaration order
    """

    path: Path
    shader_name: str
    display_name: str
    entry: str
    uses_texture: bool
    uniforms: list[UniformSpec] = field(default_factory=list)

    @property
    def entry_path(self) -> Path:
        """Absolute path of the GLSL entry file."""
        return self.path.parent / self.entry


def _manifest_fields(document: Any) -> dict[str, Any]:
    if not isinstance(document, dict):
        raise ManifestError("manifest must be a JSON object")
    section = document.get(MANIFEST_SECTION)
    if isinstance(section, dict):
        return section
    return document


def parse_manifest(document: Any, path: Path) -> ShaderManifest:
    """Validate a parsed manifest document.

    Args:
        document: Parsed JSON
        path: Manifest file the document came from

    Returns:
        The validated manifest

    Raises:
        ManifestError: If a field is missing or invalid
    """
    fields = _manifest_fields(document)

    if fields.get("type") != "shader":
        raise ManifestError('type must be "shader"', field="type")

    shader_name = fields.get("shaderName")
    if not shader_name:
        raise ManifestError("missing shaderName", field="shaderName")
    if not isinstance(shader_name, str) or not SHADER_NAME_PATTERN.match(shader_name):
        raise ManifestError(
            f'shaderName "{shader_name}" must be namespace.name '
            "(e.g. junctionrelay.rainwindow)",
            field="shaderName",
        )

    display_name = fields.get("displayName")
    if not display_name or not isinstance(display_name, str):
        raise ManifestError("missing displayName", field="displayName")

    entry = fields.get("entry")
    if not entry or not isinstance(entry, str):
        raise ManifestError("missing entry", field="entry")
    entry_path = path.parent / entry
    if not entry_path.is_file():
        raise ManifestError(f"entry file not found: {entry_path}", field="entry")

    if "usesTexture" not in fields:
        raise ManifestError("missing required field: usesTexture", field="usesTexture")
    if not isinstance(fields["usesTexture"], bool):
        raise ManifestError("usesTexture must be a boolean", field="usesTexture")

    if "uniforms" not in fields:
        raise ManifestError("missing required field: uniforms", field="uniforms")
    if not isinstance(fields["uniforms"], list):
        raise ManifestError("uniforms must be an array", field="uniforms")
    uniforms = [UniformSpec.from_dict(u) for u in fields["uniforms"]]

    return ShaderManifest(
        path=path,
        shader_name=shader_name,
        display_name=display_name,
        entry=entry,
        uses_texture=fields["usesTexture"],
        uniforms=uniforms,
    )


def load_manifest(path: str | Path) -> ShaderManifest:
    """Read and validate a shader manifest file.

    Args:
        path: Manifest JSON file

    Returns:
        The validated manifest

    Raises:
        ManifestError: If the file cannot be parsed or a field is invalid
    """
    path = Path(path)
    try:
        document = json.loads(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise ManifestError(f"cannot read manifest: {e}", path=path) from e
    except json.JSONDecodeError as e:
        raise ManifestError(f"invalid JSON: {e}", path=path) from e

    try:
        manifest = parse_manifest(document, path)
    except ManifestError as e:
        raise e.with_path(path) from e

    logger.debug(
        f"Loaded manifest {manifest.shader_name} "
        f"with {len(manifest.uniforms)} custom uniforms"
    )
    return manifest


def read_entry_source(manifest: ShaderManifest) -> str:
    """Read the GLSL source a manifest points at."""
    return manifest.entry_path.read_text(encoding="utf-8")


def discover_shaders(root: str | Path) -> list[Path]:
    """Find shader manifests in the immediate subdirectories of ``root``.

    Args:
        root: Directory holding one subdirectory per shader

    Returns:
        Sorted manifest paths
    """
    root = Path(root)
    manifests: list[Path] = []
    for shader_dir in sorted(p for p in root.iterdir() if p.is_dir()):
        for file_name in MANIFEST_FILE_NAMES:
            candidate = shader_dir / file_name
            if candidate.is_file():
                manifests.append(candidate)
                break
        else:
            logger.debug(f"Skipping {shader_dir.name}: no manifest")
    return manifests
