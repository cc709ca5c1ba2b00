from glsl2hlsl.converter import InputContract, convert_glsl_to_hlsl, detect_contract
from glsl2hlsl.errors import ManifestError
from glsl2hlsl.manifest import ShaderManifest, discover_shaders, load_manifest
from glsl2hlsl.models import UniformSpec, UniformType

__version__ = "0.1.0"


__all__ = [
    "InputContract",
    "ManifestError",
    "ShaderManifest",
    "UniformSpec",
    "UniformType",
    "convert_glsl_to_hlsl",
    "detect_contract",
    "discover_shaders",
    "load_manifest",
]
