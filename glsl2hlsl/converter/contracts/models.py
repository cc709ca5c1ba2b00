from dataclasses import dataclass
from enum import Enum, auto


class InputContract(Enum):
    """Supported GLSL input contracts."""

    DECLARATION = auto()
    MAIN_IMAGE = auto()


@dataclass
class ContractConfig:
    """Configuration for one GLSL input contract.

    Attributes:
        name: Contract name used in logs and on the command line
        channel_uniform: GLSL name of the channel sampler
        time_uniform: GLSL name of the time uniform
        resolution_uniform: GLSL name of the resolution uniform
        output_name: Default name of the output color
        texture_register: Texture slot (``t<n>``)
        sampler_register: Sampler slot (``s<n>``)
        time_buffer_register: Time constant buffer slot (``b<n>``)
        custom_buffer_register: Custom uniform constant buffer slot (``b<n>``)
    """

    name: str
    channel_uniform: str = "iChannel0"
    time_uniform: str = "iTime"
    resolution_uniform: str = "iResolution"
    output_name: str = "fragColor"
    texture_register: int = 0
    sampler_register: int = 0
    time_buffer_register: int = 0
    custom_buffer_register: int = 1
