from glsl2hlsl.converter.contracts.base import Contract
from glsl2hlsl.converter.contracts.declaration import (
    DeclarationContract,
    create_declaration_contract,
)
from glsl2hlsl.converter.contracts.main_image import (
    MAIN_IMAGE_SIGNATURE,
    MainImageContract,
    create_main_image_contract,
)
from glsl2hlsl.converter.contracts.models import ContractConfig, InputContract


def detect_contract(source: str) -> InputContract:
    """Pick the input contract a GLSL source follows.

    Args:
        source: GLSL shader source

    Returns:
        MAIN_IMAGE when the fixed ``mainImage`` signature is present,
        DECLARATION otherwise
    """
    if MAIN_IMAGE_SIGNATURE.search(source):
        return InputContract.MAIN_IMAGE
    return InputContract.DECLARATION


def create_contract(contract_type: InputContract = InputContract.MAIN_IMAGE) -> Contract:
    """Create a contract instance based on type.

    Args:
        contract_type: The input contract to create

    Returns:
        An instance of the requested contract

    Raises:
        ValueError: If the contract type is not supported
    """
    if contract_type == InputContract.MAIN_IMAGE:
        return create_main_image_contract()
    elif contract_type == InputContract.DECLARATION:
        return create_declaration_contract()
    else:
        raise ValueError(f"Unsupported contract type: {contract_type}")


__all__ = [
    "Contract",
    "ContractConfig",
    "DeclarationContract",
    "InputContract",
    "MainImageContract",
    "create_contract",
    "detect_contract",
]
