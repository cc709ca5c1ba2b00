"""
Constant buffer layout.

The runtime uploads uniforms with GL std140 rules, so HLSL constant buffers are
packed with explicit padding members that put every vector on the same boundary
std140 would.
"""

from dataclasses import dataclass

from glsl2hlsl.converter.constants import REGISTER_SIZE

FLOAT_SIZE = 4


@dataclass(frozen=True)
class BufferMember:
    """A member of an HLSL constant buffer.

    Attributes:
        type_name: HLSL type of the member
        name: Member name
        components: Number of 32-bit components
    """

    type_name: str
    name: str
    components: int

    @property
    def size(self) -> int:
        return self.components * FLOAT_SIZE

    @property
    def alignment(self) -> int:
        """std140 base alignment in bytes."""
        if self.components == 1:
            return FLOAT_SIZE
        if self.components == 2:
            return 2 * FLOAT_SIZE
        return REGISTER_SIZE

    def declaration(self) -> str:
        return f"{self.type_name} {self.name};"


def _padding(gap: int, name: str) -> BufferMember:
    components = gap // FLOAT_SIZE
    type_name = "float" if components == 1 else f"float{components}"
    return BufferMember(type_name, name, components)


def pack_members(
    members: list[BufferMember], pad_prefix: str = "_pad"
) -> list[BufferMember]:
    """Insert padding so each member starts on its std140 boundary.

    The buffer is also padded up to a whole number of registers.

    Args:
        members: Members in declaration order
        pad_prefix: Prefix for generated padding names, unique per buffer

    Returns:
        Members in declaration order with padding members inserted
    """
    packed: list[BufferMember] = []
    offset = 0
    pad_count = 0

    for member in members:
        gap = -offset % member.alignment
        if gap:
            packed.append(_padding(gap, f"{pad_prefix}{pad_count}"))
            pad_count += 1
            offset += gap
        packed.append(member)
        offset += member.size

    tail = -offset % REGISTER_SIZE
    if tail:
        packed.append(_padding(tail, f"{pad_prefix}{pad_count}"))

    return packed


def format_cbuffer(name: str, register: int, members: list[BufferMember]) -> str:
    """Render a constant buffer declaration.

    Args:
        name: Buffer name
        register: Buffer register slot (``b<register>``)
        members: Already packed members

    Returns:
        HLSL source of the declaration
    """
    lines = [f"cbuffer {name} : register(b{register}) {{"]
    lines.extend(f"    {member.declaration()}" for member in members)
    lines.append("};")
    return "\n".join(lines)
