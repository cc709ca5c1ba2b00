"""
Exceptions raised around the GLSL to HLSL converter.

The conversion pipeline itself never raises. Errors come from the collaborators
that feed it: manifest loading and field validation.
"""

import os
from typing import Any


class ManifestError(Exception):
    """Exception raised when a shader manifest violates the manifest schema.

    The offending field name and the manifest file, when known, are appended to
    the message so that the shader can be rejected with a useful report.

    Examples:
        >>> raise ManifestError("must be a boolean", field="usesTexture")
        ManifestError: must be a boolean (field: usesTexture)
    """

    def __init__(
        self, message: str, field: str | None = None, path: Any | None = None
    ):
        """Initialize the exception with a message and optional context.

        Args:
            message: The error message
            field: Name of the manifest field that failed validation
            path: Path to the manifest file being loaded
        """
        self.message = message
        self.field = field
        self.path = path

        location_info = ""
        if field:
            location_info = f" (field: {field})"
        if path:
            location_info += f" in {os.path.basename(str(path))}"

        super().__init__(f"{message}{location_info}")

    def with_path(self, path: Any) -> "ManifestError":
        """Create a new ManifestError with the same message but a manifest path.

        Args:
            path: Manifest file associated with the error

        Returns:
            A new ManifestError instance with the updated path
        """
        return ManifestError(self.message, self.field, path)
