"""Resource limits for untrusted input.

Limits guard against malicious or malformed documents: oversized files,
pathologically deep layer trees and huge rasters.
"""

import logging
import os
from dataclasses import dataclass

logger = logging.getLogger(__name__)

# Largest raster side that is still encoded to a data URI.
MAX_IMAGE_DIMENSION = 16383

DEFAULT_MAX_FILE_SIZE = 2147483648  # 2GB
DEFAULT_MAX_LAYER_DEPTH = 100


@dataclass
class ResourceLimits:
    """Resource limits for PSD conversion operations.

    A limit of 0 disables the corresponding check.

    Environment variables:
        PSD2JSON_MAX_FILE_SIZE: Maximum input size in bytes (default: 2GB)
        PSD2JSON_MAX_LAYER_DEPTH: Maximum layer nesting depth (default: 100)
        PSD2JSON_MAX_IMAGE_DIMENSION: Maximum raster width or height in pixels
            (default: 16383). Larger rasters are not encoded.

    Example:
        >>> limits = ResourceLimits.default()
        >>> limits = ResourceLimits(max_file_size=50 * 1024 * 1024, max_layer_depth=20)
        >>> limits = ResourceLimits(max_file_size=0)  # No file size limit
    """

    max_file_size: int = DEFAULT_MAX_FILE_SIZE
    max_layer_depth: int = DEFAULT_MAX_LAYER_DEPTH
    max_image_dimension: int = MAX_IMAGE_DIMENSION

    @classmethod
    def default(cls) -> "ResourceLimits":
        """Create ResourceLimits from environment variables.

        Raises:
            ValueError: If an environment variable is not a valid integer.

        Note:
            Negative values are treated as 0 (disabled limit) with a warning.
        """

        def parse_env_int(key: str, default: int) -> int:
            value_str = os.environ.get(key)
            if value_str is None:
                return default

            try:
                value = int(value_str)
            except ValueError as e:
                raise ValueError(
                    f"Environment variable {key}={value_str!r} is not a valid integer"
                ) from e

            if value < 0:
                logger.warning(
                    f"Environment variable {key}={value} is negative, "
                    f"treating as 0 (disabled limit). "
                    f"Consider using ResourceLimits.unlimited() instead."
                )
                return 0

            return value

        return cls(
            max_file_size=parse_env_int(
                "PSD2JSON_MAX_FILE_SIZE", DEFAULT_MAX_FILE_SIZE
            ),
            max_layer_depth=parse_env_int(
                "PSD2JSON_MAX_LAYER_DEPTH", DEFAULT_MAX_LAYER_DEPTH
            ),
            max_image_dimension=parse_env_int(
                "PSD2JSON_MAX_IMAGE_DIMENSION", MAX_IMAGE_DIMENSION
            ),
        )

    @classmethod
    def unlimited(cls) -> "ResourceLimits":
        """Create ResourceLimits with all limits disabled.

        Warning:
            Only use this for trusted input files.
        """
        return cls(max_file_size=0, max_layer_depth=0, max_image_dimension=0)

    def is_file_size_limited(self) -> bool:
        return self.max_file_size > 0

    def is_layer_depth_limited(self) -> bool:
        return self.max_layer_depth > 0

    def is_image_dimension_limited(self) -> bool:
        return self.max_image_dimension > 0
