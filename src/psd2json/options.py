import dataclasses
import logging
from typing import Any, Literal

from psd2json.errors import ErrorCode, PSDConversionError

logger = logging.getLogger(__name__)

Units = Literal["px", "percent"]

UNITS: tuple[str, ...] = ("px", "percent")


@dataclasses.dataclass(frozen=True)
class ConversionOptions:
    """Conversion options.

    Args:
        include_hidden: Include layers whose visibility flag is off.
        logging: Emit progress messages at INFO level on the ``psd2json``
            logger.
        units: ``"px"`` renders geometry as numbers in document pixels,
            ``"percent"`` renders it relative to the document size.
    """

    include_hidden: bool = False
    logging: bool = False
    units: Units = "px"

    @classmethod
    def from_kwargs(cls, **options: Any) -> "ConversionOptions":
        """Validate keyword options.

        Raises:
            PSDConversionError: INVALID_OPTIONS on an unknown key or a value of
                the wrong type.
        """
        fields = {field.name for field in dataclasses.fields(cls)}
        unknown = sorted(set(options) - fields)
        if unknown:
            raise PSDConversionError(
                f"Unknown options: {', '.join(unknown)}",
                ErrorCode.INVALID_OPTIONS,
                {"unknown": unknown},
            )

        for key in ("include_hidden", "logging"):
            if key in options and not isinstance(options[key], bool):
                raise PSDConversionError(
                    f"Option '{key}' must be a boolean, "
                    f"got {type(options[key]).__name__}",
                    ErrorCode.INVALID_OPTIONS,
                    {key: options[key]},
                )

        if "units" in options and options["units"] not in UNITS:
            raise PSDConversionError(
                f"Option 'units' must be one of {', '.join(UNITS)}, "
                f"got {options['units']!r}",
                ErrorCode.INVALID_OPTIONS,
                {"units": options["units"]},
            )

        return cls(**options)
