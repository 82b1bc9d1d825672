"""
Render options: page format, orientation, margins, scale and timeout.

``DEFAULT_RENDER_OPTIONS`` is an immutable constant. Callers send a partial
``RenderOptionsOverrides`` which is validated on the way in, and
``resolve_options`` merges it field-by-field on top of the defaults.
"""

import re
from enum import Enum
from typing import Any, Dict, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .errors import InvalidRequest, describe_validation_errors

MAX_TIMEOUT_MS = 300000

_LENGTH_RE = re.compile(r"^\d+(\.\d+)?(px|in|cm|mm)$")
_NUMBER_RE = re.compile(r"^\d+(\.\d+)?$")


class _CaseInsensitiveEnum(str, Enum):
    @classmethod
    def _missing_(cls, value):
        if isinstance(value, str):
            for member in cls:
                if member.value.lower() == value.strip().lower():
                    return member
        return None


class PageFormat(_CaseInsensitiveEnum):
    """Paper formats understood by Chromium's print-to-PDF."""

    A4 = "A4"
    LETTER = "Letter"
    LEGAL = "Legal"
    TABLOID = "Tabloid"
    LEDGER = "Ledger"
    A0 = "A0"
    A1 = "A1"
    A2 = "A2"
    A3 = "A3"
    A5 = "A5"
    A6 = "A6"


class Orientation(_CaseInsensitiveEnum):
    PORTRAIT = "portrait"
    LANDSCAPE = "landscape"


def normalize_length(value: Any) -> str:
    """
    Normalize a CSS print length.

    Bare numbers (``20`` or ``"20"``) are read as pixels.

    Raises:
        ValueError: If the value is not a non-negative length in px/in/cm/mm
    """
    if isinstance(value, bool):
        raise ValueError(f"invalid margin length: {value!r}")
    if isinstance(value, (int, float)):
        if value < 0:
            raise ValueError("margin length must not be negative")
        return f"{value:g}px"
    if isinstance(value, str):
        text = value.strip().lower()
        if _NUMBER_RE.match(text):
            return f"{text}px"
        if _LENGTH_RE.match(text):
            return text
    raise ValueError(
        f"invalid margin length: {value!r} (expected e.g. '20px', '0.5in', '1cm')"
    )


class Margin(BaseModel):
    """Page margins, each a length with unit."""

    model_config = ConfigDict(frozen=True)

    top: str = "20px"
    bottom: str = "20px"
    left: str = "20px"
    right: str = "20px"


class RenderOptions(BaseModel):
    """Complete, resolved set of options for one render."""

    model_config = ConfigDict(frozen=True)

    format: PageFormat = PageFormat.A4
    orientation: Orientation = Orientation.PORTRAIT
    margin: Margin = Field(default_factory=Margin)
    printBackground: bool = True
    scale: float = 1.0
    timeout: int = Field(30000, description="Render timeout in milliseconds")

    @property
    def landscape(self) -> bool:
        return self.orientation == Orientation.LANDSCAPE

    @property
    def timeout_seconds(self) -> float:
        return self.timeout / 1000.0

    def to_pdf_kwargs(self) -> Dict[str, Any]:
        """Keyword arguments for Playwright's ``page.pdf()``."""
        return {
            "format": self.format.value,
            "landscape": self.landscape,
            "margin": self.margin.model_dump(),
            "print_background": self.printBackground,
            "scale": self.scale,
        }


DEFAULT_RENDER_OPTIONS = RenderOptions()


class MarginOverrides(BaseModel):
    """Caller-supplied margins; unset sides keep their defaults."""

    model_config = ConfigDict(extra="ignore")

    top: Optional[str] = None
    bottom: Optional[str] = None
    left: Optional[str] = None
    right: Optional[str] = None

    @field_validator("top", "bottom", "left", "right", mode="before")
    @classmethod
    def validate_length(cls, v: Any) -> Optional[str]:
        if v is None:
            return None
        return normalize_length(v)


class RenderOptionsOverrides(BaseModel):
    """
    Partial render options as sent by API clients or built by the CLI.

    Every field is optional. Invalid values are rejected here so that
    ``resolve_options`` itself never has to fail.
    """

    model_config = ConfigDict(extra="ignore")

    format: Optional[PageFormat] = Field(None, description="Paper format, e.g. 'A4' or 'Letter'")
    orientation: Optional[Orientation] = Field(None, description="'portrait' or 'landscape'")
    margin: Optional[MarginOverrides] = None
    printBackground: Optional[bool] = Field(None, description="Print background colors/images")
    scale: Optional[float] = Field(None, ge=0.1, le=2.0, description="Scale factor (0.1 to 2.0)")
    timeout: Optional[int] = Field(None, gt=0, le=MAX_TIMEOUT_MS, description="Timeout in milliseconds")

    @field_validator("format", mode="before")
    @classmethod
    def validate_format(cls, v: Any) -> Optional[PageFormat]:
        if v is None:
            return None
        try:
            return PageFormat(v)
        except ValueError:
            allowed = ", ".join(f.value for f in PageFormat)
            raise ValueError(f"unknown format {v!r}; expected one of: {allowed}")

    @field_validator("orientation", mode="before")
    @classmethod
    def validate_orientation(cls, v: Any) -> Optional[Orientation]:
        if v is None:
            return None
        try:
            return Orientation(v)
        except ValueError:
            raise ValueError(f"unknown orientation {v!r}; expected 'portrait' or 'landscape'")


def parse_overrides(data: Optional[Mapping[str, Any]]) -> Optional[RenderOptionsOverrides]:
    """
    Validate a raw options mapping.

    Raises:
        InvalidRequest: If the mapping is not an object or holds invalid values
    """
    if data is None:
        return None
    if not isinstance(data, Mapping):
        raise InvalidRequest("options must be a JSON object")
    try:
        return RenderOptionsOverrides.model_validate(dict(data))
    except ValidationError as e:
        raise InvalidRequest(f"Invalid options: {describe_validation_errors(e.errors())}")


def resolve_options(overrides: Optional[RenderOptionsOverrides] = None) -> RenderOptions:
    """
    Merge caller overrides onto the defaults.

    Fields the caller left unset keep their default value; fields the caller
    set are taken verbatim. Margins merge per side.

    Args:
        overrides: Validated partial options, or None for all defaults

    Returns:
        Fully populated RenderOptions
    """
    if overrides is None:
        return DEFAULT_RENDER_OPTIONS

    updates = overrides.model_dump(exclude_none=True)
    margin_updates = updates.pop("margin", None)
    if margin_updates:
        updates["margin"] = DEFAULT_RENDER_OPTIONS.margin.model_copy(update=margin_updates)
    return DEFAULT_RENDER_OPTIONS.model_copy(update=updates)


def describe_options() -> Dict[str, Any]:
    """Valid formats, orientations and the default options, for client discovery."""
    return {
        "formats": [f.value for f in PageFormat],
        "orientations": [o.value for o in Orientation],
        "defaultOptions": DEFAULT_RENDER_OPTIONS.model_dump(mode="json"),
    }
