"""
Rendering parameters and accent-colour theming.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from cv_assistant.services.resume_pdf.canvas import BLACK, RGB, WHITE
from cv_assistant.services.resume_pdf.errors import ValidationError

FONT_SIZES = (8, 9, 10, 11, 12, 14)


class TemplateId(Enum):
    HARVARD = "harvard"
    CHRONOLOGICAL = "chronological"
    SIDEBAR_SERIF = "sidebar-serif"
    CARD_GRID = "card-grid"


class AccentColor(Enum):
    BLACK = "black"
    DARK_BLUE = "dark-blue"
    DARK_GRAY = "dark-gray"
    CRIMSON = "crimson"
    DARK_GREEN = "dark-green"
    TEAL_CUSTOM = "teal-custom"


class ContentDensity(Enum):
    CONCISE = "concise"
    BALANCED = "balanced"
    DETAILED = "detailed"


ACCENT_RGB = {
    AccentColor.BLACK: (0.0, 0.0, 0.0),
    AccentColor.DARK_BLUE: (0.1, 0.2, 0.5),
    AccentColor.DARK_GRAY: (0.2, 0.2, 0.2),
    AccentColor.CRIMSON: (165 / 255, 28 / 255, 48 / 255),
    AccentColor.DARK_GREEN: (0.1, 0.4, 0.2),
    AccentColor.TEAL_CUSTOM: (0.0, 0.45, 0.45),
}


def mix(a: RGB, b: RGB, t: float) -> RGB:
    """Linear interpolation from colour ``a`` towards ``b``."""
    return (
        a[0] * (1 - t) + b[0] * t,
        a[1] * (1 - t) + b[1] * t,
        a[2] * (1 - t) + b[2] * t,
    )


@dataclass(frozen=True)
class Palette:
    accent: RGB

    @property
    def dark(self) -> RGB:
        return mix(self.accent, BLACK, 0.25)

    @property
    def light(self) -> RGB:
        return mix(self.accent, WHITE, 0.6)


@dataclass(frozen=True)
class StyleConfig:
    """``use_italic`` is accepted for API compatibility; italic always renders with the regular face."""

    font_size_pt: int = 11
    use_bold: bool = True
    use_italic: bool = False
    accent_color: AccentColor = AccentColor.BLACK
    content_density: ContentDensity = ContentDensity.BALANCED
    template: TemplateId = TemplateId.HARVARD

    def __post_init__(self):
        if self.font_size_pt not in FONT_SIZES:
            raise ValidationError(
                f"Unsupported font size {self.font_size_pt}pt, expected one of {FONT_SIZES}"
            )

    @property
    def palette(self) -> Palette:
        return Palette(ACCENT_RGB[self.accent_color])

    @classmethod
    def from_preferences(
        cls,
        font_size: Optional[str] = None,
        use_bold: Optional[bool] = None,
        use_italic: Optional[bool] = None,
        accent_color: Optional[str] = None,
        content_density: Optional[str] = None,
        template: Optional[str] = None,
    ) -> "StyleConfig":
        """Build from loosely typed preferences such as ``"10pt"`` or ``"crimson"``."""
        try:
            size = int(str(font_size).lower().replace("pt", "").strip()) if font_size else 11
            return cls(
                font_size_pt=size,
                use_bold=True if use_bold is None else bool(use_bold),
                use_italic=bool(use_italic),
                accent_color=AccentColor(accent_color or "black"),
                content_density=ContentDensity(content_density or "balanced"),
                template=TemplateId(template or "harvard"),
            )
        except ValueError as e:
            raise ValidationError(f"Invalid style preferences: {e}")
