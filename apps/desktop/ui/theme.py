"""
Theme tokens and QSS for the fatigue monitor widget.
"""

from __future__ import annotations

from typing import Literal

SPACING = {
    "xs": "4px",
    "sm": "8px",
    "md": "12px",
    "lg": "16px",
}

TYPOGRAPHY = {
    "font_family": "Segoe UI, -apple-system, BlinkMacSystemFont, sans-serif",
    "font_size_sm": "12px",
    "font_size_base": "14px",
    "font_size_lg": "17px",
    "font_size_hero": "40px",
    "font_weight_normal": "400",
    "font_weight_semibold": "600",
    "font_weight_bold": "700",
}

ACCENTS = {
    "charge": "#FFCC00",
    "monitoring": "#34C759",
    "warning": "#FF3B30",
    "muted": "#8E8E93",
}

LIGHT_COLORS = {
    "background": "#F5F5F7",
    "surface": "#FFFFFF",
    "surface_secondary": "#F2F2F7",
    "text_primary": "#000000",
    "text_secondary": "#6E6E73",
    "border": "#E5E5EA",
}

DARK_COLORS = {
    "background": "#000000",
    "surface": "#1C1C1E",
    "surface_secondary": "#2C2C2E",
    "text_primary": "#FFFFFF",
    "text_secondary": "#98989D",
    "border": "#38383A",
}

ThemeMode = Literal["light", "dark"]


class Theme:
    """QSS generator for light and dark modes."""

    def __init__(self, mode: ThemeMode = "dark"):
        self.mode = mode
        self.colors = LIGHT_COLORS if mode == "light" else DARK_COLORS

    def get_stylesheet(self) -> str:
        c = self.colors
        font = TYPOGRAPHY["font_family"]

        return f"""
        QMainWindow {{
            background-color: {c["background"]};
            color: {c["text_primary"]};
        }}

        QLabel#TitleLabel {{
            font-family: {font};
            font-size: {TYPOGRAPHY["font_size_lg"]};
            font-weight: {TYPOGRAPHY["font_weight_bold"]};
            color: {c["text_primary"]};
        }}

        QLabel#FatigueNumber {{
            font-family: {font};
            font-size: {TYPOGRAPHY["font_size_hero"]};
            font-weight: {TYPOGRAPHY["font_weight_bold"]};
            color: {ACCENTS["charge"]};
        }}

        QLabel#BodyLabel {{
            font-family: {font};
            font-size: {TYPOGRAPHY["font_size_base"]};
            color: {c["text_primary"]};
        }}

        QLabel#HintLabel {{
            font-family: {font};
            font-size: {TYPOGRAPHY["font_size_sm"]};
            color: {c["text_secondary"]};
        }}

        QLabel#WarningLabel {{
            font-family: {font};
            font-size: {TYPOGRAPHY["font_size_sm"]};
            font-weight: {TYPOGRAPHY["font_weight_semibold"]};
            color: {ACCENTS["warning"]};
        }}

        QFrame#Card {{
            background-color: {c["surface"]};
            border-radius: 16px;
            border: 1px solid {c["border"]};
        }}

        QProgressBar#FatigueBar {{
            background-color: {c["surface_secondary"]};
            border: none;
            border-radius: 6px;
            max-height: 12px;
        }}

        QProgressBar#FatigueBar::chunk {{
            background-color: {ACCENTS["charge"]};
            border-radius: 6px;
        }}

        QPushButton#PrimaryButton {{
            background-color: {ACCENTS["charge"]};
            color: #000000;
            border: none;
            border-radius: 18px;
            padding: {SPACING["sm"]} {SPACING["lg"]};
            font-family: {font};
            font-size: {TYPOGRAPHY["font_size_base"]};
            font-weight: {TYPOGRAPHY["font_weight_semibold"]};
            min-height: 32px;
        }}

        QPushButton#PrimaryButton:checked {{
            background-color: {ACCENTS["monitoring"]};
        }}

        QPushButton#SecondaryButton {{
            background-color: {c["surface_secondary"]};
            color: {c["text_primary"]};
            border: 1px solid {c["border"]};
            border-radius: 18px;
            padding: {SPACING["sm"]} {SPACING["lg"]};
            font-family: {font};
            font-size: {TYPOGRAPHY["font_size_base"]};
            min-height: 32px;
        }}

        QLineEdit, QSpinBox {{
            background-color: {c["surface"]};
            color: {c["text_primary"]};
            border: 1px solid {c["border"]};
            border-radius: 8px;
            padding: {SPACING["xs"]} {SPACING["sm"]};
            font-family: {font};
            font-size: {TYPOGRAPHY["font_size_base"]};
            min-height: 28px;
        }}

        QLineEdit:focus, QSpinBox:focus {{
            border-color: {ACCENTS["charge"]};
        }}

        QListWidget {{
            background-color: transparent;
            border: none;
            color: {c["text_secondary"]};
            font-family: {font};
            font-size: {TYPOGRAPHY["font_size_sm"]};
        }}

        QLabel#StatusPill {{
            background-color: {self._rgba(ACCENTS["muted"], 0.15)};
            color: {c["text_secondary"]};
            border-radius: 10px;
            padding: {SPACING["xs"]} {SPACING["md"]};
            font-family: {font};
            font-size: {TYPOGRAPHY["font_size_sm"]};
        }}

        QLabel#StatusPillActive {{
            background-color: {self._rgba(ACCENTS["monitoring"], 0.15)};
            color: {ACCENTS["monitoring"]};
            border-radius: 10px;
            padding: {SPACING["xs"]} {SPACING["md"]};
            font-family: {font};
            font-size: {TYPOGRAPHY["font_size_sm"]};
        }}
        """

    def _rgba(self, hex_color: str, alpha: float) -> str:
        hex_color = hex_color.lstrip("#")
        r, g, b = int(hex_color[0:2], 16), int(hex_color[2:4], 16), int(hex_color[4:6], 16)
        return f"rgba({r}, {g}, {b}, {alpha})"
