"""
LIGHTBOX IMAGE EDITOR - UI Constants

Centralized theme colors, overlay geometry and timing constants.
Import from here instead of hardcoding values throughout the codebase.

Usage:
    from ui_constants import Colors, Dimensions, Timing

    cv2.rectangle(surface, p1, p2, Colors.CROP_BORDER, Dimensions.CROP_BORDER_WIDTH)
    self._render_timer.start(Timing.RENDER_INTERVAL_MS)
"""


class Colors:
    """Centralized color definitions for the editor theme."""

    # === Background Colors (dark theme) ===
    BACKGROUND_DARKEST = "#1a1a1a"  # Canvas background behind the preview
    BACKGROUND_MEDIUM = "#3a3a3a"   # Elevated surfaces

    # === Text Colors ===
    TEXT_PRIMARY = "#ffffff"
    TEXT_MUTED = "#888888"

    # === Accent Colors ===
    ACCENT_PRIMARY = "#e67e22"      # Modified controls, primary action

    # === Crop Overlay (RGB tuples, drawn straight into pixel buffers) ===
    CROP_BORDER = (255, 255, 255)
    CROP_HANDLE = (255, 255, 255)
    CROP_HANDLE_OUTLINE = (0, 0, 0)
    MASK_DIM_FACTOR = 0.45          # Brightness kept outside the crop rectangle


class Dimensions:
    """Centralized dimension constants for consistent sizing."""

    # === Crop Overlay ===
    HANDLE_SIZE = 8                 # Drawn handle square (px)
    HANDLE_HIT_RADIUS = 12          # Pointer distance that grabs a handle (px)
    CROP_BORDER_WIDTH = 1

    # === Widgets ===
    BUTTON_SMALL = (24, 24)         # Reset buttons
    BUTTON_WIDTH_STANDARD = 50      # Rotation / flip buttons
    PANEL_WIDTH_WIDE = 320          # Adjustments panel
    CANVAS_MIN_SIZE = (320, 240)
    COMBO_WIDTH = 120


class Timing:
    """Render scheduling constants."""

    RENDER_INTERVAL_MS = 16         # Coalesce renders to roughly one per frame


class Styles:
    """Pre-built style strings for common patterns."""

    SCROLL_AREA_DARK = f"""
        QScrollArea {{
            border: none;
            background-color: {Colors.BACKGROUND_MEDIUM};
        }}
    """


def get_accent_button_style() -> str:
    """Return the accent button style string (for dynamic application)."""
    return f"QPushButton {{ background-color: {Colors.ACCENT_PRIMARY}; color: white; font-weight: bold; }}"
