"""
Theme model
"""

from enum import Enum


class Theme(str, Enum):
    """Site colour scheme"""
    LIGHT = "light"
    DARK = "dark"

    @property
    def opposite(self) -> "Theme":
        return Theme.DARK if self is Theme.LIGHT else Theme.LIGHT
