"""utils package – Geometry and drawing helpers."""

from .geometry import Box
from .helpers import draw_text, draw_banner, draw_end_screen
