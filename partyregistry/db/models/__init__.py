from .enums import Ideology, IDEOLOGY_LABELS, REPRESENTATIVE_COLORS
from .party import Party

__all__ = ["Ideology", "IDEOLOGY_LABELS", "REPRESENTATIVE_COLORS", "Party"]
