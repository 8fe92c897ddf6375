"""
Console presentation for the modpack installer.
"""

from .colors import Colors
from .console import ConsoleProgress, confirm, print_header

__all__ = ["Colors", "ConsoleProgress", "confirm", "print_header"]
