"""
Shared color definitions for terminal output.
"""


class Colors:
    RESET = "\x1b[0m"
    BOLD = "\x1b[1m"
    DIM = "\x1b[2m"
    RED = "\x1b[38;2;239;68;68m"
    GREEN = "\x1b[38;2;76;175;80m"
    ORANGE = "\x1b[38;2;255;152;0m"
    BLUE = "\x1b[38;2;33;150;243m"
    MUTED = "\x1b[38;2;148;163;184m"
