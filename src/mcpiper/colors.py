"""Terminal color constants.

Values are rich color names so the output sink can translate them into
whatever the destination stream supports (ANSI, truecolor, or nothing).
"""

# None means "the terminal's default color"; no styling is emitted.
DEFAULT = None

# Foreground
GREEN = "green"
YELLOW = "yellow"
BLUE = "blue"
MAGENTA = "magenta"
CYAN = "cyan"
WHITE = "bright_white"

# Dim variants
DARK_GRAY = "bright_black"
DARK_YELLOW = "yellow3"

# Match highlight: bold so it survives on 8-color terminals
MATCH = "bold red"
