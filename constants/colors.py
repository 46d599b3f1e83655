RESET = "\033[0m"       # Reset color
BOLD_CYAN = "\033[1;36m"  # Bold Cyan for presentation names
BOLD_YELLOW = "\033[1;33m"  # Bold Yellow for folder names
YELLOW = "\033[0;33m"  # Yellow for highlights
RED = "\033[0;31m"  # Red for errors
GREEN = "\033[0;32m"  # Green for success
DARK_GRAY = "\033[0;90m"  # Dark gray for skipped items
