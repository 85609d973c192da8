"""Simple notification system with audio feedback."""

import sys
import subprocess

from rich.console import Console
from rich.markup import escape

from ..utils.log import get_logger

_STYLES = {
    "success": "green",
    "error": "red",
    "warning": "yellow",
    "info": "cyan",
}


class SimpleNotifier:
    """Soft notifications: a console line plus a log event, and an optional beep."""

    def __init__(self, console: Console = None):
        self.logger = get_logger(__name__)
        self.console = console or Console(stderr=True)

    def beep(self) -> bool:
        """Play system beep sound."""
        try:
            if sys.platform == "darwin":  # macOS
                subprocess.run(["afplay", "/System/Library/Sounds/Glass.aiff"],
                               capture_output=True, check=False)
            else:
                # Fallback to terminal bell
                print("\a", end="", flush=True)
            return True
        except Exception as e:
            self.logger.debug("Error playing beep", error=str(e))
            return False

    def status_toast(self, message: str, level: str = "info"):
        """Show a non-blocking status message."""
        style = _STYLES.get(level, "cyan")
        self.console.print(f"[{style}]{escape(message)}[/{style}]")

        if level == "success":
            self.logger.info(f"SUCCESS: {message}")
        elif level == "error":
            self.logger.error(f"ERROR: {message}")
        elif level == "warning":
            self.logger.warning(f"WARNING: {message}")
        else:
            self.logger.info(f"INFO: {message}")


# Global singleton
notifier = SimpleNotifier()
