"""System clipboard access through the platform's copy command."""

import asyncio
import shutil
import subprocess
import sys
from typing import List, Optional

from ..utils.error_handler import ClipboardError
from ..utils.log import LoggerMixin

# Tried in order on Linux/BSD
_UNIX_COMMANDS = [
    ["wl-copy"],
    ["xclip", "-selection", "clipboard"],
    ["xsel", "--clipboard", "--input"],
]


class SystemClipboard(LoggerMixin):
    """Writes literal text to the system clipboard."""

    def __init__(self, command: Optional[List[str]] = None):
        self.command = command

    def resolve_command(self) -> List[str]:
        if self.command:
            return self.command

        if sys.platform == "darwin":
            return ["pbcopy"]
        if sys.platform == "win32":
            return ["clip"]

        for candidate in _UNIX_COMMANDS:
            if shutil.which(candidate[0]):
                return candidate

        raise ClipboardError(
            "No clipboard command available",
            details={"tried": [c[0] for c in _UNIX_COMMANDS]},
        )

    def _write_blocking(self, text: str):
        command = self.resolve_command()
        try:
            result = subprocess.run(
                command,
                input=text.encode("utf-8"),
                capture_output=True,
                check=False,
                timeout=5,
            )
        except (OSError, subprocess.SubprocessError) as e:
            raise ClipboardError(
                "Clipboard command failed",
                details={"command": command[0], "error": str(e)},
            ) from e

        if result.returncode != 0:
            raise ClipboardError(
                "Clipboard command failed",
                details={
                    "command": command[0],
                    "returncode": result.returncode,
                    "stderr": result.stderr.decode("utf-8", "replace").strip(),
                },
            )

    async def write_text(self, text: str):
        """
        Copy text verbatim.

        Raises:
            ClipboardError: If no clipboard is reachable or the write fails
        """
        await asyncio.to_thread(self._write_blocking, text)
        self.logger.debug("Clipboard written", length=len(text))


# Global singleton
clipboard = SystemClipboard()
