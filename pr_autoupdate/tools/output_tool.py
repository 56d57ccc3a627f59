"""Action outputs (``GITHUB_OUTPUT``)."""

from pathlib import Path
from typing import Any, Dict, Optional

from ..utils import get_logger

CONFLICTED = "conflicted"


class ActionOutput:
    """
    Writes named step outputs for the GitHub Actions runner.

    Values are appended to the file named by ``GITHUB_OUTPUT``. Without
    one (e.g. running locally) the legacy ``::set-output`` command is
    printed instead.
    """

    def __init__(self, output_path: Optional[str] = None):
        self.output_path = Path(output_path) if output_path else None
        self.logger = get_logger()
        self._values: Dict[str, str] = {}

    def set_output(self, name: str, value: Any) -> None:
        """Record one output value."""
        rendered = _render(value)
        self._values[name] = rendered

        if self.output_path is None:
            print(f"::set-output name={name}::{rendered}")
            return

        with self.output_path.open("a", encoding="utf-8") as fh:
            fh.write(f"{name}={rendered}\n")
        self.logger.debug(f"Set output {name}={rendered}")

    @property
    def values(self) -> Dict[str, str]:
        """Get copy of the outputs set so far."""
        return self._values.copy()


def _render(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)
