from __future__ import annotations

import warnings
from pathlib import Path
from typing import Any

from plotpulse.core.progress import ProgressLog

MISSING_DIRECTORY_WARNING = (
    "The directory specified in save_path does not exist. The plot will not be saved."
)


class FigureSaver:
    """Write a rendered matplotlib figure to a PDF sized to the requested canvas."""

    def save(
        self,
        figure: Any,
        save_path: Path | str,
        figsize: tuple[float, float],
        create_dir: bool,
        log: ProgressLog,
    ) -> bool:
        path = Path(save_path)
        directory = path.parent
        if not directory.exists():
            if not create_dir:
                warnings.warn(MISSING_DIRECTORY_WARNING, UserWarning, stacklevel=4)
                log("Failed to save plot - directory does not exist")
                return False
            directory.mkdir(parents=True, exist_ok=True)
            log(f"Directory created: {directory}")

        figure.set_size_inches(float(figsize[0]), float(figsize[1]))
        figure.savefig(path, format="pdf")
        log(f"Plot saved to {path}")
        return True
