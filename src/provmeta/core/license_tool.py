# license_tool.py
# SPDX-License-Identifier: MIT
"""Invoke an external license detector over a directory.

The detector (``licensee detect`` by default) prints a ``License: <name>``
line; only that descriptive name is returned. Whether the detector can run
at all is exposed through :func:`detector_available` so that callers can
tell "tool missing" apart from "tool found nothing".
"""

from __future__ import annotations

import re
import shutil
import subprocess
from pathlib import Path
from typing import Optional

from .config import ExtractionConfig
from .log import get_logger

log = get_logger(__name__)

__all__ = ["detector_available", "run_license_detector", "parse_detector_output"]

_LICENSE_LINE_RE = re.compile(r"^\s*License:\s*(?P<name>.*?)\s*$", re.MULTILINE)


def detector_available(config: ExtractionConfig | None = None) -> bool:
    """Return True when the detector is enabled and its executable is on PATH."""
    cfg = (config or ExtractionConfig()).license
    if not cfg.use_detector:
        return False
    return shutil.which(cfg.detector_command[0]) is not None


def parse_detector_output(output: str) -> Optional[str]:
    """Return the name from the first ``License:`` line, or None."""
    m = _LICENSE_LINE_RE.search(output or "")
    if not m:
        return None
    return m.group("name")


def run_license_detector(directory: str | Path, *, config: ExtractionConfig | None = None) -> Optional[str]:
    """Run the configured detector over ``directory``.

    Returns:
        Optional[str]: Descriptive license name, or None when the detector is
        disabled, missing, fails, or prints nothing recognizable.
    """
    cfg = config or ExtractionConfig()
    if not detector_available(cfg):
        log.debug("License detector %r unavailable; skipping", cfg.license.detector_command[0])
        return None
    cmd = [*cfg.license.detector_command, str(directory)]
    try:
        proc = subprocess.run(cmd, check=False, capture_output=True, text=True)
    except (OSError, subprocess.SubprocessError) as exc:
        log.info("License detector failed for %s: %s", directory, exc)
        return None
    if proc.returncode != 0:
        log.info("License detector exited with %s for %s", proc.returncode, directory)
        return None
    name = parse_detector_output(proc.stdout)
    if name is None:
        log.debug("License detector printed no License line for %s", directory)
    return name
