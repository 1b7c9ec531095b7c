"""Run the propsite test suite with the project's virtual environment when one exists."""

from __future__ import annotations

import os
import subprocess
import sys
from pathlib import Path

VENV_NAMES = (".venv", "venv")


def find_python(root: Path) -> str:
    scripts_dir = "Scripts" if os.name == "nt" else "bin"
    executable = "python.exe" if os.name == "nt" else "python"
    for name in VENV_NAMES:
        candidate = root / name / scripts_dir / executable
        if candidate.exists():
            return str(candidate)
    return sys.executable


def main(argv: list[str] | None = None) -> int:
    args = list(argv or [])
    root = Path(__file__).resolve().parents[1]
    if not any(not arg.startswith("-") for arg in args):
        args.append("tests")
    return subprocess.call([find_python(root), "-m", "pytest", "-q", *args], cwd=root)


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
