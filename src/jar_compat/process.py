"""Subprocess execution helpers for the external archive and comparison tools."""

from __future__ import annotations

import subprocess
from collections.abc import Iterator, Sequence
from pathlib import Path

OUTPUT_ENCODING = "utf-8"


class CommandError(Exception):
    """Raised when a checked external command exits with a non-zero status."""

    def __init__(self, command: Sequence[str], returncode: int, stderr: str) -> None:
        self.command = tuple(command)
        self.returncode = returncode
        self.stderr = stderr
        super().__init__(str(self))

    def __str__(self) -> str:
        detail = self.stderr.strip() or "no error output"
        return f"{self.command[0]} exited with status {self.returncode}: {detail}"


def run_command(
    args: Sequence[str],
    cwd: Path | None = None,
    *,
    check: bool = True,
) -> list[str]:
    """Run a command to completion and return its stdout as a list of lines."""
    completed = subprocess.run(
        list(args),
        cwd=cwd,
        check=False,
        capture_output=True,
        text=True,
        encoding=OUTPUT_ENCODING,
        errors="replace",
    )
    if check and completed.returncode != 0:
        raise CommandError(
            command=tuple(args),
            returncode=completed.returncode,
            stderr=completed.stderr,
        )
    return completed.stdout.splitlines()


def iter_command_lines(
    args: Sequence[str],
    cwd: Path | None = None,
    *,
    check: bool = False,
) -> Iterator[str]:
    """Yield stripped stdout lines of a command while it runs.

    Stderr is discarded. Invalid UTF-8 sequences are replaced rather than
    failing the read. With ``check`` enabled a non-zero exit status raises
    ``CommandError`` once the output has been consumed.
    """
    with subprocess.Popen(
        list(args),
        cwd=cwd,
        stdout=subprocess.PIPE,
        stderr=subprocess.DEVNULL,
        text=True,
        encoding=OUTPUT_ENCODING,
        errors="replace",
    ) as process:
        assert process.stdout is not None
        for raw_line in process.stdout:
            yield raw_line.strip()
        returncode = process.wait()
    if check and returncode != 0:
        raise CommandError(command=tuple(args), returncode=returncode, stderr="")
