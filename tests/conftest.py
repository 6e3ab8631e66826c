from __future__ import annotations

import sys
from dataclasses import replace
from pathlib import Path

import pytest

from jar_compat.config import Options, ToolsConfig, default_options

# Each fake fails the way the real tool does when handed a path that does not
# exist from its working directory.
FAKE_UNZIP = """\
if [ "$1" = "-l" ]; then
    [ -f "$2" ] || { echo "unzip: cannot find $2" >&2; exit 9; }
    echo "     1024  2024-01-01 00:00   classes.dex"
    echo "     1024  2024-01-01 00:00   classes2.dex"
    exit 0
fi
[ -f "$3" ] || { echo "unzip: cannot find $3" >&2; exit 9; }
if [ "$5" = "-d" ]; then
    mkdir -p "$6" && touch "$6/classes.dex" "$6/classes2.dex"
else
    mkdir -p "$5" && touch "$5/$(basename "$3" .jar).class"
fi
"""

FAKE_DEX2JAR = """\
[ -f "$1" ] || { echo "dex2jar: $1 does not exist" >&2; exit 1; }
[ -d "$(dirname "$3")" ] || { echo "dex2jar: cannot write $3" >&2; exit 1; }
echo converted > "$3"
"""

FAKE_ZIP = """\
out="$4"
shift 4
for entry in "$@"; do
    [ -e "$entry" ] || { echo "zip: $entry not found" >&2; exit 12; }
done
echo merged > "$out"
"""

FAKE_CHECKER = """\
while [ $# -gt 0 ]; do
    case "$1" in
        -old) old="$2"; shift 2 ;;
        -new) new="$2"; shift 2 ;;
        *) shift ;;
    esac
done
if [ ! -f "$old" ] || [ ! -f "$new" ]; then
    echo "ERROR: can't access $old or $new"
    exit 1
fi
echo "Binary compatibility: 100%"
echo "Source compatibility: 100%"
echo "Total binary compatibility problems: 0, warnings: 0"
echo "Total source compatibility problems: 0, warnings: 0"
"""


@pytest.fixture
def make_options(tmp_path: Path):
    def _make(**changes: object) -> Options:
        base = replace(
            default_options(environ={}),
            num_threads=2,
            temp_dir=tmp_path / "temp",
            output_dir=tmp_path / "out",
        )
        return replace(base, **changes)

    return _make


@pytest.fixture
def fake_tools(tmp_path: Path) -> ToolsConfig:
    """Executable shell stand-ins for unzip, zip, d2j-dex2jar and the checker."""
    if sys.platform == "win32":
        pytest.skip("fake tools are POSIX shell scripts")
    bin_dir = tmp_path / "fake-bin"
    bin_dir.mkdir()

    def _script(name: str, body: str) -> str:
        path = bin_dir / name
        path.write_text(f"#!/bin/sh\n{body}", encoding="utf-8")
        path.chmod(0o755)
        return str(path)

    return ToolsConfig(
        compliance_checker=_script("japi-compliance-checker", FAKE_CHECKER),
        dex2jar=_script("d2j-dex2jar.sh", FAKE_DEX2JAR),
        unzip=_script("unzip", FAKE_UNZIP),
        zip=_script("zip", FAKE_ZIP),
    )
