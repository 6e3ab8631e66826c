from __future__ import annotations

import io
import json
import shutil
from pathlib import Path

import pytest

from jar_compat import cli
from jar_compat.cli import main
from jar_compat.tasks import compat

CLEAN_OUTPUT = [
    "Binary compatibility: 100%",
    "Source compatibility: 100%",
    "Total binary compatibility problems: 0, warnings: 0",
    "Total source compatibility problems: 0, warnings: 0",
]
BROKEN_OUTPUT = [
    "Binary compatibility: 72.3%",
    "Source compatibility: 70%",
    "Total binary compatibility problems: 5, warnings: 2",
    "Total source compatibility problems: 6, warnings: 1",
]


def _make_build(root: Path, names: list[str]) -> Path:
    root.mkdir(parents=True)
    for name in names:
        (root / name).write_bytes(b"PK")
    return root


@pytest.fixture
def builds(tmp_path: Path, monkeypatch) -> tuple[Path, Path]:
    monkeypatch.chdir(tmp_path)
    old_root = _make_build(tmp_path / "builds" / "r1" / "system", ["a.jar", "b.jar", "d.jar"])
    new_root = _make_build(tmp_path / "builds" / "r2" / "system", ["b.jar", "c.jar", "d.jar"])
    return old_root, new_root


@pytest.fixture
def fake_checker(monkeypatch) -> list[list[str]]:
    calls: list[list[str]] = []

    def fake_lines(args, cwd=None, *, check=False):
        calls.append(list(args))
        jar_name = args[args.index("-lib") + 1]
        return iter(BROKEN_OUTPUT if jar_name == "d.jar" else CLEAN_OUTPUT)

    monkeypatch.setattr(compat, "convert_if_dex", lambda path, work_dir, tools: path)
    monkeypatch.setattr(compat, "iter_command_lines", fake_lines)
    return calls


def test_markdown_report_covers_all_sections(builds, fake_checker, tmp_path: Path) -> None:
    old_root, new_root = builds
    out_dir = tmp_path / "reports"
    buffer = io.StringIO()

    code = main(
        [str(old_root), str(new_root), "-o", str(out_dir), "-t", str(tmp_path / "t"), "-j", "2"],
        out=buffer,
    )

    assert code == 0
    assert sorted(call[call.index("-lib") + 1] for call in fake_checker) == ["b.jar", "d.jar"]
    report_dir = "r1/system_to_r2/system/compat_report.html"
    assert buffer.getvalue() == (
        "# missing files\n\n| jarName |\n| :--- |\n| a.jar |\n\n"
        "# new files\n\n| jarName |\n| :--- |\n| c.jar |\n\n"
        "# Potential problematic Jars\n\n"
        "| jarName | binCompatibility | srcCompatibility | binProblem | binWarning "
        "| srcProblem | srcWarning | report |\n"
        "|" + " :--- |" * 8 + "\n"
        f"| d.jar | 72 | 70 | 5 | 2 | 6 | 1 | {out_dir}/compat_reports/d.jar/{report_dir} |\n\n"
        "# 100% compatible Jars\n\n"
        "| jarName | binCompatibility | srcCompatibility | binProblem | binWarning "
        "| srcProblem | srcWarning | report |\n"
        "|" + " :--- |" * 8 + "\n"
        f"| b.jar | 100 | 100 | 0 | 0 | 0 | 0 | {out_dir}/compat_reports/b.jar/{report_dir} |\n"
    )
    assert out_dir.is_dir()


def test_only_issues_with_report_base_in_csv(builds, fake_checker, tmp_path: Path) -> None:
    old_root, new_root = builds
    buffer = io.StringIO()

    code = main(
        [
            str(old_root),
            str(new_root),
            "-r",
            "csv",
            "-d",
            "-s",
            "problem|compatible",
            "-u",
            "http://ci/jobs/42",
            "-o",
            str(tmp_path / "reports"),
        ],
        out=buffer,
    )

    assert code == 0
    assert buffer.getvalue() == (
        "\n"
        "jarName,binCompatibility,srcCompatibility,binProblem,binWarning,srcProblem,srcWarning,report\n"
        "d.jar,72,70,5,2,6,1,"
        "http://ci/jobs/42/compat_reports/d.jar/r1/system_to_r2/system/compat_report.html\n"
        "\n"
    )


def test_temp_directory_is_removed_unless_kept(builds, fake_checker, tmp_path: Path) -> None:
    old_root, new_root = builds
    temp_dir = tmp_path / "scratch"
    (temp_dir / "b" / "old").mkdir(parents=True)

    main([str(old_root), str(new_root), "-t", str(temp_dir), "-k"], out=io.StringIO())
    assert temp_dir.exists()

    main([str(old_root), str(new_root), "-t", str(temp_dir)], out=io.StringIO())
    assert not temp_dir.exists()


def test_run_log_records_each_comparison(builds, fake_checker, tmp_path: Path) -> None:
    old_root, new_root = builds
    run_log = tmp_path / "logs" / "run.jsonl"

    main([str(old_root), str(new_root), "--run-log", str(run_log)], out=io.StringIO())

    events = [json.loads(line) for line in run_log.read_text(encoding="utf-8").splitlines()]
    assert sorted(event["task"] for event in events) == [
        "compat-check b.jar",
        "compat-check d.jar",
    ]
    assert all(event["ok"] is True for event in events)


def test_android_mode_ignores_non_deployed_archives(
    tmp_path: Path, fake_checker, monkeypatch
) -> None:
    monkeypatch.chdir(tmp_path)
    old_root = tmp_path / "old" / "out"
    new_root = tmp_path / "new" / "out"
    for root in (old_root, new_root):
        _make_build(root / "target" / "product" / "x" / "system" / "framework", ["core.jar"])
        _make_build(root / "target" / "product" / "x" / "data" / "app", ["Scratch.jar"])
    (old_root / "target" / "product" / "x" / "data" / "app" / "OldOnly.jar").write_bytes(b"PK")

    buffer = io.StringIO()
    code = main([str(old_root), str(new_root), "-a", "-s", "missing|new"], out=buffer)

    assert code == 0
    assert buffer.getvalue() == "# missing files\n\nnothing\n\n# new files\n\nnothing\n\n"
    assert [call[call.index("-lib") + 1] for call in fake_checker] == ["core.jar"]


def test_missing_arguments_print_usage(capsys) -> None:
    assert main(["only-one-dir"]) == 1

    captured = capsys.readouterr()
    assert "usage: jar-compat-checker" in captured.out


def test_non_directory_argument_is_reported(tmp_path: Path, capsys) -> None:
    existing = tmp_path / "old"
    existing.mkdir()

    assert main([str(existing), str(tmp_path / "nope")]) == 1

    captured = capsys.readouterr()
    assert f"{tmp_path / 'nope'} is not found" in captured.out


def test_invalid_config_file_fails_fast(builds, tmp_path: Path, capsys) -> None:
    old_root, new_root = builds
    config = tmp_path / "bad.toml"
    config.write_text("[checker]\nnum_threads = \"many\"\n", encoding="utf-8")

    assert main([str(old_root), str(new_root), "-c", str(config)]) == 1

    assert "checker.num_threads" in capsys.readouterr().err


def _write_tools_config(path: Path, **tools: str) -> None:
    lines = ["[tools]"]
    lines.extend(f'{key} = "{value}"' for key, value in tools.items())
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")


def _relative_builds(tmp_path: Path, monkeypatch) -> tuple[str, str]:
    monkeypatch.chdir(tmp_path)
    _make_build(tmp_path / "builds" / "r1" / "system", ["a.jar", "b.jar", "d.jar"])
    _make_build(tmp_path / "builds" / "r2" / "system", ["b.jar", "c.jar", "d.jar"])
    return "builds/r1/system", "builds/r2/system"


def test_relative_roots_and_output_dir_reach_the_checker(
    tmp_path: Path, monkeypatch, fake_tools
) -> None:
    old_root, new_root = _relative_builds(tmp_path, monkeypatch)
    _write_tools_config(
        tmp_path / "jar_compat.toml",
        compliance_checker=fake_tools.compliance_checker,
        unzip=shutil.which("true") or "true",
    )
    buffer = io.StringIO()

    code = main(
        [old_root, new_root, "-o", "reports", "-r", "csv", "-s", "problem|compatible"],
        out=buffer,
    )

    assert code == 0
    reports = Path.cwd() / "reports"
    lines = buffer.getvalue().splitlines()
    for jar in ("b.jar", "d.jar"):
        assert (
            f"{jar},100,100,0,0,0,0,"
            f"{reports}/compat_reports/{jar}/r1/system_to_r2/system/compat_report.html"
        ) in lines
    assert reports.is_dir()


def test_relative_temp_dir_converts_dex_archives(tmp_path: Path, monkeypatch, fake_tools) -> None:
    old_root, new_root = _relative_builds(tmp_path, monkeypatch)
    _write_tools_config(
        tmp_path / "jar_compat.toml",
        compliance_checker=fake_tools.compliance_checker,
        dex2jar=fake_tools.dex2jar,
        unzip=fake_tools.unzip,
        zip=fake_tools.zip,
    )
    buffer = io.StringIO()

    code = main(
        [old_root, new_root, "-o", "reports", "-t", "temp", "-k", "-r", "csv", "-s", "compatible"],
        out=buffer,
    )

    assert code == 0
    assert buffer.getvalue().count(",100,100,0,0,0,0,") == 2
    for side in ("old", "new"):
        assert (tmp_path / "temp" / "b" / side / "b.jar").read_text(encoding="utf-8") == "merged\n"


def test_temp_directory_is_removed_when_checks_fail(builds, tmp_path: Path, monkeypatch) -> None:
    old_root, new_root = builds
    temp_dir = tmp_path / "scratch"
    (temp_dir / "b" / "old").mkdir(parents=True)

    def failing_checks(*args, **kwargs):
        raise RuntimeError("scheduler crashed")

    monkeypatch.setattr(cli, "run_compatibility_checks", failing_checks)

    with pytest.raises(RuntimeError, match="scheduler crashed"):
        main([str(old_root), str(new_root), "-t", str(temp_dir)], out=io.StringIO())

    assert not temp_dir.exists()
