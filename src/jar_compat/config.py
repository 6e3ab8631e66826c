"""Configuration loading and deterministic merge order."""

from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass
from pathlib import Path

from jar_compat.analysis import DEFAULT_ARCHIVE_PATTERN

CONFIG_FILENAME = "jar_compat.toml"
DEX2JAR_ENV_VAR = "PATH_DEX2JAR"

DEFAULT_OUTPUT_SECTIONS = "missing|new|problem|compatible"
DEFAULT_REPORT_FORMAT = "markdown"
REPORT_FORMATS = ("markdown", "csv", "ruby", "plain")


class ConfigError(ValueError):
    """Raised when a configuration value has the wrong type or range."""


@dataclass(slots=True, frozen=True)
class ToolsConfig:
    """External executables invoked by the checker."""

    compliance_checker: str = "japi-compliance-checker"
    dex2jar: str = "d2j-dex2jar.sh"
    unzip: str = "unzip"
    zip: str = "zip"


@dataclass(slots=True, frozen=True)
class Options:
    """Immutable run configuration shared by every task."""

    num_threads: int
    temp_dir: Path
    output_dir: Path
    report_base: str | None
    report_format: str
    output_sections: str
    dont_report_if_no_issue: bool
    verbose: bool
    cleanup_temporary: bool
    android_built_out_mode: bool
    jar_pattern: str
    tools: ToolsConfig

    def section_enabled(self, section: str) -> bool:
        """Return whether a report section is selected by substring match."""
        return section in self.output_sections

    def to_public_dict(self) -> dict[str, object]:
        """Return a serializable snapshot for diagnostics."""
        return {
            "num_threads": self.num_threads,
            "temp_dir": str(self.temp_dir),
            "output_dir": str(self.output_dir),
            "report_base": self.report_base,
            "report_format": self.report_format,
            "output_sections": self.output_sections,
            "dont_report_if_no_issue": self.dont_report_if_no_issue,
            "verbose": self.verbose,
            "cleanup_temporary": self.cleanup_temporary,
            "android_built_out_mode": self.android_built_out_mode,
            "jar_pattern": self.jar_pattern,
            "tools": {
                "compliance_checker": self.tools.compliance_checker,
                "dex2jar": self.tools.dex2jar,
                "unzip": self.tools.unzip,
                "zip": self.tools.zip,
            },
        }


@dataclass(slots=True, frozen=True)
class CliOverrides:
    """Optional command-line values applied at highest precedence."""

    num_threads: int | None = None
    temp_dir: Path | None = None
    output_dir: Path | None = None
    report_base: str | None = None
    report_format: str | None = None
    output_sections: str | None = None
    dont_report_if_no_issue: bool | None = None
    verbose: bool | None = None
    cleanup_temporary: bool | None = None
    android_built_out_mode: bool | None = None


def default_parallelism() -> int:
    """Return the logical processor count, at least 1."""
    return os.cpu_count() or 1


def default_options(environ: dict[str, str] | None = None) -> Options:
    """Build defaults, honouring the dex converter environment override."""
    env = os.environ if environ is None else environ
    dex2jar = env.get(DEX2JAR_ENV_VAR) or ToolsConfig().dex2jar
    return Options(
        num_threads=default_parallelism(),
        temp_dir=Path("temp"),
        output_dir=Path("."),
        report_base=None,
        report_format=DEFAULT_REPORT_FORMAT,
        output_sections=DEFAULT_OUTPUT_SECTIONS,
        dont_report_if_no_issue=False,
        verbose=False,
        cleanup_temporary=True,
        android_built_out_mode=False,
        jar_pattern=DEFAULT_ARCHIVE_PATTERN,
        tools=ToolsConfig(dex2jar=dex2jar),
    )


def load_config_file(path: Path) -> dict[str, object]:
    """Load a TOML config file; a missing file yields an empty payload."""
    if not path.exists():
        return {}
    with path.open("rb") as handle:
        try:
            payload = tomllib.load(handle)
        except tomllib.TOMLDecodeError as error:
            raise ConfigError(f"{path.name} is not valid TOML: {error}") from error
    if not isinstance(payload, dict):
        raise ConfigError(f"{path.name} must contain a top-level table.")
    return payload


def _get_table(payload: dict[str, object], key: str) -> dict[str, object]:
    value = payload.get(key, {})
    if not isinstance(value, dict):
        raise ConfigError(f"Config section '{key}' must be a table.")
    return value


def _optional_str(table: dict[str, object], section: str, field: str, default: str) -> str:
    if field not in table:
        return default
    value = table[field]
    if not isinstance(value, str) or not value:
        raise ConfigError(f"Config field '{section}.{field}' must be a non-empty string.")
    return value


def _optional_bool(table: dict[str, object], section: str, field: str, default: bool) -> bool:
    if field not in table:
        return default
    value = table[field]
    if not isinstance(value, bool):
        raise ConfigError(f"Config field '{section}.{field}' must be a boolean.")
    return value


def _report_format(value: str, name: str) -> str:
    lowered = value.lower()
    if lowered not in REPORT_FORMATS:
        raise ConfigError(f"Config field '{name}' must be one of {', '.join(REPORT_FORMATS)}.")
    return lowered


def normalize_thread_count(value: object) -> int:
    """Coerce a requested thread count; anything non-positive or invalid becomes 1."""
    if isinstance(value, bool):
        return 1
    if isinstance(value, int):
        return value if value >= 1 else 1
    if isinstance(value, str):
        try:
            parsed = int(value.strip())
        except ValueError:
            return 1
        return parsed if parsed >= 1 else 1
    return 1


def merge_config(base: Options, payload: dict[str, object], overrides: CliOverrides) -> Options:
    """Merge defaults, config file, then command-line overrides."""
    checker = _get_table(payload, "checker")
    tools_payload = _get_table(payload, "tools")

    num_threads = base.num_threads
    if "num_threads" in checker:
        raw_threads = checker["num_threads"]
        if not isinstance(raw_threads, int) or isinstance(raw_threads, bool):
            raise ConfigError("Config field 'checker.num_threads' must be an integer.")
        num_threads = normalize_thread_count(raw_threads)

    report_base = base.report_base
    if "report_base" in checker:
        report_base = _optional_str(checker, "checker", "report_base", "")

    tools = ToolsConfig(
        compliance_checker=_optional_str(
            tools_payload, "tools", "compliance_checker", base.tools.compliance_checker
        ),
        dex2jar=_optional_str(tools_payload, "tools", "dex2jar", base.tools.dex2jar),
        unzip=_optional_str(tools_payload, "tools", "unzip", base.tools.unzip),
        zip=_optional_str(tools_payload, "tools", "zip", base.tools.zip),
    )

    merged = Options(
        num_threads=num_threads,
        temp_dir=Path(_optional_str(checker, "checker", "temp_dir", str(base.temp_dir))),
        output_dir=Path(_optional_str(checker, "checker", "output_dir", str(base.output_dir))),
        report_base=report_base,
        report_format=_report_format(
            _optional_str(checker, "checker", "report_format", base.report_format),
            "checker.report_format",
        ),
        output_sections=_optional_str(
            checker, "checker", "output_sections", base.output_sections
        ),
        dont_report_if_no_issue=_optional_bool(
            checker, "checker", "dont_report_if_no_issue", base.dont_report_if_no_issue
        ),
        verbose=_optional_bool(checker, "checker", "verbose", base.verbose),
        cleanup_temporary=_optional_bool(
            checker, "checker", "cleanup_temporary", base.cleanup_temporary
        ),
        android_built_out_mode=_optional_bool(
            checker, "checker", "android_built_out_mode", base.android_built_out_mode
        ),
        jar_pattern=_optional_str(checker, "checker", "jar_pattern", base.jar_pattern),
        tools=tools,
    )
    return apply_cli_overrides(merged, overrides)


def apply_cli_overrides(options: Options, overrides: CliOverrides) -> Options:
    """Apply command-line values at highest precedence."""

    def pick(value: object, current: object) -> object:
        return current if value is None else value

    report_format = options.report_format
    if overrides.report_format is not None:
        report_format = _report_format(overrides.report_format, "reportFormat")

    num_threads = options.num_threads
    if overrides.num_threads is not None:
        num_threads = normalize_thread_count(overrides.num_threads)

    return Options(
        num_threads=num_threads,
        temp_dir=pick(overrides.temp_dir, options.temp_dir),
        output_dir=pick(overrides.output_dir, options.output_dir),
        report_base=pick(overrides.report_base, options.report_base),
        report_format=report_format,
        output_sections=pick(overrides.output_sections, options.output_sections),
        dont_report_if_no_issue=pick(
            overrides.dont_report_if_no_issue, options.dont_report_if_no_issue
        ),
        verbose=pick(overrides.verbose, options.verbose),
        cleanup_temporary=pick(overrides.cleanup_temporary, options.cleanup_temporary),
        android_built_out_mode=pick(
            overrides.android_built_out_mode, options.android_built_out_mode
        ),
        jar_pattern=options.jar_pattern,
        tools=options.tools,
    )


def load_effective_options(
    config_path: Path | None = None,
    overrides: CliOverrides | None = None,
    environ: dict[str, str] | None = None,
) -> Options:
    """Load options using merge order defaults -> config file -> overrides."""
    base = default_options(environ)
    if config_path is not None and not config_path.is_file():
        raise ConfigError(f"Config file not found: {config_path}")
    payload = load_config_file(config_path or Path(CONFIG_FILENAME))
    return merge_config(base, payload, overrides or CliOverrides())
