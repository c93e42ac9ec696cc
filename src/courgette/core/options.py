"""Declared run options and the resolved, read-only run configuration.

`CourgetteOptions` holds what the project declares (the `[courgette]` table of
the config file, or values passed in code). `RunOptions.resolve` layers process
properties over it once per process; the result is shared by every worker.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field
from typing import Any, Mapping

from courgette.core import config as config_core
from courgette.core.errors import ConfigurationError
from courgette.core.properties import PropertyKind, courgette_key, cucumber_key, parse_enum, resolve, resolve_array

logger = logging.getLogger(__name__)

NO_OBJECT_FACTORY = "courgette.core.options.NoObjectFactory"

DEFAULT_THREADS = 5
DEFAULT_RERUN_ATTEMPTS = 1
DEFAULT_REPORT_TITLE = "Courgette-JVM Report"
DEFAULT_REPORT_TARGET_DIR = "target"

REPORT_PORTAL_PLUGIN = "reportportal"


class RunLevel(enum.Enum):
    FEATURE = "feature"
    SCENARIO = "scenario"


class SnippetType(enum.Enum):
    UNDERSCORE = "underscore"
    CAMELCASE = "camelcase"


@dataclass(frozen=True)
class CucumberOptions:
    features: tuple[str, ...] = ()
    glue: tuple[str, ...] = ()
    extra_glue: tuple[str, ...] = ()
    tags: tuple[str, ...] = ()
    plugin: tuple[str, ...] = ()
    name: tuple[str, ...] = ()
    snippets: SnippetType = SnippetType.UNDERSCORE
    dry_run: bool = False
    strict: bool = False
    monochrome: bool = False
    object_factory: str = NO_OBJECT_FACTORY


@dataclass(frozen=True)
class CourgetteOptions:
    threads: int | None = None
    run_level: RunLevel | None = None
    rerun_failed_scenarios: bool | None = None
    rerun_attempts: int | None = None
    show_test_output: bool | None = None
    report_title: str | None = None
    report_target_dir: str | None = None
    plugin: tuple[str, ...] = ()
    cucumber: CucumberOptions = field(default_factory=CucumberOptions)


@dataclass(frozen=True)
class ResolvedCucumberOptions:
    features: tuple[str, ...]
    glue: tuple[str, ...]
    extra_glue: tuple[str, ...]
    tags: tuple[str, ...]
    plugin: tuple[str, ...]
    name: tuple[str, ...]
    snippets: SnippetType
    dry_run: bool
    strict: bool
    monochrome: bool
    object_factory: str
    declared_plugin: tuple[str, ...] = ()


@dataclass(frozen=True)
class RunOptions:
    threads: int
    run_level: RunLevel
    rerun_failed_scenarios: bool
    rerun_attempts: int
    show_test_output: bool
    report_title: str
    report_target_dir: str
    plugin: tuple[str, ...]
    cucumber: ResolvedCucumberOptions

    @property
    def report_portal_enabled(self) -> bool:
        return any(p.strip().lower() == REPORT_PORTAL_PLUGIN for p in self.plugin)

    @classmethod
    def resolve(cls, declared: CourgetteOptions, properties: Mapping[str, str] | None = None) -> "RunOptions":
        """Apply property overrides to every option. Raises ConfigurationError on malformed values."""
        cucumber = declared.cucumber

        def _array(option: str, value: tuple[str, ...]) -> tuple[str, ...]:
            return tuple(resolve_array(cucumber_key(option), value, properties=properties))

        resolved = cls(
            threads=resolve(
                PropertyKind.INT, courgette_key("threads"), declared.threads, DEFAULT_THREADS, properties=properties
            ),
            run_level=resolve(
                PropertyKind.ENUM,
                courgette_key("run_level"),
                declared.run_level,
                RunLevel.FEATURE,
                enum_type=RunLevel,
                properties=properties,
            ),
            rerun_failed_scenarios=resolve(
                PropertyKind.BOOL,
                courgette_key("rerun_failed_scenarios"),
                declared.rerun_failed_scenarios,
                False,
                properties=properties,
            ),
            rerun_attempts=resolve(
                PropertyKind.INT,
                courgette_key("rerun_attempts"),
                declared.rerun_attempts,
                DEFAULT_RERUN_ATTEMPTS,
                properties=properties,
            ),
            show_test_output=resolve(
                PropertyKind.BOOL,
                courgette_key("show_test_output"),
                declared.show_test_output,
                False,
                properties=properties,
            ),
            report_title=resolve(
                PropertyKind.STRING,
                courgette_key("report_title"),
                declared.report_title,
                DEFAULT_REPORT_TITLE,
                properties=properties,
            ),
            report_target_dir=resolve(
                PropertyKind.STRING,
                courgette_key("report_target_dir"),
                declared.report_target_dir,
                DEFAULT_REPORT_TARGET_DIR,
                properties=properties,
            ),
            plugin=tuple(declared.plugin),
            cucumber=ResolvedCucumberOptions(
                features=_array("features", cucumber.features),
                glue=_array("glue", cucumber.glue),
                extra_glue=_array("extra_glue", cucumber.extra_glue),
                tags=_array("tags", cucumber.tags),
                plugin=_array("plugin", cucumber.plugin),
                name=_array("name", cucumber.name),
                snippets=cucumber.snippets,
                dry_run=cucumber.dry_run,
                strict=cucumber.strict,
                monochrome=cucumber.monochrome,
                object_factory=cucumber.object_factory,
                declared_plugin=tuple(cucumber.plugin),
            ),
        )
        if resolved.threads < 1:
            raise ConfigurationError(
                f"threads must be at least 1, got {resolved.threads}", key=courgette_key("threads")
            )
        logger.debug("Resolved run options: threads=%s run_level=%s", resolved.threads, resolved.run_level.value)
        return resolved


def _strings(table: Mapping[str, Any], key: str) -> tuple[str, ...]:
    value = table.get(key, ())
    if isinstance(value, str):
        return (value,)
    if not isinstance(value, (list, tuple)) or not all(isinstance(v, str) for v in value):
        raise ConfigurationError(f"Option {key!r} must be a string or a list of strings", key=key)
    return tuple(value)


def _optional(table: Mapping[str, Any], key: str, expected: type) -> Any:
    value = table.get(key)
    if value is None:
        return None
    # bool is an int subclass; keep the two apart
    if not isinstance(value, expected) or (expected is int and isinstance(value, bool)):
        raise ConfigurationError(f"Option {key!r} must be of type {expected.__name__}", key=key)
    return value


def _enum(table: Mapping[str, Any], key: str, enum_type: type[enum.Enum]) -> Any:
    value = _optional(table, key, str)
    return None if value is None else parse_enum(key, value, enum_type)


def cucumber_options_from_dict(table: Mapping[str, Any]) -> CucumberOptions:
    snippets = _enum(table, "snippets", SnippetType)
    return CucumberOptions(
        features=_strings(table, "features"),
        glue=_strings(table, "glue"),
        extra_glue=_strings(table, "extra_glue"),
        tags=_strings(table, "tags"),
        plugin=_strings(table, "plugin"),
        name=_strings(table, "name"),
        snippets=snippets or SnippetType.UNDERSCORE,
        dry_run=bool(_optional(table, "dry_run", bool)),
        strict=bool(_optional(table, "strict", bool)),
        monochrome=bool(_optional(table, "monochrome", bool)),
        object_factory=_optional(table, "object_factory", str) or NO_OBJECT_FACTORY,
    )


def courgette_options_from_dict(table: Mapping[str, Any]) -> CourgetteOptions:
    cucumber = table.get("cucumber", {})
    if not isinstance(cucumber, Mapping):
        raise ConfigurationError("[courgette.cucumber] must be a table", key="cucumber")
    return CourgetteOptions(
        threads=_optional(table, "threads", int),
        run_level=_enum(table, "run_level", RunLevel),
        rerun_failed_scenarios=_optional(table, "rerun_failed_scenarios", bool),
        rerun_attempts=_optional(table, "rerun_attempts", int),
        show_test_output=_optional(table, "show_test_output", bool),
        report_title=_optional(table, "report_title", str),
        report_target_dir=_optional(table, "report_target_dir", str),
        plugin=_strings(table, "plugin"),
        cucumber=cucumber_options_from_dict(cucumber),
    )


def load_declared_options() -> CourgetteOptions:
    table = config_core.get_config_value("courgette")
    if not isinstance(table, Mapping):
        raise ConfigurationError(
            f"No [courgette] table declared in {config_core.config_path()}", key="courgette"
        )
    return courgette_options_from_dict(table)


def load_run_options(properties: Mapping[str, str] | None = None) -> RunOptions:
    return RunOptions.resolve(load_declared_options(), properties)
