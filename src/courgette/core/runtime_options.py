"""Engine command-line options for one worker (one feature) or for the whole run.

Concurrent workers must not write to the same report or rerun file: report
plugins are relocated to a per-worker stem built from the session id, a fingerprint of
the feature and a random per-instance token. The resulting token vector is fed
unchanged to the engine's own option parser.

Plugin presence checks are literal (prefix, substring or equality) and not
kind-aware: `json:out.json` and `json: out.json` are two different plugins here.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Sequence

from courgette.core import ids, paths
from courgette.core.ids import WorkerIdentity
from courgette.core.matcher import Feature
from courgette.core.options import NO_OBJECT_FACTORY, RunOptions
from courgette.core.reportportal import ReportPortalHandle

logger = logging.getLogger(__name__)

REPORT_KINDS = ("html", "json", "junit")
REPORT_EXTENSIONS = {"html": "html", "json": "json", "junit": "xml"}
RERUN_PREFIX = "rerun:"


@dataclass(frozen=True)
class Session:
    """Per-run state shared read-only by every worker."""

    run_options: RunOptions
    session_id: str
    report_portal: ReportPortalHandle

    @classmethod
    def start(
        cls,
        run_options: RunOptions,
        *,
        session_id: str | None = None,
        report_portal: ReportPortalHandle | None = None,
    ) -> "Session":
        handle = report_portal or ReportPortalHandle(run_options.report_portal_enabled)
        # Fail before any worker is dispatched.
        handle.validate()
        return cls(run_options=run_options, session_id=session_id or ids.session_id(), report_portal=handle)

    @property
    def report_data_dir(self) -> str:
        return paths.report_data_dir(self.run_options.report_target_dir)

    @property
    def report_json(self) -> str:
        return paths.report_json(self.run_options.report_target_dir)

    @property
    def report_portal_xml(self) -> str | None:
        if not self.report_portal.enabled:
            return None
        return paths.report_portal_xml(self.run_options.report_target_dir, self.report_portal.get().launch_name)


@dataclass(frozen=True)
class PluginTargets:
    """Destinations `rewrite_plugins` may point plugins at.

    `worker_stem` is set in worker mode and None in aggregate mode.
    """

    report_json: str
    rerun_file: str
    worker_stem: str | None = None
    report_portal_xml: str | None = None

    @property
    def worker_junit(self) -> str | None:
        if self.worker_stem is None:
            return None
        return f"junit:{self.worker_stem}.xml"


@dataclass(frozen=True)
class PluginRewrite:
    plugins: list[str]
    rerun_file: str


def plugin_kind(spec: str) -> str:
    for kind in REPORT_KINDS:
        if spec.startswith(f"{kind}:"):
            return kind
    if spec.startswith(RERUN_PREFIX):
        return "rerun"
    return "other"


def plugin_path(spec: str) -> str:
    return spec[spec.index(":") + 1 :] if ":" in spec else ""


def is_report_plugin(spec: str) -> bool:
    return plugin_kind(spec) in REPORT_KINDS


def relocate(kind: str, worker_stem: str) -> str:
    return f"{kind}:{worker_stem}.{REPORT_EXTENSIONS[kind]}"


def declared_rerun_file(plugins: Iterable[str]) -> str | None:
    for spec in plugins:
        if spec.startswith(RERUN_PREFIX):
            return plugin_path(spec)
    return None


def rewrite_plugins(specs: Sequence[str], targets: PluginTargets) -> PluginRewrite:
    """Make a plugin list safe to run next to other workers.

    1. An empty list is seeded with the aggregation JSON report.
    2. Worker mode relocates html/json/junit reports to the worker stem. The
       aggregation JSON and report portal destinations are never relocated.
    3. Without a `rerun:` plugin one is added pointing at `targets.rerun_file`.
    4. The aggregation JSON report is added unless some plugin already names it.
    5. With report portal enabled its JUnit XML is added unless already named.
    6. Worker mode always ends up with `junit:{worker_stem}.xml`.
    """
    seeded = list(specs) or [f"json:{targets.report_json}"]
    managed = [path for path in (targets.report_json, targets.report_portal_xml) if path]

    plugins: list[str] = []
    for spec in seeded:
        kind = plugin_kind(spec)
        if (
            targets.worker_stem is not None
            and kind in REPORT_KINDS
            and not any(path in spec for path in managed)
        ):
            spec = relocate(kind, targets.worker_stem)
            if spec in plugins:
                continue
        plugins.append(spec)

    existing_rerun = next((spec for spec in plugins if spec.startswith(RERUN_PREFIX)), None)
    if existing_rerun is None:
        rerun_file = targets.rerun_file
        plugins.append(f"{RERUN_PREFIX}{rerun_file}")
    else:
        rerun_file = plugin_path(existing_rerun)

    if not any(targets.report_json in spec for spec in plugins):
        plugins.append(f"json:{targets.report_json}")

    if targets.report_portal_xml and not any(targets.report_portal_xml in spec for spec in plugins):
        plugins.append(f"junit:{targets.report_portal_xml}")

    worker_junit = targets.worker_junit
    if worker_junit is not None and worker_junit not in plugins:
        plugins.append(worker_junit)

    return PluginRewrite(plugins=plugins, rerun_file=rerun_file)


def report_files(plugins: Iterable[str]) -> list[str]:
    return [plugin_path(spec) for spec in plugins if is_report_plugin(spec)]


def _expand(flag: str, values: Iterable[str]) -> list[str]:
    tokens: list[str] = []
    for value in values:
        value = value.strip()
        if not value:
            continue
        tokens.extend([flag, value])
    return tokens


def _switch(name: str, enabled: bool) -> list[str]:
    return [f"--{name}" if enabled else f"--no-{name}"]


def build_option_map(
    run_options: RunOptions,
    plugins: Sequence[str],
    feature_path: str | None = None,
) -> dict[str | None, list[str]]:
    """Named engine options, plus the feature paths under the `None` key.

    Worker mode passes the single feature's path; aggregate mode (None) emits
    every declared feature path. Options that resolve to nothing are dropped.
    """
    cucumber = run_options.cucumber
    options: dict[str | None, list[str]] = {
        "glue": _expand("--glue", cucumber.glue),
        # The engine has no separate flag for extra glue.
        "extraGlue": _expand("--glue", cucumber.extra_glue),
        "tags": _expand("--tags", cucumber.tags),
        "plugin": _expand("--plugin", plugins),
        "name": _expand("--name", cucumber.name),
        "snippets": ["--snippets", cucumber.snippets.value],
        "dryRun": _switch("dry-run", cucumber.dry_run),
        "strict": _switch("strict", cucumber.strict),
        "monochrome": _switch("monochrome", cucumber.monochrome),
    }
    if cucumber.object_factory and cucumber.object_factory != NO_OBJECT_FACTORY:
        options["objectFactory"] = ["--object-factory", cucumber.object_factory]
    features = [feature_path] if feature_path is not None else cucumber.features
    options[None] = [path.strip() for path in features if path.strip()]
    return {name: tokens for name, tokens in options.items() if tokens}


def flatten(option_map: dict[str | None, list[str]]) -> list[str]:
    return [token for tokens in option_map.values() for token in tokens]


class WorkerOptionSet:
    """Engine options for one worker (`feature` given) or the aggregate run (`feature` None).

    Exposes the token vector for the engine, the rerun file the retry pass
    reads and the report files the aggregation step collects.
    """

    def __init__(
        self,
        session: Session,
        feature: Feature | None = None,
        *,
        identity: WorkerIdentity | None = None,
    ) -> None:
        self.session = session
        self.run_options = session.run_options
        self.feature = feature
        self.identity: WorkerIdentity | None = None
        self.feature_path: str | None = None

        if feature is not None:
            self.identity = identity or WorkerIdentity.for_feature(session.session_id, feature.uri)
            self.feature_path = paths.resource_path(feature.uri)

        rewrite = rewrite_plugins(self.run_options.cucumber.plugin, self.plugin_targets())
        self.plugins: list[str] = rewrite.plugins
        self.rerun_file: str = rewrite.rerun_file
        self.tokens: list[str] = flatten(self.option_map())
        self.report_files: list[str] = report_files(self.plugins)

        logger.debug(
            "Worker options for %s: %d tokens, rerun file %s",
            self.feature_path or "<all features>",
            len(self.tokens),
            self.rerun_file,
        )

    @property
    def worker_mode(self) -> bool:
        return self.identity is not None

    @property
    def report_stem(self) -> str | None:
        if self.identity is None:
            return None
        return paths.worker_report_stem(self.identity)

    @property
    def report_json(self) -> str:
        return self.session.report_json

    @property
    def report_data_dir(self) -> str:
        return self.session.report_data_dir

    @property
    def cucumber_rerun_file(self) -> str:
        """The user's declared rerun destination if there is one, else the resolved rerun file."""
        return declared_rerun_file(self.run_options.cucumber.declared_plugin) or self.rerun_file

    def plugin_targets(self) -> PluginTargets:
        target_dir = self.run_options.report_target_dir
        if self.identity is not None:
            rerun_file = paths.worker_rerun_file(self.identity)
            stem = paths.worker_report_stem(self.identity)
        else:
            inherited = declared_rerun_file(self.run_options.cucumber.declared_plugin)
            rerun_file = inherited or paths.aggregate_rerun_file(target_dir)
            stem = None
        return PluginTargets(
            report_json=self.session.report_json,
            rerun_file=rerun_file,
            worker_stem=stem,
            report_portal_xml=self.session.report_portal_xml,
        )

    def option_map(self) -> dict[str | None, list[str]]:
        return build_option_map(self.run_options, self.plugins, self.feature_path)
