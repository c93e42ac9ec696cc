from __future__ import annotations

import logging
import os

import typer

from courgette.core import config as config_core, envelope, options as options_core, paths as paths_core, reportportal
from courgette.core.errors import ConfigurationError
from courgette.core.matcher import FeatureRef
from courgette.core.runtime_options import Session, WorkerOptionSet

VERSION = "0.1.0"

app = typer.Typer(add_completion=False, help="courgette - parallel run options for a BDD engine")


def _emit(out: dict) -> None:
    typer.echo(envelope.dumps(out))
    if out.get("ok") is True:
        raise typer.Exit(code=0)
    raise typer.Exit(code=1)


def _config_error(command: str, exc: ConfigurationError) -> dict:
    return envelope.err(
        command=command,
        error_type="CONFIG_ERROR",
        message=str(exc),
        details={"key": exc.key, "value": exc.value, "config_path": str(config_core.config_path())},
    )


@app.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Log to stderr")):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@app.command()
def version(json_output: bool = typer.Option(False, "--json", help="Output JSON envelope")):
    if json_output:
        _emit(envelope.ok(command="version", data={"version": VERSION}))
    typer.echo(f"courgette {VERSION}")


@app.command("options")
def options_cmd(
    feature: str | None = typer.Option(None, "--feature", help="Feature URI; omit for the aggregate run"),
    session_id: str | None = typer.Option(None, "--session-id"),
    json_output: bool = typer.Option(True, "--json"),
):
    """Engine options for one worker, or for the whole run without --feature."""
    try:
        session = Session.start(options_core.load_run_options(), session_id=session_id)
        worker = WorkerOptionSet(session, FeatureRef(feature) if feature else None)
    except ConfigurationError as exc:
        out = _config_error("options", exc)
    else:
        data: dict[str, object] = {
            "session_id": session.session_id,
            "mode": "worker" if worker.worker_mode else "aggregate",
            "tokens": worker.tokens,
            "plugins": worker.plugins,
            "rerun_file": worker.rerun_file,
            "report_files": worker.report_files,
        }
        if worker.identity is not None:
            data["feature_fingerprint"] = worker.identity.feature_fingerprint
            data["instance_id"] = worker.identity.instance_id
        out = envelope.ok(command="options", data=data)
    _emit(out)


@app.command()
def paths(json_output: bool = typer.Option(True, "--json")):
    """Aggregation report locations; identical for every worker of a run."""
    try:
        target = options_core.load_run_options().report_target_dir
    except ConfigurationError as exc:
        out = _config_error("paths", exc)
    else:
        out = envelope.ok(
            command="paths",
            data={
                "report_target_dir": target,
                "report_data_dir": paths_core.report_data_dir(target),
                "report_json": paths_core.report_json(target),
            },
        )
    _emit(out)


@app.command()
def doctor(json_output: bool = typer.Option(True, "--json")):
    path = config_core.config_path()
    checks: list[dict] = []

    config_details: dict[str, object] = {
        "path": str(path),
        "exists": path.exists(),
        "override": os.environ.get("COURGETTE_CONFIG_PATH"),
    }
    run_options = None
    try:
        run_options = options_core.load_run_options()
    except ConfigurationError as exc:
        config_details["error"] = str(exc)
        checks.append({"name": "config.options", "ok": False, "details": config_details})
    else:
        config_details["threads"] = run_options.threads
        config_details["run_level"] = run_options.run_level.value
        checks.append({"name": "config.options", "ok": True, "details": config_details})

    enabled = bool(run_options and run_options.report_portal_enabled)
    portal_details: dict[str, object] = {"enabled": enabled}
    portal_ok = True
    if enabled:
        found = reportportal.find_properties_file()
        portal_details["path"] = str(found) if found else None
        try:
            properties = reportportal.ReportPortalHandle(True, path=found).get()
        except ConfigurationError as exc:
            portal_ok = False
            portal_details["error"] = str(exc)
        else:
            portal_details["launch"] = properties.launch
    checks.append({"name": "integration.reportportal", "ok": portal_ok, "details": portal_details})

    _emit(envelope.ok(command="doctor", data={"checks": checks}))


if __name__ == "__main__":
    app()
