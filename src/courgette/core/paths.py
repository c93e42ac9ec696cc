from __future__ import annotations

import os
import tempfile

from courgette.core.ids import WorkerIdentity

REPORT_DIR_NAME = "courgette-report"
RERUN_FILENAME = "courgette-rerun.txt"


def temp_dir() -> str:
    """System temp directory, always ending with a path separator."""
    root = tempfile.gettempdir()
    return root if root.endswith(os.sep) else root + os.sep


def report_data_dir(report_target_dir: str) -> str:
    return f"{report_target_dir}/{REPORT_DIR_NAME}/data"


def report_json(report_target_dir: str) -> str:
    return f"{report_data_dir(report_target_dir)}/report.json"


def report_portal_xml(report_target_dir: str, launch_name: str) -> str:
    return f"{report_data_dir(report_target_dir)}/{launch_name}.xml"


def aggregate_rerun_file(report_target_dir: str) -> str:
    return f"{report_target_dir}/{RERUN_FILENAME}"


def worker_report_stem(identity: WorkerIdentity) -> str:
    return f"{temp_dir()}{identity.session_id}_thread_report_{identity.feature_id}"


def worker_rerun_file(identity: WorkerIdentity) -> str:
    return f"{temp_dir()}{identity.session_id}_rerun_{identity.feature_id}.txt"


def resource_path(uri: str) -> str:
    """Strip a URI scheme (`file:`, `classpath:`) and keep the rest verbatim."""
    scheme, sep, rest = uri.partition(":")
    # A single letter before ':' is a Windows drive, not a scheme.
    if sep and len(scheme) > 1 and scheme.isalpha():
        return rest
    return uri
