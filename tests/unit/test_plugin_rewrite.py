from __future__ import annotations

from courgette.core.runtime_options import (
    PluginTargets,
    declared_rerun_file,
    plugin_kind,
    plugin_path,
    report_files,
    rewrite_plugins,
)

AGG_JSON = "target/courgette-report/data/report.json"
STEM = "/tmp/S1_thread_report_42_7"
WORKER_RERUN = "/tmp/S1_rerun_42_7.txt"
RP_XML = "target/courgette-report/data/nightly.xml"

WORKER = PluginTargets(report_json=AGG_JSON, rerun_file=WORKER_RERUN, worker_stem=STEM)
AGGREGATE = PluginTargets(report_json=AGG_JSON, rerun_file="target/courgette-rerun.txt")


def test_plugin_kind_and_path() -> None:
    assert plugin_kind("html:out") == "html"
    assert plugin_kind("junit:out.xml") == "junit"
    assert plugin_kind("rerun:r.txt") == "rerun"
    assert plugin_kind("pretty") == "other"
    assert plugin_kind("JSON:out.json") == "other"
    assert plugin_path("json:C:/reports/out.json") == "C:/reports/out.json"
    assert plugin_path("pretty") == ""


def test_empty_plugins_in_worker_mode() -> None:
    result = rewrite_plugins([], WORKER)
    assert result.plugins == [f"json:{AGG_JSON}", f"rerun:{WORKER_RERUN}", f"junit:{STEM}.xml"]
    assert result.rerun_file == WORKER_RERUN


def test_html_plugin_relocated_in_worker_mode() -> None:
    result = rewrite_plugins(["html:out"], WORKER)
    assert result.plugins == [
        f"html:{STEM}.html",
        f"rerun:{WORKER_RERUN}",
        f"json:{AGG_JSON}",
        f"junit:{STEM}.xml",
    ]


def test_declared_junit_relocated_once() -> None:
    result = rewrite_plugins(["junit:results.xml", "junit:other.xml"], WORKER)
    assert result.plugins.count(f"junit:{STEM}.xml") == 1
    assert "junit:results.xml" not in result.plugins


def test_other_plugins_pass_through() -> None:
    result = rewrite_plugins(["pretty", "com.example.Formatter:out.txt"], WORKER)
    assert result.plugins[:2] == ["pretty", "com.example.Formatter:out.txt"]


def test_aggregate_mode_keeps_declared_rerun() -> None:
    result = rewrite_plugins(["rerun:my-rerun.txt"], AGGREGATE)
    assert result.plugins == ["rerun:my-rerun.txt", f"json:{AGG_JSON}"]
    assert result.rerun_file == "my-rerun.txt"


def test_aggregate_mode_keeps_report_paths() -> None:
    result = rewrite_plugins(["html:out", "junit:out.xml"], AGGREGATE)
    assert result.plugins == [
        "html:out",
        "junit:out.xml",
        "rerun:target/courgette-rerun.txt",
        f"json:{AGG_JSON}",
    ]


def test_worker_mode_keeps_declared_rerun() -> None:
    result = rewrite_plugins(["rerun:shared.txt"], WORKER)
    assert [p for p in result.plugins if p.startswith("rerun:")] == ["rerun:shared.txt"]
    assert result.rerun_file == "shared.txt"


def test_report_portal_xml_added_once() -> None:
    targets = PluginTargets(report_json=AGG_JSON, rerun_file=WORKER_RERUN, worker_stem=STEM, report_portal_xml=RP_XML)
    result = rewrite_plugins([], targets)
    assert result.plugins.count(f"junit:{RP_XML}") == 1

    aggregate = PluginTargets(report_json=AGG_JSON, rerun_file="r.txt", report_portal_xml=RP_XML)
    assert rewrite_plugins([f"junit:{RP_XML}"], aggregate).plugins.count(f"junit:{RP_XML}") == 1


def test_rewrite_is_idempotent_for_managed_plugins() -> None:
    rp_worker = PluginTargets(report_json=AGG_JSON, rerun_file=WORKER_RERUN, worker_stem=STEM, report_portal_xml=RP_XML)
    rp_aggregate = PluginTargets(report_json=AGG_JSON, rerun_file="r.txt", report_portal_xml=RP_XML)
    for targets in (rp_worker, rp_aggregate):
        once = rewrite_plugins(["html:out", "pretty"], targets).plugins
        twice = rewrite_plugins(once, targets).plugins
        assert sum(AGG_JSON in p for p in twice) == 1
        assert sum(p.startswith("rerun:") for p in twice) == 1
        assert sum(RP_XML in p for p in twice) == 1
        assert twice == once


def test_duplicates_are_detected_literally() -> None:
    # A differently spelled rerun plugin is not recognised, so a second one is added.
    result = rewrite_plugins(["rerun :mine.txt"], AGGREGATE)
    assert result.plugins[:2] == ["rerun :mine.txt", "rerun:target/courgette-rerun.txt"]


def test_report_files_lists_report_destinations() -> None:
    plugins = ["html:a.html", "pretty", "rerun:r.txt", "junit:j.xml", "json:k.json"]
    assert report_files(plugins) == ["a.html", "j.xml", "k.json"]


def test_declared_rerun_file_requires_rerun_prefix() -> None:
    assert declared_rerun_file(["rerunner:x.txt", "rerun:r.txt"]) == "r.txt"
    assert declared_rerun_file(["rerun", "pretty"]) is None


def test_report_files_keep_html_destination_verbatim() -> None:
    assert report_files(["html:target/cucumber.html"]) == ["target/cucumber.html"]
