"""Tests for the text exposition and metrics HTTP endpoint."""

import logging
import urllib.request

import pytest
from prometheus_client import CollectorRegistry
from prometheus_client.core import GaugeMetricFamily, Metric

from gpfs_exporter.exposition import CONTENT_TYPE, generate_text, make_metrics_app, start_metrics_server


class StaticCollector:
    def __init__(self, *families):
        self.families = families

    def collect(self):
        return iter(self.families)


@pytest.fixture
def registry():
    counter = Metric("gpfs_perf_read_bytes", "GPFS read bytes", "counter")
    counter.add_sample("gpfs_perf_read_bytes", {"nodename": "n1", "fs": "scratch"}, 42)
    gauge = GaugeMetricFamily("gpfs_verbs_status", "GPFS verbs status, 1=started 0=not started", value=1)

    registry = CollectorRegistry()
    registry.register(StaticCollector(counter, gauge))
    return registry


def test_generate_text(registry):
    assert generate_text(registry).decode() == (
        "# HELP gpfs_perf_read_bytes GPFS read bytes\n"
        "# TYPE gpfs_perf_read_bytes counter\n"
        'gpfs_perf_read_bytes{fs="scratch",nodename="n1"} 42.0\n'
        "# HELP gpfs_verbs_status GPFS verbs status, 1=started 0=not started\n"
        "# TYPE gpfs_verbs_status gauge\n"
        "gpfs_verbs_status 1.0\n"
    )


def test_escaping():
    metric = Metric("gpfs_test", "line one\nback\\slash", "untyped")
    metric.add_sample("gpfs_test", {"fs": 'a "quoted"\\name'}, 1)
    registry = CollectorRegistry()
    registry.register(StaticCollector(metric))

    text = generate_text(registry).decode()

    assert "# HELP gpfs_test line one\\nback\\\\slash\n" in text
    assert "# TYPE gpfs_test untyped\n" in text
    assert 'gpfs_test{fs="a \\"quoted\\"\\\\name"} 1.0\n' in text


def test_empty_registry():
    assert generate_text(CollectorRegistry()) == b""


def test_metrics_app(registry):
    start_response_calls = []
    app = make_metrics_app(registry)

    body = app({"PATH_INFO": "/metrics"}, lambda status, headers: start_response_calls.append((status, headers)))

    assert start_response_calls == [("200 OK", [("Content-Type", CONTENT_TYPE)])]
    assert b"# TYPE gpfs_perf_read_bytes counter\n" in b"".join(body)


def test_metrics_server(registry):
    httpd, thread = start_metrics_server(registry, "127.0.0.1", 0, logging.getLogger("test"))
    try:
        port = httpd.server_address[1]
        with urllib.request.urlopen(f"http://127.0.0.1:{port}/metrics", timeout=5) as response:
            body = response.read().decode()
            content_type = response.headers["Content-Type"]
    finally:
        httpd.shutdown()
        httpd.server_close()

    assert content_type == CONTENT_TYPE
    assert 'gpfs_perf_read_bytes{fs="scratch",nodename="n1"} 42.0' in body
    thread.join(timeout=5)
    assert not thread.is_alive()
