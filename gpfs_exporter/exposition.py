"""Prometheus text exposition and the HTTP endpoint serving it."""

import logging
import socket
import threading
from typing import Callable, Iterable, Tuple
from wsgiref.simple_server import WSGIRequestHandler, make_server

from prometheus_client import CollectorRegistry
from prometheus_client.exposition import ThreadingWSGIServer
from prometheus_client.samples import Sample
from prometheus_client.utils import floatToGoString


CONTENT_TYPE = "text/plain; version=0.0.4; charset=utf-8"

# Metric types without a direct text format 0.0.4 counterpart
_TEXT_TYPES = {
    "unknown": "untyped",
    "info": "gauge",
    "stateset": "gauge",
    "gaugehistogram": "histogram",
}


def _escape_help(text: str) -> str:
    return text.replace("\\", r"\\").replace("\n", r"\n")


def _escape_label_value(value: str) -> str:
    return value.replace("\\", r"\\").replace("\n", r"\n").replace('"', r'\"')


def _sample_line(sample: Sample) -> str:
    labels = ""
    if sample.labels:
        labels = "{" + ",".join(
            f'{k}="{_escape_label_value(v)}"' for k, v in sorted(sample.labels.items())
        ) + "}"
    timestamp = ""
    if sample.timestamp is not None:
        timestamp = f" {int(float(sample.timestamp) * 1000):d}"
    return f"{sample.name}{labels} {floatToGoString(sample.value)}{timestamp}\n"


def generate_text(registry: CollectorRegistry) -> bytes:
    """
    Render *registry* in the Prometheus text format.

    Unlike ``prometheus_client.generate_latest`` the family name is written
    as-is for every type, so counter families keep the names of their
    samples (``# TYPE gpfs_perf_operations counter`` followed by
    ``gpfs_perf_operations{...}``) instead of gaining a ``_total`` suffix.

    Args:
        registry: Registry to collect from

    Returns:
        bytes: UTF-8 encoded exposition
    """
    output = []
    for metric in registry.collect():
        output.append(f"# HELP {metric.name} {_escape_help(metric.documentation)}\n")
        output.append(f"# TYPE {metric.name} {_TEXT_TYPES.get(metric.type, metric.type)}\n")
        output.extend(_sample_line(s) for s in metric.samples)
    return "".join(output).encode("utf-8")


def make_metrics_app(registry: CollectorRegistry) -> Callable:
    """Build a WSGI app answering every path with a fresh exposition of *registry*."""

    def metrics_app(environ, start_response) -> Iterable[bytes]:
        if environ.get("PATH_INFO") == "/favicon.ico":
            start_response("200 OK", [])
            return [b""]
        output = generate_text(registry)
        start_response("200 OK", [("Content-Type", CONTENT_TYPE)])
        return [output]

    return metrics_app


def start_metrics_server(
    registry: CollectorRegistry,
    address: str,
    port: int,
    logger: logging.Logger
) -> Tuple[ThreadingWSGIServer, threading.Thread]:
    """
    Serve *registry* over HTTP from a daemon thread.

    Args:
        registry: Registry collected on every request
        address: Listen address, IPv4 or IPv6
        port: Listen port
        logger: Logger receiving one debug line per request

    Returns:
        Tuple of the running server and its thread; call ``shutdown()`` on
        the server to stop it
    """
    family = socket.getaddrinfo(address, port, type=socket.SOCK_STREAM, flags=socket.AI_PASSIVE)[0][0]
    server_class = type("MetricsServer", (ThreadingWSGIServer,), {"address_family": family})
    request_logger = logger.getChild("http")

    class RequestHandler(WSGIRequestHandler):
        def log_message(self, format, *args):
            request_logger.debug(format % args)

    httpd = make_server(address, port, make_metrics_app(registry), server_class, RequestHandler)
    thread = threading.Thread(target=httpd.serve_forever, name="metrics-http", daemon=True)
    thread.start()
    return httpd, thread
