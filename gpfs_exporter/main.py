"""Main application entry point for the GPFS Prometheus exporter."""

import argparse
import logging
import signal
import sys
import threading
from typing import Any, Dict, Optional

from .collectors.command_runner import CommandRunner
from .config.loader import ConfigLoader
from .config.models import GPFSExporterConfig
from .config.settings import Settings
from .exporter import build_registry
from .exposition import generate_text, start_metrics_server
from .utils.logger import setup_logger


class ExporterApp:
    """
    Main exporter application.

    Loads configuration, builds the collector registry and serves it over
    HTTP until a shutdown signal arrives.
    """

    def __init__(
        self,
        config_path: str = "",
        overrides: Optional[Dict[str, Any]] = None,
        runner: Optional[CommandRunner] = None
    ):
        """
        Initialize exporter application.

        Args:
            config_path: Path to configuration file, empty for defaults
            overrides: ``exporter``/``logging`` settings taken from the command line
            runner: Optional command runner shared by all collectors
        """
        self.config_path = config_path
        self.logger = setup_logger("gpfs_exporter", Settings.log_level())
        self._stop = threading.Event()

        self.config = self._load_config(overrides or {})
        self.logger.setLevel(self.config.logging.level)

        self.registry, self.gpfs_collector = build_registry(self.config, self.logger, runner)
        self.logger.info("Application initialized successfully")

    def _load_config(self, overrides: Dict[str, Any]) -> GPFSExporterConfig:
        """
        Load and validate configuration, then apply command-line overrides.

        Returns:
            GPFSExporterConfig: Loaded configuration

        Raises:
            SystemExit: If configuration is invalid
        """
        try:
            if self.config_path:
                self.logger.info(f"Loading configuration from {self.config_path}")
            else:
                self.logger.info("No configuration file given, using defaults")
            config = ConfigLoader.load(self.config_path)

        except FileNotFoundError:
            self.logger.error(f"Configuration file not found: {self.config_path}")
            sys.exit(1)

        except Exception as e:
            self.logger.error(f"Failed to load configuration: {e}", exc_info=True)
            sys.exit(1)

        exporter_overrides = {
            k: v for k, v in overrides.items()
            if k in ("listen_address", "listen_port", "use_cache") and v is not None
        }
        if exporter_overrides:
            config.exporter = config.exporter.model_copy(update=exporter_overrides)
        if overrides.get("log_level"):
            config.logging = config.logging.model_copy(update={"level": overrides["log_level"]})

        self.logger.info(
            "Configuration loaded",
            extra={
                "listen": f"{config.exporter.listen_address}:{config.exporter.listen_port}",
                "use_cache": config.exporter.use_cache,
            }
        )
        return config

    def _signal_handler(self, signum, frame):
        """
        Handle shutdown signals.

        Args:
            signum: Signal number
            frame: Current stack frame
        """
        signal_name = signal.Signals(signum).name
        self.logger.info(f"Received {signal_name}, initiating graceful shutdown...")
        self._stop.set()

    def _reset_handler(self, signum, frame):
        """Clear collector caches on SIGHUP."""
        self.logger.info("Received SIGHUP, clearing result caches")
        self.gpfs_collector.clear_caches()

    def collect_once(self) -> str:
        """Collect every enabled collector once and return the text exposition."""
        return generate_text(self.registry).decode("utf-8")

    def serve(self) -> None:
        """
        Serve metrics over HTTP until SIGTERM/SIGINT.

        Each scrape triggers a fresh collection; nothing is polled in the
        background.
        """
        signal.signal(signal.SIGTERM, self._signal_handler)
        signal.signal(signal.SIGINT, self._signal_handler)
        signal.signal(signal.SIGHUP, self._reset_handler)

        address = self.config.exporter.listen_address
        port = self.config.exporter.listen_port
        httpd, _ = start_metrics_server(self.registry, address, port, self.logger)
        self.logger.info(f"Listening on {address}:{port}")

        try:
            while not self._stop.wait(timeout=1.0):
                pass
        finally:
            httpd.shutdown()
            httpd.server_close()
        self.logger.info("Exporter stopped")


def main():
    """
    CLI entry point.

    Parses command-line arguments and starts the exporter.
    """
    parser = argparse.ArgumentParser(
        description='Prometheus exporter for IBM Spectrum Scale (GPFS)',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Serve metrics on the default port 9303
  gpfs-exporter

  # Collect once, print the exposition and exit
  gpfs-exporter --run-once

  # Use custom config file and keep last good results on failure
  gpfs-exporter --config /etc/gpfs_exporter.yaml --use-cache
        """
    )

    parser.add_argument(
        '--config',
        default=Settings.config_path(),
        help='Path to configuration file (default: GPFS_EXPORTER_CONFIG env var or built-in defaults)'
    )

    parser.add_argument(
        '--listen-address',
        default=None,
        help='Address to bind the metrics endpoint to'
    )

    parser.add_argument(
        '--listen-port',
        type=int,
        default=None,
        help='Port of the metrics endpoint (default: 9303)'
    )

    parser.add_argument(
        '--use-cache',
        action='store_true',
        default=None,
        help='Serve the last successful result when a collection fails'
    )

    parser.add_argument(
        '--run-once',
        action='store_true',
        help='Collect once, print metrics to stdout and exit'
    )

    parser.add_argument(
        '--log-level',
        default=None,
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
        help='Logging level (default: config file, then LOG_LEVEL env var)'
    )

    args = parser.parse_args()

    try:
        app = ExporterApp(
            config_path=args.config,
            overrides={
                "listen_address": args.listen_address,
                "listen_port": args.listen_port,
                "use_cache": args.use_cache,
                "log_level": args.log_level,
            }
        )

        if args.run_once:
            sys.stdout.write(app.collect_once())
            sys.exit(0)

        app.serve()

    except Exception as e:
        logging.error(f"Application startup failed: {e}", exc_info=True)
        sys.exit(1)


if __name__ == '__main__':
    main()
