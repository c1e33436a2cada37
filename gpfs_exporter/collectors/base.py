"""Base collector abstract class for all GPFS command collectors."""

from abc import ABC, abstractmethod
from typing import Any, Iterator, List, Optional
import logging
import shlex
import time

from prometheus_client.core import GaugeMetricFamily, Metric

from ..config.models import CollectorConfig
from ..services.result_cache import ResultCache
from ..utils.errors import CommandExecutionError, CommandTimeoutError, ParseError
from ..utils.metrics import CollectionOutcome
from ..utils.status import CollectionStatus
from .command_runner import CommandRunner


def meta_metric_families(
    collector_name: str,
    outcome: Optional[CollectionOutcome] = None
) -> List[Metric]:
    """
    Build the collection health gauges for one collector.

    Args:
        collector_name: Value of the ``collector`` label
        outcome: Cycle outcome; None yields empty families for describe()

    Returns:
        List[Metric]: error, timeout and duration gauge families
    """
    error = GaugeMetricFamily(
        "gpfs_exporter_collect_error",
        "Indicates if error has occurred during collection",
        labels=["collector"]
    )
    timeout = GaugeMetricFamily(
        "gpfs_exporter_collect_timeout",
        "Indicates the collector timed out",
        labels=["collector"]
    )
    duration = GaugeMetricFamily(
        "gpfs_exporter_collector_duration_seconds",
        "Collector time duration",
        labels=["collector"]
    )

    if outcome is not None:
        error.add_metric(
            [collector_name],
            1 if outcome.status is CollectionStatus.ERROR else 0
        )
        timeout.add_metric(
            [collector_name],
            1 if outcome.status is CollectionStatus.TIMEOUT else 0
        )
        duration.add_metric([collector_name], outcome.duration)

    return [error, timeout, duration]


class BaseCollector(ABC):
    """
    Abstract base class for collectors backed by one diagnostic command.

    Subclasses provide the argument vector, a parser and the mapping from
    the parsed payload to metric families. The base class runs the cycle,
    maintains the fallback cache and reports collection health. Instances
    satisfy the prometheus_client custom collector protocol.
    """

    name: str = "base"

    def __init__(
        self,
        config: CollectorConfig,
        logger: logging.Logger,
        runner: Optional[CommandRunner] = None,
        use_cache: bool = False,
        sudo_command: Optional[str] = None
    ):
        """
        Initialize base collector.

        Args:
            config: Collector-specific configuration
            logger: Logger instance
            runner: Command runner, replaced by a test double in tests
            use_cache: Serve the last good result when a cycle fails
            sudo_command: Optional privilege wrapper prepended to the command
        """
        self.config = config
        self.logger = logger.getChild(self.__class__.__name__)
        self.runner = runner or CommandRunner(logger)
        self.sudo_command = sudo_command
        self.cache = ResultCache(enabled=use_cache, logger=self.logger)

    # ------------------------------------------------------------------
    # Source-specific hooks
    # ------------------------------------------------------------------

    @abstractmethod
    def parse(self, output: str) -> Any:
        """
        Convert raw command output into a payload.

        Raises:
            ParseError: If the output does not match the expected grammar
        """

    @abstractmethod
    def build_metrics(self, payload: Any) -> List[Metric]:
        """Build domain metric families from a parsed payload."""

    @abstractmethod
    def describe_metrics(self) -> List[Metric]:
        """Return empty domain metric families for describe()."""

    def command(self) -> List[str]:
        """Argument vector for the diagnostic command."""
        args = list(self.config.command)
        if self.sudo_command:
            args = shlex.split(self.sudo_command) + args
        return args

    def command_input(self) -> Optional[str]:
        """Text fed to the command's stdin, None for no input."""
        return None

    # ------------------------------------------------------------------
    # Collection cycle
    # ------------------------------------------------------------------

    def execute(self) -> str:
        """Run the diagnostic command under the configured timeout."""
        return self.runner.run(
            self.command(),
            self.config.timeout,
            input_text=self.command_input()
        )

    def run_cycle(self) -> CollectionOutcome:
        """
        Execute, parse and cache one collection cycle.

        Returns:
            CollectionOutcome: Success with payload, or the classified failure
        """
        start = time.monotonic()
        try:
            output = self.execute()
            payload = self.parse(output)
        except CommandTimeoutError as e:
            self.logger.warning(f"Collector {self.name} timed out: {e}")
            return CollectionOutcome.failure(
                CollectionStatus.TIMEOUT, str(e), time.monotonic() - start
            )
        except (CommandExecutionError, ParseError) as e:
            self.logger.error(f"Collector {self.name} failed: {e}")
            return CollectionOutcome.failure(
                CollectionStatus.ERROR, str(e), time.monotonic() - start
            )

        self.cache.set(payload)
        return CollectionOutcome.success(payload, time.monotonic() - start)

    def collect(self) -> Iterator[Metric]:
        """Run one cycle and yield domain and collection health metrics."""
        outcome = self.run_cycle()

        payload = outcome.payload
        if outcome.status.failed:
            payload = self.cache.get()
            if payload is not None:
                self.logger.info(f"Serving cached {self.name} metrics after {outcome.status.value}")

        if payload is not None:
            yield from self.build_metrics(payload)

        yield from meta_metric_families(self.name, outcome)

    def describe(self) -> Iterator[Metric]:
        yield from self.describe_metrics()
        yield from meta_metric_families(self.name)

    def clear_cache(self) -> None:
        """Administrative reset of the fallback cache."""
        self.cache.clear()
