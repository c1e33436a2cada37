"""Collector registry wiring for the GPFS exporter."""

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Dict, Iterator, List, Optional, Tuple, Type

from prometheus_client import CollectorRegistry
from prometheus_client.core import Metric

from .collectors.base import BaseCollector, meta_metric_families
from .collectors.command_runner import CommandRunner
from .collectors.mmpmon_collector import MmpmonCollector
from .collectors.verbs_collector import VerbsCollector
from .config.models import GPFSExporterConfig
from .utils.metrics import CollectionOutcome
from .utils.status import CollectionStatus


# Collector name -> class; names match the keys under ``collectors:`` in config
COLLECTORS: Dict[str, Type[BaseCollector]] = {
    MmpmonCollector.name: MmpmonCollector,
    VerbsCollector.name: VerbsCollector,
}


def build_collectors(
    config: GPFSExporterConfig,
    logger: logging.Logger,
    runner: Optional[CommandRunner] = None
) -> List[BaseCollector]:
    """
    Instantiate every enabled collector.

    Args:
        config: Exporter configuration
        logger: Logger instance
        runner: Shared command runner; a real one is created when omitted

    Returns:
        List[BaseCollector]: Enabled collectors in registration order
    """
    runner = runner or CommandRunner(logger)
    collectors = []

    for name, collector_class in COLLECTORS.items():
        collector_config = getattr(config.collectors, name)
        if not collector_config.enabled:
            logger.debug(f"Collector {name} disabled")
            continue
        collectors.append(collector_class(
            collector_config,
            logger,
            runner=runner,
            use_cache=config.exporter.use_cache,
            sudo_command=config.exporter.sudo_command
        ))

    logger.info(
        f"Initialized {len(collectors)} collector(s): "
        f"{', '.join(c.name for c in collectors) or 'none'}"
    )
    return collectors


class GPFSCollector:
    """
    Aggregate GPFS collectors into a single registry entry.

    Every collector emits the same health gauge names, so their families are
    merged by name to keep one HELP/TYPE block per metric in the exposition.
    Collectors of one scrape run in parallel and independently of each other.
    """

    def __init__(self, collectors: List[BaseCollector], logger: logging.Logger):
        """
        Initialize aggregating collector.

        Args:
            collectors: Enabled source collectors
            logger: Logger instance
        """
        self.collectors = collectors
        self.logger = logger.getChild(self.__class__.__name__)

    def describe(self) -> Iterator[Metric]:
        families = []
        for collector in self.collectors:
            families.extend(collector.describe())
        return iter(self._merge(families))

    def collect(self) -> Iterator[Metric]:
        if not self.collectors:
            return iter([])

        with ThreadPoolExecutor(max_workers=len(self.collectors)) as executor:
            results = list(executor.map(self._collect_one, self.collectors))

        families = []
        for result in results:
            families.extend(result)
        return iter(self._merge(families))

    def clear_caches(self) -> None:
        """Clear the fallback cache of every collector."""
        for collector in self.collectors:
            collector.clear_cache()
        self.logger.info(f"Cleared result cache of {len(self.collectors)} collector(s)")

    def _collect_one(self, collector: BaseCollector) -> List[Metric]:
        """Collect from one collector, reporting unexpected failures as errors."""
        try:
            return list(collector.collect())
        except Exception as e:
            self.logger.error(f"Collector {collector.name} raised unexpectedly: {e}", exc_info=True)
            return meta_metric_families(
                collector.name,
                CollectionOutcome.failure(CollectionStatus.ERROR, str(e))
            )

    @staticmethod
    def _merge(families: List[Metric]) -> List[Metric]:
        merged: Dict[str, Metric] = {}
        for family in families:
            if family.name in merged:
                merged[family.name].samples.extend(family.samples)
            else:
                merged[family.name] = family
        return list(merged.values())


def build_registry(
    config: GPFSExporterConfig,
    logger: logging.Logger,
    runner: Optional[CommandRunner] = None
) -> Tuple[CollectorRegistry, GPFSCollector]:
    """
    Create a registry holding the GPFS collectors described by *config*.

    Returns:
        Tuple of the registry and the GPFSCollector registered in it; the
        latter is kept for administrative cache resets
    """
    registry = CollectorRegistry()
    gpfs_collector = GPFSCollector(build_collectors(config, logger, runner), logger)
    registry.register(gpfs_collector)
    return registry, gpfs_collector
