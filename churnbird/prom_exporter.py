"""Prometheus pull exporter using prometheus_client."""
from typing import List
from prometheus_client import CollectorRegistry, generate_latest, start_http_server
from prometheus_client.core import GaugeMetricFamily, Metric
import logging
import time

from churnbird.config import PrometheusExporterConfig
from churnbird.population import Population
from churnbird.series import Family

logger = logging.getLogger(__name__)


def to_metric_family(family: Family) -> Metric:
    """Convert a family into a prometheus_client gauge family."""
    metric = GaugeMetricFamily(family.name, f"Generated gauge family: {family.name}")
    for series in family.series:
        metric.add_sample(family.name, series.label_dict(), series.value)
    return metric


class PopulationCollector:
    """Custom collector serving a population snapshot on every scrape."""

    def __init__(self, population: Population):
        self.population = population
        self.scrape_count = 0

    def collect(self) -> List[Metric]:
        # Samples are copied out while the lock is held, so serialization
        # sees one consistent composition.
        with self.population.locked():
            start = time.time()
            families = self.population.snapshot()
            metrics = [to_metric_family(family) for family in families]
            self.scrape_count += 1

        logger.debug(
            f"Served snapshot of {len(metrics)} families "
            f"in {time.time() - start:.3f}s"
        )
        return metrics


class PrometheusExporter:
    """Manages the population collector and HTTP server."""

    def __init__(self, config: PrometheusExporterConfig, population: Population):
        self.config = config
        # Use a custom registry to avoid exporting default Python/process metrics
        self.registry = CollectorRegistry()
        self.collector = PopulationCollector(population)
        self.registry.register(self.collector)
        self.server = None
        self.server_thread = None

    def start(self):
        """Start Prometheus HTTP server."""
        try:
            self.server, self.server_thread = start_http_server(
                self.config.port,
                addr=self.config.bind_address,
                registry=self.registry
            )
            logger.info(
                f"Prometheus exporter listening on "
                f"{self.config.bind_address}:{self.config.port}/metrics"
            )
        except Exception as e:
            logger.error(f"Failed to start Prometheus HTTP server: {e}")
            raise

    def render(self) -> bytes:
        """Render the current exposition payload, as a scrape would."""
        return generate_latest(self.registry)

    def shutdown(self):
        if self.server is not None:
            self.server.shutdown()
            self.server.server_close()
