import time
from collections import defaultdict
from threading import Lock
from typing import Callable, Dict, Iterator, List, Optional, Sequence, Tuple

from prometheus_client.core import GaugeMetricFamily
from prometheus_client.metrics_core import Metric

from boshmetrics.config import BoshMetricsConfig
from boshmetrics.deployments import DeploymentInfo
from boshmetrics.logger import log

DeploymentsSource = Callable[[], List[DeploymentInfo]]
LabelValues = Tuple[str, ...]


class SnapshotUnavailable(RuntimeError):
    pass


def metric_name(namespace: str, subsystem: str, name: str) -> str:
    return "_".join(part for part in (namespace, subsystem, name) if part)


class GaugeVec:
    """A gauge family whose samples are keyed by their label values.

    Writes go to a staging label set which only becomes visible on swap().
    """

    def __init__(
        self,
        name: str,
        documentation: str,
        labels: Sequence[str],
        const_labels: Dict[str, str],
    ) -> None:
        self.name = name
        self.documentation = documentation
        self.labels = tuple(labels)
        self.const_labels = dict(const_labels)
        self.live: Dict[LabelValues, float] = {}
        self.staging: Dict[LabelValues, float] = {}

    def set(self, label_values: Sequence[str], value: float) -> bool:
        """Stage a sample, returns True if it replaced one with the same labels"""
        key = tuple(label_values)
        replaced = key in self.staging
        self.staging[key] = float(value)
        return replaced

    def reset(self) -> None:
        self.staging = {}

    def swap(self) -> None:
        self.live = self.staging
        self.staging = {}

    def describe(self) -> GaugeMetricFamily:
        return GaugeMetricFamily(self.name, self.documentation, labels=self.label_names())

    def label_names(self) -> List[str]:
        return list(self.const_labels.keys()) + list(self.labels)

    def metric(self) -> GaugeMetricFamily:
        family = self.describe()
        const_values = list(self.const_labels.values())
        for label_values, value in self.live.items():
            family.add_metric(const_values + list(label_values), value)
        return family


class ScalarGauge(GaugeVec):
    """A gauge family with a single sample and no variable labels."""

    def __init__(self, name: str, documentation: str, const_labels: Dict[str, str]) -> None:
        super().__init__(name, documentation, (), const_labels)
        self.live = {(): 0.0}

    def set_value(self, value: float) -> None:
        self.set((), value)
        self.swap()

    @property
    def value(self) -> float:
        return self.live[()]


class DeploymentsCollector:
    """A Prometheus compatible Collector for BOSH deployments.

    collect_deployments() turns a snapshot of deployments into metrics.
    collect() is being called whenever the /metrics endpoint is requested.
    """

    def __init__(
        self,
        namespace: str,
        environment: str,
        bosh_name: str,
        bosh_uuid: str,
        deployments_source: Optional[DeploymentsSource] = None,
    ) -> None:
        self.deployments_source = deployments_source
        self.lock = Lock()
        const_labels = {
            "environment": environment,
            "bosh_name": bosh_name,
            "bosh_uuid": bosh_uuid,
        }
        self.release_info = GaugeVec(
            metric_name(namespace, "deployment", "release_info"),
            "Labeled BOSH Deployment Release Info with a constant '1' value.",
            ["bosh_deployment", "bosh_release_name", "bosh_release_version"],
            const_labels,
        )
        self.stemcell_info = GaugeVec(
            metric_name(namespace, "deployment", "stemcell_info"),
            "Labeled BOSH Deployment Stemcell Info with a constant '1' value.",
            ["bosh_deployment", "bosh_stemcell_name", "bosh_stemcell_version", "bosh_stemcell_os_name"],
            const_labels,
        )
        self.instance_count = GaugeVec(
            metric_name(namespace, "deployment", "instance_count"),
            "Number of instances in this deployment",
            ["bosh_deployment", "bosh_vm_type"],
            const_labels,
        )
        self.last_scrape_timestamp = ScalarGauge(
            metric_name(namespace, "", "last_deployments_scrape_timestamp"),
            "Number of seconds since 1970 since last scrape of Deployments metrics from BOSH.",
            const_labels,
        )
        self.last_scrape_duration_seconds = ScalarGauge(
            metric_name(namespace, "", "last_deployments_scrape_duration_seconds"),
            "Duration of the last scrape of Deployments metrics from BOSH.",
            const_labels,
        )

    @staticmethod
    def from_config(
        config: BoshMetricsConfig, deployments_source: Optional[DeploymentsSource] = None
    ) -> "DeploymentsCollector":
        return DeploymentsCollector(
            config.namespace,
            config.environment,
            config.bosh_name,
            config.bosh_uuid,
            deployments_source=deployments_source,
        )

    @property
    def deployment_metrics(self) -> List[GaugeVec]:
        return [self.release_info, self.stemcell_info, self.instance_count]

    @property
    def all_metrics(self) -> List[GaugeVec]:
        return self.deployment_metrics + [self.last_scrape_timestamp, self.last_scrape_duration_seconds]

    def describe(self) -> List[Metric]:
        return [metric.describe() for metric in self.all_metrics]

    def collect(self) -> Iterator[Metric]:
        if self.deployments_source is not None:
            try:
                yield from self.scrape()
                return
            except SnapshotUnavailable as e:
                log.error(f"Serving metrics of the previous scrape: {e}")
        with self.lock:
            metrics = [metric.metric() for metric in self.all_metrics]
        yield from metrics

    def scrape(self) -> List[Metric]:
        """Fetch a snapshot from the deployments source and collect it.

        Raises SnapshotUnavailable without touching any metric if the
        snapshot can not be fetched.
        """
        if self.deployments_source is None:
            raise SnapshotUnavailable("No deployments source configured")
        try:
            deployments = self.deployments_source()
        except Exception as e:
            raise SnapshotUnavailable(f"Failed to fetch deployments: {e}") from e
        return self.collect_deployments(deployments)

    def collect_deployments(self, deployments: Sequence[DeploymentInfo]) -> List[Metric]:
        with self.lock:
            begun = time.monotonic()

            for metric in self.deployment_metrics:
                metric.reset()

            for deployment in deployments:
                self.report_release_info(deployment)
                self.report_stemcell_info(deployment)
                self.report_instance_count(deployment)

            for metric in self.deployment_metrics:
                metric.swap()
            metrics = [metric.metric() for metric in self.deployment_metrics]

            self.last_scrape_timestamp.set_value(int(time.time()))
            metrics.append(self.last_scrape_timestamp.metric())

            duration = time.monotonic() - begun
            self.last_scrape_duration_seconds.set_value(duration)
            metrics.append(self.last_scrape_duration_seconds.metric())

        log.debug(f"Collected metrics of {len(deployments)} deployments in {duration:.3f} seconds")
        return metrics

    def report_release_info(self, deployment: DeploymentInfo) -> None:
        for release in deployment.releases:
            if self.release_info.set((deployment.name, release.name, release.version), 1):
                log.debug(f"Duplicate release {release.name}/{release.version} in deployment {deployment.name}")

    def report_stemcell_info(self, deployment: DeploymentInfo) -> None:
        for stemcell in deployment.stemcells:
            label_values = (deployment.name, stemcell.name, stemcell.version, stemcell.os_name)
            if self.stemcell_info.set(label_values, 1):
                log.debug(f"Duplicate stemcell {stemcell.name}/{stemcell.version} in deployment {deployment.name}")

    def report_instance_count(self, deployment: DeploymentInfo) -> None:
        vm_type_count: Dict[str, int] = defaultdict(int)
        for instance in deployment.instances:
            vm_type_count[instance.vm_type] += 1

        for vm_type, count in vm_type_count.items():
            self.instance_count.set((deployment.name, vm_type), count)
