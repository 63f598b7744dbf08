"""Parsing of metrics scraped directly from a service in the Prometheus text format"""

import logging
from dataclasses import dataclass
from typing import Callable, Iterable

from prometheus_client.parser import text_string_to_metric_families
from prometheus_client.samples import Sample

logger = logging.getLogger(__name__)

UNAVAILABLE_MARKER = '"code":503'


def is_unavailable(data: str) -> bool:
    """True, if the API server answered the proxied request with 503 instead of forwarding the metrics"""
    return UNAVAILABLE_MARKER in data


class MetricSample:
    """Samples from a single scrape of the metrics endpoint"""

    def __init__(self, samples: list[Sample]):
        self.samples = samples

    @classmethod
    def parse(cls, data: str) -> "MetricSample":
        """Parses scraped text, raises ValueError if the text is not in the Prometheus text format"""
        return cls([sample for family in text_string_to_metric_families(data) for sample in family.samples])

    def filter(self, func: Callable[[Sample], bool]) -> "MetricSample":
        """Filter method accept function `func` as a single argument.
        Given function will be used as a filter on the samples.
        E.g. func = lambda x: x.labels["kind"] == "Deployment"
        After the filtering, new MetricSample object will be returned."""
        return MetricSample([s for s in self.samples if func(s)])

    def named(self, name: str) -> "MetricSample":
        """Returns samples of metric with said name, name is matched case-insensitively"""
        return self.filter(lambda s: s.name.lower() == name.lower())

    @property
    def names(self) -> list[str]:
        """Return list of metrics names"""
        return [s.name for s in self.samples]

    @property
    def values(self) -> list[float]:
        """Return list of metrics values as floats"""
        return [float(s.value) for s in self.samples]

    def label_values(self, label: str) -> list[str]:
        """Return values of said label for all samples which have it"""
        return [s.labels[label] for s in self.samples if label in s.labels]


@dataclass(frozen=True)
class FindingPattern:
    """
    One class of validation finding the operator reports as a metric.
    The workload the finding is about is identified by the `label` of the sample.
    """

    metric: str
    label: str = "name"

    def captured(self, sample: MetricSample) -> list[str]:
        """Returns workload names this finding was reported for"""
        return sample.named(self.metric).label_values(self.label)

    def reported_for(self, sample: MetricSample, workload: str) -> bool:
        """
        True, if the finding was reported for a workload whose name contains `workload`.
        Containment, not equality, is intended: reported names may carry additional suffixes
        """
        return any(workload in name for name in self.captured(sample))


DVO_FINDINGS = (
    FindingPattern("deployment_validation_operator_minimum_three_replicas"),
    FindingPattern("deployment_validation_operator_no_liveness_probe"),
    FindingPattern("deployment_validation_operator_no_readiness_probe"),
    FindingPattern("deployment_validation_operator_no_read_only_root_fs"),
    FindingPattern("deployment_validation_operator_required_annotation_email"),
    FindingPattern("deployment_validation_operator_required_label_owner"),
    FindingPattern("deployment_validation_operator_run_as_non_root"),
    FindingPattern("deployment_validation_operator_unset_cpu_requirements"),
    FindingPattern("deployment_validation_operator_unset_memory_requirements"),
)


def finding_reported(pattern: FindingPattern, data: str, workload: str) -> bool:
    """True, if the scraped `data` contain the finding for the workload"""
    return not missing_findings(data, workload, [pattern])


def missing_findings(data: str, workload: str, patterns: Iterable[FindingPattern] = DVO_FINDINGS) -> list[str]:
    """
    Returns metric names of findings not reported for the workload in the scraped `data`.
    Unavailable backend or unparseable data means nothing was reported.
    """
    patterns = list(patterns)
    if is_unavailable(data):
        return [p.metric for p in patterns]
    try:
        sample = MetricSample.parse(data)
    except ValueError as e:
        logger.info("Unable to parse scraped metrics: %s", e)
        return [p.metric for p in patterns]
    return [p.metric for p in patterns if not p.reported_for(sample, workload)]
