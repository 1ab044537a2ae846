from typing import TypeVar

from prometheus_client import REGISTRY, Counter, Gauge

MetricT = TypeVar("MetricT", Counter, Gauge)


def _register(
    metric_cls: type[MetricT], name: str, doc: str, labels: list[str] | None = None
) -> MetricT:
    """
    Create a metric, or return the one already registered under `name`.

    Importing the metrics module twice (uvicorn --reload, test collection)
    would otherwise fail with a duplicated timeseries ValueError.
    """
    try:
        return metric_cls(name, doc, labels or [])
    except ValueError:
        return REGISTRY._names_to_collectors[name]


def _get_or_create_counter(
    name: str, doc: str, labels: list[str] | None = None
) -> Counter:
    return _register(Counter, name, doc, labels)


def _get_or_create_gauge(
    name: str, doc: str, labels: list[str] | None = None
) -> Gauge:
    return _register(Gauge, name, doc, labels)
