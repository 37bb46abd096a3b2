"""Parser for the Prometheus text exposition format.

Each non-comment line has the shape ``name{label="value",...} value``. The
parser flattens every line into a ``MetricTable`` with several access paths
so callers can read a series without knowing the exporter's label schema:

- ``name``: the first value seen for the metric name.
- ``name_total``: running sum over all labeled lines of the metric.
- ``name_<v1>_<v2>``: the value for an exact label combination.
- ``name_<v>``: the value for any single label value (last line wins).
"""

import math
import re
from collections.abc import Iterator
from dataclasses import dataclass, field

from mcmonitor.core.models import MetricTable

SAMPLE_LINE = re.compile(r"^([a-zA-Z_:][a-zA-Z0-9_:]*)(?:\{([^}]*)\})?\s+(\S+)")
LABEL_PAIR = re.compile(r'(\w+)="([^"]+)"')


@dataclass(frozen=True)
class ExpositionSample:
    """A single parsed exposition line.

    Attributes:
        name: Metric name.
        value: Parsed value (NaN when the token is not a number).
        labels: Label pairs in encounter order.
        labeled: True when the line carried a non-empty label list.
    """

    name: str
    value: float
    labels: dict[str, str] = field(default_factory=dict)
    labeled: bool = False


def _parse_value(token: str) -> float:
    try:
        return float(token)
    except ValueError:
        return math.nan


def parse_labels(raw: str) -> dict[str, str]:
    """Parse ``key="value"`` pairs from the content of a label list.

    Pairs with an empty value are skipped. A repeated key keeps its first
    position and takes the last value.
    """
    return {key: value for key, value in LABEL_PAIR.findall(raw)}


def iter_samples(text: str) -> Iterator[ExpositionSample]:
    """Yield one sample per well-formed line of ``text``.

    Blank lines and ``#`` comment/metadata lines are skipped. Lines that do
    not match the sample shape are dropped without error. A trailing
    exposition timestamp after the value is ignored.
    """
    for line in text.split("\n"):
        if line.startswith("#") or not line.strip():
            continue
        match = SAMPLE_LINE.match(line)
        if match is None:
            continue
        name, raw_labels, token = match.groups()
        yield ExpositionSample(
            name=name,
            value=_parse_value(token),
            labels=parse_labels(raw_labels) if raw_labels else {},
            labeled=bool(raw_labels),
        )


def parse_exposition(text: str) -> MetricTable:
    """Flatten exposition text into a MetricTable.

    Args:
        text: Raw body of a ``/metrics`` endpoint.

    Returns:
        MetricTable keyed by bare and label-derived names.
    """
    table = MetricTable()
    for sample in iter_samples(text):
        name, value = sample.name, sample.value

        if name not in table:
            table[name] = value

        if not sample.labeled:
            continue

        total_key = f"{name}_total"
        previous = table.get(total_key)
        if previous is None or math.isnan(previous):
            previous = 0.0
        table[total_key] = previous + value

        if not sample.labels:
            continue

        suffix = "".join(f"_{label}" for label in sample.labels.values())
        table[f"{name}{suffix}"] = value
        for label in sample.labels.values():
            table[f"{name}_{label}"] = value

    return table
