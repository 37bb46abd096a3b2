"""JSON encoding for monitor responses.

Converts dataclass models to camelCase dicts and makes every float
strict-JSON safe: integral floats become ints, non-finite floats become
None.
"""

import dataclasses
import math
from typing import Any

from mcmonitor.core.models import StatsEnvelope


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.title() for part in rest)


def to_jsonable(obj: Any) -> Any:
    """Recursively convert ``obj`` into JSON-compatible primitives.

    Args:
        obj: Dataclass instance, dict, list, or primitive.

    Returns:
        Structure of dicts, lists, str, int, float, bool and None.
    """
    if isinstance(obj, bool) or obj is None or isinstance(obj, (str, int)):
        return obj
    if isinstance(obj, float):
        if not math.isfinite(obj):
            return None
        if obj.is_integer():
            return int(obj)
        return obj
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return {
            _camel(f.name): to_jsonable(getattr(obj, f.name))
            for f in dataclasses.fields(obj)
        }
    if isinstance(obj, dict):
        return {str(key): to_jsonable(value) for key, value in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [to_jsonable(item) for item in obj]
    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")


def encode_envelope(envelope: StatsEnvelope) -> dict[str, Any]:
    """Encode a StatsEnvelope into the ``/api/stats`` response body.

    Args:
        envelope: Envelope assembled by the stats service.

    Returns:
        Dict with ``timestamp``, ``minecraft``, ``system`` and
        ``serverStatus`` keys.
    """
    return to_jsonable(envelope)
