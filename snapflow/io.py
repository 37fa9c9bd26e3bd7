"""
snapflow/io.py
--------------
JSON persistence of PerformanceMetrics.
A single record is written as one object, a sweep as a list of objects.
Field names follow METRIC_FIELDS.
"""
import json
import os

from .analysis import PerformanceMetrics


def save_metrics(path, metrics):
    """
    Writes one PerformanceMetrics or a sequence of them to `path`.
    Parent directories are created as needed.
    """
    if isinstance(metrics, PerformanceMetrics):
        payload = metrics.as_dict()
    else:
        payload = [m.as_dict() for m in metrics]

    folder = os.path.dirname(os.path.abspath(path))
    os.makedirs(folder, exist_ok=True)

    with open(path, "w", encoding="utf-8") as f:
        json.dump(payload, f, indent=2)


def load_metrics(path):
    """ Reads a file written by save_metrics (record or list of records). """
    with open(path, "r", encoding="utf-8") as f:
        payload = json.load(f)

    if isinstance(payload, dict):
        return PerformanceMetrics.from_dict(payload)
    return [PerformanceMetrics.from_dict(item) for item in payload]
