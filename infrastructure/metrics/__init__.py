"""Probe metrics adapters."""

from infrastructure.metrics.fake import FakeProbeMetrics
from infrastructure.metrics.prometheus import PrometheusProbeMetrics
from infrastructure.metrics.protocol import LABEL_NAMES, Labels, ProbeMetrics

__all__ = ["LABEL_NAMES", "Labels", "ProbeMetrics", "PrometheusProbeMetrics", "FakeProbeMetrics"]
