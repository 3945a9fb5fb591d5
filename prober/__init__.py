# ============================================================================
# PROBER MODULE
# ============================================================================
# STATUS: Prober - Probing engine
# PURPOSE: Targets, probe cycles, failure classification and scheduling
# CREATED: 19 OCT 2026
# ============================================================================
"""
Probing engine.

Components (leaf-first):
    classifier  exception -> (stage, detail)
    target      descriptor + connection + labels + health state
    executor    one ping-then-query cycle
    loop        one asyncio task per target, coordinated shutdown
"""

from prober.classifier import Classification, classify
from prober.executor import ProbeDeadlineExceeded, ProbeExecutor, ProbeOutcome, detect_reconnect
from prober.loop import Prober
from prober.target import (
    ProbeTarget,
    TargetConstructionError,
    TargetInfo,
    TargetLabels,
    build_target,
    resolve_ip,
)

__all__ = [
    # Classifier
    "Classification",
    "classify",
    # Target
    "ProbeTarget",
    "TargetConstructionError",
    "TargetInfo",
    "TargetLabels",
    "build_target",
    "resolve_ip",
    # Executor
    "ProbeDeadlineExceeded",
    "ProbeExecutor",
    "ProbeOutcome",
    "detect_reconnect",
    # Scheduler
    "Prober",
]
