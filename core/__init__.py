# ============================================================================
# CORE MODULE
# ============================================================================
# STATUS: Core module initialization
# PURPOSE: Export core contracts and the target descriptor model
# LAST_REVIEWED: 19 OCT 2026
# ============================================================================

from core.contracts import DatabaseFamily, FailureStage
from core.models import TargetDescriptor

__all__ = [
    # Enums
    "DatabaseFamily",
    "FailureStage",
    # Models
    "TargetDescriptor",
]
