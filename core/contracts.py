# ============================================================================
# BASE CONTRACTS & ENUMS
# ============================================================================
# STATUS: Foundation - Core enums shared by config, drivers and prober
# PURPOSE: Database families and failure stage taxonomy
# LAST_REVIEWED: 19 OCT 2026
# EXPORTS: DatabaseFamily, FailureStage
# ============================================================================
"""
Base contracts for the database prober.

These enums cross every boundary of the system:
- YAML configuration (``type:`` of a database entry)
- Metric labels (``db_type``)
- Structured log fields (``failure_stage``)
"""

from enum import Enum


# ============================================================================
# DATABASE FAMILIES
# ============================================================================

class DatabaseFamily(str, Enum):
    """
    Supported database families.

    MySQL and TiDB share a wire protocol and a driver; Oracle and
    PostgreSQL each have their own.
    """
    MYSQL = "mysql"
    TIDB = "tidb"
    ORACLE = "oracle"
    POSTGRES = "postgres"

    @property
    def is_mysql_compatible(self) -> bool:
        """True for families spoken through the MySQL protocol."""
        return self in (DatabaseFamily.MYSQL, DatabaseFamily.TIDB)

    @property
    def is_oracle_compatible(self) -> bool:
        return self is DatabaseFamily.ORACLE

    @classmethod
    def supported(cls) -> str:
        """Comma separated list used in validation messages."""
        return ", ".join(f.value for f in cls)


# ============================================================================
# FAILURE STAGES
# ============================================================================

class FailureStage(str, Enum):
    """
    Coarse diagnostic bucket assigned to a failed probe cycle.

    Ordered roughly by how far a connection got before failing:
        TRANSPORT -> HANDSHAKE -> AUTHENTICATION -> QUERY_EXECUTION
    TIMEOUT, PROTOCOL and UNKNOWN can happen at any point.
    """
    TRANSPORT = "transport"              # TCP connect / DNS
    HANDSHAKE = "handshake"              # EOF during protocol negotiation
    AUTHENTICATION = "authentication"    # Credentials rejected
    QUERY_EXECUTION = "query_execution"  # SQL / schema errors
    TIMEOUT = "timeout"                  # Deadline exceeded or cancelled
    PROTOCOL = "protocol"                # Family specific error codes
    UNKNOWN = "unknown"                  # Fallback bucket


__all__ = [
    "DatabaseFamily",
    "FailureStage",
]
