# ============================================================================
# TARGET DESCRIPTOR MODEL
# ============================================================================
# STATUS: Core model - One configured database endpoint
# PURPOSE: Immutable description of a probe target loaded from YAML
# LAST_REVIEWED: 19 OCT 2026
# EXPORTS: TargetDescriptor
# DEPENDENCIES: pydantic
# ============================================================================
"""
Target Descriptor Model

A TargetDescriptor is the configuration of one database endpoint.
It defines:
- Identity (name, family)
- Where to connect (host/port/credentials, or a pre-built DSN)
- What to run (custom probe query, Oracle service name)
- Metric metadata (project, env, extra labels)

Descriptors are validated once at startup and never change while the
process runs.
"""

from typing import Dict

from pydantic import BaseModel, Field

from core.contracts import DatabaseFamily


class TargetDescriptor(BaseModel):
    """
    Configuration for a single probe target.

    Example YAML:
        - name: orders-primary
          type: mysql
          host: orders-db.internal
          port: 3306
          user: probe
          password: secret
          project: shop
          env: prod
          labels:
            role: primary
    """

    name: str = Field(..., description="Unique target name, used as db_name label")
    type: DatabaseFamily = Field(..., description="Database family")

    host: str = Field(default="")
    port: int = Field(default=0, ge=0, le=65535)
    user: str = Field(default="")
    password: str = Field(default="", repr=False)

    # Pre-built connection string, used verbatim when present
    dsn: str = Field(default="", repr=False)

    # Custom probe SQL; family default when empty
    query: str = Field(default="")

    # Oracle only
    service_name: str = Field(default="")

    project: str = Field(default="")
    env: str = Field(default="")

    # Only "role" is surfaced as a metric label
    labels: Dict[str, str] = Field(default_factory=dict)

    model_config = {"frozen": True}

    @property
    def role(self) -> str:
        """Role label (e.g. primary/replica), empty when not configured."""
        return self.labels.get("role", "")


__all__ = [
    "TargetDescriptor",
]
