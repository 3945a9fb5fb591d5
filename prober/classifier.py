# ============================================================================
# FAILURE CLASSIFIER
# ============================================================================
# STATUS: Prober - Error to failure-stage mapping
# PURPOSE: Turn driver exceptions into a coarse, queryable diagnostic stage
# CREATED: 19 OCT 2026
# ============================================================================
"""
Failure Classifier

Maps an exception raised by a probe (plus the target's database family)
to a ``Classification(stage, detail)``.

Driver messages are not standardised, so classification is a best-effort
scan of the error text. The rules live in an ordered table and the first
match wins:

    1. transport        connection refused, unknown host, unreachable
    2. handshake        EOF while negotiating the protocol
    3. authentication   credentials rejected
    4. query_execution  SQL / syntax / table / column errors
    5. family codes     ORA-/DPY- codes (Oracle), 1045/2003/2006/2013 (MySQL)
    6. timeout          deadline exceeded / timed out
    7. unknown          anything else, detail is the raw error text

The scanned text is the lower-cased exception type name, its message and
the message of its explicit cause (``raise ... from e``). Whenever the
cause message adds information, it is appended to the detail as
``(underlying error: ...)``.

Classification is pure: same error and family, same result.
"""

import re
from dataclasses import dataclass
from typing import Callable, NamedTuple, Optional, Tuple

from core.contracts import DatabaseFamily, FailureStage


class Classification(NamedTuple):
    """Result of classifying one probe failure."""
    stage: FailureStage
    detail: str


@dataclass(frozen=True)
class ErrorText:
    """Texts extracted from an exception for matching."""
    message: str
    underlying: str
    haystack: str
    family: DatabaseFamily


@dataclass(frozen=True)
class ClassificationRule:
    """
    One row of the classification table.

    ``matches`` decides whether the rule applies; ``describe`` builds the
    detail text (without the underlying-error suffix).
    """
    name: str
    stage: FailureStage
    matches: Callable[[ErrorText], bool]
    describe: Callable[[ErrorText], str]


# ============================================================================
# HELPERS
# ============================================================================

def _contains_any(text: str, needles: Tuple[str, ...]) -> bool:
    return any(needle in text for needle in needles)


_TRANSPORT_PHRASES = (
    "connection refused",
    "connect call failed",
    "no such host",
    "name or service not known",
    "nodename nor servname",
    "temporary failure in name resolution",
    "name resolution",
    "network is unreachable",
    "no route to host",
    "host is unreachable",
)
_DIAL_PHRASES = ("dial", "connect")

_EOF_PHRASES = (
    "eof",
    "end of file",
    "incomplete read",
    "server closed the connection unexpectedly",
)

_AUTH_PHRASES = (
    "access denied",
    "invalid credentials",
    "authentication failed",
    "invalid username/password",
    "ora-01017",
    "ora-1017",
    "1045",
)

_SQL_WORD_RE = re.compile(r"\bsql\b")
_SQL_PHRASES = ("syntax error", "table", "column")

_ORACLE_CANCEL_PHRASES = ("ora-01013", "ora-1013", "user requested cancel")
_ORACLE_CODE_RE = re.compile(r"\b(?:ora|dpy)-\d+", re.IGNORECASE)

_MYSQL_PROTOCOL_CODES = ("1045", "2003", "2006", "2013")

_TIMEOUT_PHRASES = ("deadline exceeded", "timeout", "timed out")

_HANDSHAKE_CAUSES = {
    True: "likely causes: 1) wrong service_name 2) Oracle listener not running "
          "3) network interruption 4) probe_timeout too short",
    False: "likely causes: 1) database service down 2) network interruption "
           "3) probe_timeout too short",
}


def _is_transport(e: ErrorText) -> bool:
    if _contains_any(e.haystack, _TRANSPORT_PHRASES):
        return True
    timed_out = "timeout" in e.haystack or "timed out" in e.haystack
    return timed_out and _contains_any(e.haystack, _DIAL_PHRASES)


def _is_query_execution(e: ErrorText) -> bool:
    return bool(_SQL_WORD_RE.search(e.haystack)) or _contains_any(e.haystack, _SQL_PHRASES)


def _is_oracle_cancel(e: ErrorText) -> bool:
    return e.family.is_oracle_compatible and _contains_any(e.haystack, _ORACLE_CANCEL_PHRASES)


def _is_oracle_code(e: ErrorText) -> bool:
    return e.family.is_oracle_compatible and bool(_ORACLE_CODE_RE.search(e.haystack))


def _describe_oracle_code(e: ErrorText) -> str:
    detail = f"Oracle protocol error: {e.message}"
    match = _ORACLE_CODE_RE.search(e.message) or _ORACLE_CODE_RE.search(e.haystack)
    if match:
        detail += f" (error code: {match.group(0).upper()})"
    return detail


def _is_mysql_protocol(e: ErrorText) -> bool:
    return (
        e.family.is_mysql_compatible
        and "error" in e.haystack
        and _contains_any(e.haystack, _MYSQL_PROTOCOL_CODES)
    )


# ============================================================================
# RULE TABLE
# ============================================================================

RULES: Tuple[ClassificationRule, ...] = (
    ClassificationRule(
        name="transport",
        stage=FailureStage.TRANSPORT,
        matches=_is_transport,
        describe=lambda e: f"could not establish transport-level connection: {e.message}",
    ),
    ClassificationRule(
        name="handshake",
        stage=FailureStage.HANDSHAKE,
        matches=lambda e: _contains_any(e.haystack, _EOF_PHRASES),
        describe=lambda e: (
            f"protocol handshake failed (EOF): {e.message}; "
            f"{_HANDSHAKE_CAUSES[e.family.is_oracle_compatible]}"
        ),
    ),
    ClassificationRule(
        name="authentication",
        stage=FailureStage.AUTHENTICATION,
        matches=lambda e: _contains_any(e.haystack, _AUTH_PHRASES),
        describe=lambda e: f"authentication failed: {e.message}",
    ),
    ClassificationRule(
        name="query_execution",
        stage=FailureStage.QUERY_EXECUTION,
        matches=_is_query_execution,
        describe=lambda e: f"SQL execution failed: {e.message}",
    ),
    ClassificationRule(
        name="oracle_cancel",
        stage=FailureStage.TIMEOUT,
        matches=_is_oracle_cancel,
        describe=lambda e: (
            f"operation cancelled by timeout (ORA-01013): {e.message}; "
            "likely causes: 1) probe_timeout too short 2) high network latency "
            "3) slow database response. Consider increasing probe_timeout"
        ),
    ),
    ClassificationRule(
        name="oracle_code",
        stage=FailureStage.PROTOCOL,
        matches=_is_oracle_code,
        describe=_describe_oracle_code,
    ),
    ClassificationRule(
        name="mysql_code",
        stage=FailureStage.PROTOCOL,
        matches=_is_mysql_protocol,
        describe=lambda e: f"MySQL protocol error: {e.message}",
    ),
    ClassificationRule(
        name="timeout",
        stage=FailureStage.TIMEOUT,
        matches=lambda e: _contains_any(e.haystack, _TIMEOUT_PHRASES),
        describe=lambda e: f"operation timed out: {e.message}",
    ),
)


# ============================================================================
# CLASSIFY
# ============================================================================

def error_message(error: BaseException) -> str:
    """Exception text, or its type name when the text is empty."""
    return str(error) or type(error).__name__


def _extract(error: BaseException, family: DatabaseFamily) -> ErrorText:
    message = error_message(error)
    cause: Optional[BaseException] = error.__cause__
    underlying = str(cause) if cause is not None else ""

    parts = [type(error).__name__, message]
    if cause is not None:
        parts.extend([type(cause).__name__, underlying])

    return ErrorText(
        message=message,
        underlying=underlying,
        haystack=" ".join(parts).lower(),
        family=family,
    )


def classify(error: Optional[BaseException], family: DatabaseFamily) -> Classification:
    """
    Classify a probe failure.

    Args:
        error: Exception raised by ping or query (None yields UNKNOWN)
        family: Database family of the target

    Returns:
        Classification(stage, detail)
    """
    if error is None:
        return Classification(FailureStage.UNKNOWN, "unknown error: no error information")

    text = _extract(error, DatabaseFamily(family))

    for rule in RULES:
        if rule.matches(text):
            stage, detail = rule.stage, rule.describe(text)
            break
    else:
        stage, detail = FailureStage.UNKNOWN, f"unknown error: {text.message}"

    if text.underlying and text.underlying != text.message:
        detail += f" (underlying error: {text.underlying})"

    return Classification(stage, detail)


__all__ = [
    "Classification",
    "ClassificationRule",
    "RULES",
    "classify",
    "error_message",
]
