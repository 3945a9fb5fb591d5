# ============================================================================
# FAILURE CLASSIFIER TESTS
# ============================================================================
# STATUS: Tests - Error to failure-stage mapping
# PURPOSE: Verify rule order, detail text and family specific rules
# CREATED: 19 OCT 2026
# ============================================================================
"""
Failure Classifier Tests

Covers:
1. Each stage of the rule table
2. Rule precedence (first match wins)
3. Family specific rules (Oracle codes, MySQL codes)
4. Underlying (cause) error handling
5. Purity

Run with:
    pytest tests/test_classifier.py -v
"""

import asyncio
import socket

import pytest

from core.contracts import DatabaseFamily, FailureStage
from infrastructure.drivers import QueryResultError
from prober.classifier import RULES, classify, error_message
from prober.executor import ProbeDeadlineExceeded


MYSQL = DatabaseFamily.MYSQL
ORACLE = DatabaseFamily.ORACLE
POSTGRES = DatabaseFamily.POSTGRES


# ============================================================================
# STAGES
# ============================================================================

class TestStages:
    """One representative error per stage."""

    def test_connection_refused_is_transport(self):
        stage, detail = classify(Exception("dial tcp 10.0.0.5:3306: connect: connection refused"), MYSQL)
        assert stage is FailureStage.TRANSPORT
        assert detail.startswith("could not establish transport-level connection: ")

    def test_unknown_host_is_transport(self):
        stage, _ = classify(socket.gaierror(-2, "Name or service not known"), POSTGRES)
        assert stage is FailureStage.TRANSPORT

    def test_dial_timeout_is_transport(self):
        stage, _ = classify(Exception("dial tcp 10.0.0.5:3306: i/o timeout"), MYSQL)
        assert stage is FailureStage.TRANSPORT

    def test_unexpected_eof_is_handshake(self):
        stage, detail = classify(Exception("unexpected EOF"), MYSQL)
        assert stage is FailureStage.HANDSHAKE
        assert detail.startswith("protocol handshake failed (EOF): unexpected EOF; likely causes:")
        assert "database service down" in detail

    def test_oracle_handshake_mentions_service_name(self):
        stage, detail = classify(Exception("EOF"), ORACLE)
        assert stage is FailureStage.HANDSHAKE
        assert "wrong service_name" in detail

    def test_access_denied_is_authentication(self):
        err = Exception("Error 1045: Access denied for user 'probe'@'10.0.0.1'")
        stage, detail = classify(err, MYSQL)
        assert stage is FailureStage.AUTHENTICATION
        assert detail == f"authentication failed: {err}"

    def test_oracle_invalid_password_is_authentication(self):
        stage, _ = classify(Exception("ORA-01017: invalid username/password; logon denied"), ORACLE)
        assert stage is FailureStage.AUTHENTICATION

    def test_missing_table_is_query_execution(self):
        stage, detail = classify(Exception("Table 'shop.nope' doesn't exist"), MYSQL)
        assert stage is FailureStage.QUERY_EXECUTION
        assert detail.startswith("SQL execution failed: ")

    def test_no_rows_is_query_execution(self):
        stage, _ = classify(QueryResultError("sql: no rows in result set"), POSTGRES)
        assert stage is FailureStage.QUERY_EXECUTION

    def test_deadline_exceeded_is_timeout(self):
        stage, detail = classify(ProbeDeadlineExceeded("ping", 1.0), MYSQL)
        assert stage is FailureStage.TIMEOUT
        assert detail == "operation timed out: ping: context deadline exceeded (probe_timeout=1s)"

    def test_bare_timeout_error_is_timeout(self):
        stage, detail = classify(asyncio.TimeoutError(), POSTGRES)
        assert stage is FailureStage.TIMEOUT
        assert detail == "operation timed out: TimeoutError"

    def test_unrecognised_is_unknown(self):
        stage, detail = classify(Exception("something odd"), MYSQL)
        assert stage is FailureStage.UNKNOWN
        assert detail == "unknown error: something odd"

    def test_none_is_unknown(self):
        stage, _ = classify(None, MYSQL)
        assert stage is FailureStage.UNKNOWN


# ============================================================================
# FAMILY SPECIFIC
# ============================================================================

class TestFamilyRules:
    """Oracle and MySQL code rules only apply to their own family."""

    def test_oracle_cancel_is_timeout(self):
        stage, detail = classify(Exception("ORA-01013: user requested cancel of current operation"), ORACLE)
        assert stage is FailureStage.TIMEOUT
        assert detail.startswith("operation cancelled by timeout (ORA-01013): ")
        assert "Consider increasing probe_timeout" in detail

    def test_oracle_code_is_protocol_with_code(self):
        stage, detail = classify(Exception("ora-12514: listener does not currently know of service"), ORACLE)
        assert stage is FailureStage.PROTOCOL
        assert detail.startswith("Oracle protocol error: ")
        assert detail.endswith("(error code: ORA-12514)")

    def test_oracle_code_ignored_for_mysql(self):
        stage, _ = classify(Exception("ORA-12514: listener does not currently know of service"), MYSQL)
        assert stage is FailureStage.UNKNOWN

    def test_python_driver_code_is_protocol(self):
        stage, detail = classify(Exception("DPY-4011: the database or network closed the connection"), ORACLE)
        assert stage is FailureStage.PROTOCOL
        assert "(error code: DPY-4011)" in detail

    def test_mysql_gone_away_is_protocol(self):
        stage, detail = classify(Exception("(2006, 'MySQL server has gone away') error"), MYSQL)
        assert stage is FailureStage.PROTOCOL
        assert detail.startswith("MySQL protocol error: ")

    def test_mysql_code_ignored_for_oracle(self):
        stage, _ = classify(Exception("error 2013 lost"), ORACLE)
        assert stage is FailureStage.UNKNOWN

    def test_tidb_uses_mysql_rules(self):
        stage, _ = classify(Exception("(2013, 'Lost connection') error"), DatabaseFamily.TIDB)
        assert stage is FailureStage.PROTOCOL


# ============================================================================
# PRECEDENCE
# ============================================================================

class TestPrecedence:
    """Earlier rules win over later ones."""

    def test_rule_order(self):
        assert [rule.name for rule in RULES] == [
            "transport",
            "handshake",
            "authentication",
            "query_execution",
            "oracle_cancel",
            "oracle_code",
            "mysql_code",
            "timeout",
        ]

    def test_transport_beats_timeout(self):
        stage, _ = classify(Exception("connect timed out"), POSTGRES)
        assert stage is FailureStage.TRANSPORT

    def test_authentication_beats_mysql_protocol(self):
        stage, _ = classify(Exception("Error 1045 (28000): Access denied"), MYSQL)
        assert stage is FailureStage.AUTHENTICATION

    def test_sql_must_be_a_word(self):
        # "mysql" alone does not make it a query failure
        stage, _ = classify(Exception("mysql driver confused"), MYSQL)
        assert stage is FailureStage.UNKNOWN


# ============================================================================
# UNDERLYING ERRORS
# ============================================================================

class TestUnderlying:
    """The explicit cause is scanned and appended to the detail."""

    def test_cause_text_is_scanned_and_appended(self):
        try:
            try:
                raise ConnectionRefusedError("connection refused")
            except ConnectionRefusedError as inner:
                raise RuntimeError("pool open failed") from inner
        except RuntimeError as e:
            err = e

        stage, detail = classify(err, POSTGRES)
        assert stage is FailureStage.TRANSPORT
        assert detail.endswith("(underlying error: connection refused)")

    def test_identical_cause_not_repeated(self):
        err = RuntimeError("boom")
        err.__cause__ = RuntimeError("boom")
        _, detail = classify(err, MYSQL)
        assert "underlying error" not in detail

    def test_empty_cause_not_appended(self):
        err = ProbeDeadlineExceeded("query", 0.5)
        err.__cause__ = asyncio.TimeoutError()
        _, detail = classify(err, MYSQL)
        assert "underlying error" not in detail


class TestPurity:

    @pytest.mark.parametrize("family", list(DatabaseFamily))
    def test_same_input_same_output(self, family):
        err = Exception("Access denied")
        assert classify(err, family) == classify(err, family)

    def test_error_message_falls_back_to_type_name(self):
        assert error_message(ValueError()) == "ValueError"
        assert error_message(ValueError("bad")) == "bad"
