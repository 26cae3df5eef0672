"""Tests for operator configuration."""

from __future__ import annotations

from unittest.mock import patch

import pytest

from tls_rotator.config import OperatorConfig, parse_namespaces


class TestParseNamespaces:
    """Test cases for parse_namespaces function."""

    @pytest.mark.parametrize("value", [None, "", " , "])
    def test_empty(self, value):
        """Test that an empty list means all namespaces."""
        assert parse_namespaces(value) == ()

    def test_comma_separated(self):
        """Test parsing a namespace list with whitespace."""
        assert parse_namespaces("team-a, team-b,,team-c ") == ("team-a", "team-b", "team-c")


class TestOperatorConfig:
    """Test cases for OperatorConfig."""

    def test_defaults(self):
        """Test the defaults with an empty environment."""
        config = OperatorConfig.from_env({})

        assert config == OperatorConfig()
        assert config.clusterwide
        assert config.reconcile_timeout == 30.0
        assert config.retry_delay == 10.0
        assert config.max_workers == 4
        assert config.metrics_port == 8080
        assert config.log_level == "INFO"

    def test_from_env(self):
        """Test reading every setting."""
        config = OperatorConfig.from_env(
            {
                "ROTATOR_NAMESPACES": "edge,gateway",
                "ROTATOR_RECONCILE_TIMEOUT_SECONDS": "5.5",
                "ROTATOR_RETRY_DELAY_SECONDS": "2",
                "ROTATOR_MAX_WORKERS": "8",
                "METRICS_PORT": "9090",
                "LOG_LEVEL": "debug",
            }
        )

        assert config.namespaces == ("edge", "gateway")
        assert not config.clusterwide
        assert config.reconcile_timeout == 5.5
        assert config.retry_delay == 2.0
        assert config.max_workers == 8
        assert config.metrics_port == 9090
        assert config.log_level == "DEBUG"

    @patch.dict("os.environ", {"ROTATOR_NAMESPACES": "edge"}, clear=True)
    def test_reads_process_environment(self):
        """Test that os.environ is the default source."""
        assert OperatorConfig.from_env().namespaces == ("edge",)

    @pytest.mark.parametrize(
        "name,value",
        [
            ("ROTATOR_RECONCILE_TIMEOUT_SECONDS", "soon"),
            ("ROTATOR_RECONCILE_TIMEOUT_SECONDS", "0"),
            ("ROTATOR_RETRY_DELAY_SECONDS", "-1"),
            ("ROTATOR_MAX_WORKERS", "2.5"),
            ("METRICS_PORT", "0"),
        ],
    )
    def test_invalid_values(self, name, value):
        """Test that malformed or non-positive numbers are rejected."""
        with pytest.raises(ValueError, match=name):
            OperatorConfig.from_env({name: value})
