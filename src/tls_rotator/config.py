"""Operator configuration loaded from environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Mapping

from .constants import (
    ENV_LOG_LEVEL,
    ENV_MAX_WORKERS,
    ENV_METRICS_PORT,
    ENV_NAMESPACES,
    ENV_RECONCILE_TIMEOUT,
    ENV_RETRY_DELAY,
)


def parse_namespaces(value: str | None) -> tuple[str, ...]:
    """Parse a comma separated namespace list.

    Args:
        value: Raw value, e.g. ``"team-a, team-b"``

    Returns:
        Tuple of namespace names, empty when all namespaces should be watched
    """
    if not value:
        return ()
    return tuple(ns.strip() for ns in value.split(",") if ns.strip())


def _positive_float(env: Mapping[str, str], name: str, default: str) -> float:
    raw = env.get(name, default)
    try:
        value = float(raw)
    except ValueError as e:
        raise ValueError(f"{name} must be a number, got {raw!r}") from e
    if value <= 0:
        raise ValueError(f"{name} must be greater than zero, got {raw!r}")
    return value


def _positive_int(env: Mapping[str, str], name: str, default: str) -> int:
    raw = env.get(name, default)
    try:
        value = int(raw)
    except ValueError as e:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from e
    if value <= 0:
        raise ValueError(f"{name} must be greater than zero, got {raw!r}")
    return value


@dataclass(frozen=True)
class OperatorConfig:
    """Runtime configuration of the operator."""

    namespaces: tuple[str, ...] = field(default_factory=tuple)
    reconcile_timeout: float = 30.0
    retry_delay: float = 10.0
    max_workers: int = 4
    metrics_port: int = 8080
    log_level: str = "INFO"

    @property
    def clusterwide(self) -> bool:
        """Whether all namespaces are watched."""
        return not self.namespaces

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None) -> OperatorConfig:
        """Build the configuration from environment variables.

        Args:
            env: Mapping to read from (defaults to ``os.environ``)

        Returns:
            Parsed configuration

        Raises:
            ValueError: If a numeric setting is malformed or not positive
        """
        if env is None:
            env = os.environ

        return cls(
            namespaces=parse_namespaces(env.get(ENV_NAMESPACES)),
            reconcile_timeout=_positive_float(env, ENV_RECONCILE_TIMEOUT, "30"),
            retry_delay=_positive_float(env, ENV_RETRY_DELAY, "10"),
            max_workers=_positive_int(env, ENV_MAX_WORKERS, "4"),
            metrics_port=_positive_int(env, ENV_METRICS_PORT, "8080"),
            log_level=env.get(ENV_LOG_LEVEL, "INFO").upper(),
        )
