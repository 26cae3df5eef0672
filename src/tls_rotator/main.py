"""Main entry point for the TLS Rotator."""

from __future__ import annotations

import logging
from typing import Any

import kopf

from . import handlers  # noqa: F401
from . import health
from . import logging as structured_logging
from .config import OperatorConfig
from .constants import FINALIZER
from .persistence import DigestingDiffBaseStorage
from .tracing import initialize_tracing

logger = logging.getLogger(__name__)


@kopf.on.startup()
def configure(settings: kopf.OperatorSettings, **_: Any) -> None:
    """Configure the operator."""
    config = OperatorConfig.from_env()

    structured_logging.setup_structured_logging(config.log_level)
    initialize_tracing()

    # Progress and diff-base live in annotations, secrets have no status
    settings.persistence.progress_storage = kopf.AnnotationsProgressStorage()
    settings.persistence.diffbase_storage = DigestingDiffBaseStorage()
    # Deletion blocked by the rotator finalizer is what triggers the delete handler
    settings.persistence.finalizer = FINALIZER

    settings.posting.level = logging.WARNING
    settings.networking.request_timeout = config.reconcile_timeout
    settings.execution.max_workers = config.max_workers

    health.start_metrics_server(config.metrics_port)

    if config.clusterwide:
        logger.info("Watching secrets in all namespaces")
    else:
        logger.info(f"Watching secrets in namespaces: {', '.join(config.namespaces)}")


def run() -> None:
    """Run the operator with the namespaces taken from the environment."""
    config = OperatorConfig.from_env()
    kopf.run(
        clusterwide=config.clusterwide,
        namespaces=list(config.namespaces),
        standalone=True,
    )


if __name__ == "__main__":
    run()
