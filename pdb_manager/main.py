"""
Process entrypoint — wires configuration, clients and the reconciler together.

Exit codes:
  0  shutdown signal received
  1  invalid configuration or no usable Kubernetes client
"""

import asyncio
import os
import sys
from typing import Mapping, Optional

import structlog

from pdb_manager.budget.client import (
    ClientSetupError,
    DisruptionBudgetClient,
    load_policy_api,
)
from pdb_manager.log import configure_logging
from pdb_manager.models.config import AppConfig, ConfigError, log_level_from_env
from pdb_manager.policy.threshold import describe_policy
from pdb_manager.probe.status import OccupancyProber
from pdb_manager.reconciler.loop import PdbReconciler
from pdb_manager.shutdown.signals import ShutdownSignal

log = structlog.get_logger(__name__)


def build_reconciler(config: AppConfig, policy_api=None, prober=None) -> PdbReconciler:
    """Construct the reconciler and its collaborators from configuration."""
    if policy_api is None:
        policy_api = load_policy_api()
    if prober is None:
        prober = OccupancyProber(
            config.server_host,
            config.server_port,
            timeout=config.probe_timeout_seconds,
        )
    budget = DisruptionBudgetClient(policy_api, config.pod_namespace, config.pdb_name)
    return PdbReconciler(
        prober=prober,
        budget=budget,
        policy=config.threshold_policy(),
        config=config.reconciler_config(),
    )


async def run(
    config: AppConfig,
    reconciler: Optional[PdbReconciler] = None,
    shutdown: Optional[ShutdownSignal] = None,
) -> int:
    if reconciler is None:
        reconciler = build_reconciler(config)
    if shutdown is None:
        shutdown = ShutdownSignal()
        shutdown.install()

    log.debug("will_watch_for_minimum", threshold=describe_policy(reconciler.policy))

    await reconciler.seed()
    try:
        await reconciler.run_async(shutdown.event)
    finally:
        shutdown.uninstall()
    return 0


def main(environ: Optional[Mapping[str, str]] = None) -> int:
    if environ is None:
        environ = os.environ
    configure_logging(log_level_from_env(environ))

    try:
        config = AppConfig.from_env(environ)
    except ConfigError as exc:
        log.error("startup_failed", error=str(exc))
        return 1

    log.debug(
        "config_loaded",
        namespace=config.pod_namespace,
        pdb=config.pdb_name,
        server=f"{config.server_host}:{config.server_port}",
        interval=config.update_interval_seconds,
    )

    try:
        return asyncio.run(run(config))
    except ClientSetupError as exc:
        log.error("startup_failed", error=str(exc))
        return 1


if __name__ == "__main__":
    sys.exit(main())
