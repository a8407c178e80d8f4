"""
Disruption-Budget Client — reads and patches one PodDisruptionBudget.

Behavioral Contract:
- Only ever touches spec.maxUnavailable of the named object
- Writes are JSON merge patches; the object is never replaced
- maxUnavailable 0 blocks voluntary evictions, 1 allows them
- The blocking Kubernetes client runs in a worker thread
"""

import asyncio
from typing import Any, Optional

import structlog
from kubernetes import client as k8s_client
from kubernetes import config as k8s_config

log = structlog.get_logger(__name__)

MERGE_PATCH_CONTENT_TYPE = "application/merge-patch+json"
BLOCK_EVICTIONS = 0
ALLOW_EVICTIONS = 1


class BudgetError(Exception):
    """Raised when the disruption budget could not be patched."""
    pass


class ClientSetupError(Exception):
    """Raised when no Kubernetes API client can be constructed."""
    pass


def load_policy_api() -> k8s_client.PolicyV1Api:
    """
    Build a policy/v1 API client.

    Uses the pod's service account when running in-cluster, falling back
    to the local kubeconfig.
    """
    try:
        k8s_config.load_incluster_config()
    except k8s_config.ConfigException:
        try:
            k8s_config.load_kube_config()
        except Exception as exc:
            raise ClientSetupError(
                f"Could not load in-cluster or kubeconfig credentials: {exc}"
            ) from exc
    return k8s_client.PolicyV1Api()


def allowance_for(has_players: bool) -> int:
    """Eviction allowance that reflects the has-players condition."""
    return BLOCK_EVICTIONS if has_players else ALLOW_EVICTIONS


def build_patch(has_players: bool) -> dict:
    return {"spec": {"maxUnavailable": allowance_for(has_players)}}


def _extract_allowance(pdb: Any) -> Optional[int]:
    spec = getattr(pdb, "spec", None)
    value = getattr(spec, "max_unavailable", None)
    # IntOrString: percentages arrive as str and are not an allowance we manage
    if isinstance(value, bool) or not isinstance(value, int):
        return None
    return value


class DisruptionBudgetClient:
    """Namespaced get/merge-patch on a single PodDisruptionBudget."""

    def __init__(self, api: k8s_client.PolicyV1Api, namespace: str, name: str):
        self._api = api
        self.namespace = namespace
        self.name = name

    async def read_allowance(self) -> Optional[int]:
        """
        Current integer maxUnavailable, or None when it cannot be determined.

        A read failure is logged and reported as None, never raised.
        """
        try:
            pdb = await asyncio.to_thread(
                self._api.read_namespaced_pod_disruption_budget,
                self.name,
                self.namespace,
            )
        except Exception as exc:
            log.warning(
                "pdb_read_failed",
                pdb=self.name,
                namespace=self.namespace,
                error=str(exc),
            )
            return None

        allowance = _extract_allowance(pdb)
        if allowance is None:
            log.warning(
                "pdb_allowance_unknown",
                pdb=self.name,
                namespace=self.namespace,
            )
        return allowance

    async def patch_allowance(self, has_players: bool) -> int:
        """Merge-patch maxUnavailable to reflect has_players. Returns the value written."""
        patch = build_patch(has_players)
        try:
            await asyncio.to_thread(
                self._api.patch_namespaced_pod_disruption_budget,
                self.name,
                self.namespace,
                patch,
                _content_type=MERGE_PATCH_CONTENT_TYPE,
            )
        except Exception as exc:
            raise BudgetError(
                f"Failed to patch PodDisruptionBudget {self.namespace}/{self.name}: {exc}"
            ) from exc

        allowance = patch["spec"]["maxUnavailable"]
        log.debug("pdb_patched", pdb=self.name, max_unavailable=allowance)
        return allowance
