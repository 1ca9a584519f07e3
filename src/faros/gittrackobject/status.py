"""Status reconciliation for GitTrackObjects.

The status is rebuilt from scratch on every pass and only written back to the
API server when it differs from the stored one, so an unchanged object never
triggers a watch event of its own.
"""

import logging
from typing import Optional, Protocol

import kubernetes

from faros.errors import PersistError
from faros.gittrackobject.conditions import (
    ConditionReason,
    carry_transition_times,
    new_condition,
    set_condition,
)
from faros.models.gittrackobject import (
    GROUP,
    VERSION,
    ConditionStatus,
    ConditionType,
    GitTrackObject,
    GitTrackObjectStatus,
)

logger = logging.getLogger(__name__)


class StatusOpts:
    """Inputs for a single status computation."""

    def __init__(
        self,
        in_sync_error: Optional[Exception] = None,
        in_sync_reason: ConditionReason = ConditionReason.CHILD_APPLIED_SUCCESS,
    ):
        self.in_sync_error = in_sync_error
        self.in_sync_reason = in_sync_reason


class StatusWriter(Protocol):
    def update(self, resource: GitTrackObject) -> None: ...


class KubernetesStatusWriter:
    """Writes GitTrackObject status through the status subresource."""

    def __init__(self, api=None):
        self.api = api or kubernetes.client.CustomObjectsApi()

    def update(self, resource: GitTrackObject) -> None:
        body = resource.to_body()
        plural = resource.plural()
        if resource.cluster_scoped:
            self.api.replace_cluster_custom_object_status(
                group=GROUP,
                version=VERSION,
                plural=plural,
                name=resource.name,
                body=body,
            )
        else:
            self.api.replace_namespaced_custom_object_status(
                group=GROUP,
                version=VERSION,
                namespace=resource.namespace,
                plural=plural,
                name=resource.name,
                body=body,
            )


def compute_status(opts: StatusOpts) -> GitTrackObjectStatus:
    """Build a fresh status holding a single InSync condition."""
    status = GitTrackObjectStatus()
    set_in_sync_condition(status, opts.in_sync_error, opts.in_sync_reason)
    return status


def set_in_sync_condition(status, cond_err, reason):
    if cond_err is not None:
        # Error for condition, set condition appropriately
        cond = new_condition(
            ConditionType.IN_SYNC,
            ConditionStatus.FALSE,
            reason,
            str(cond_err),
        )
        set_condition(status, cond)
        return

    cond = new_condition(ConditionType.IN_SYNC, ConditionStatus.TRUE, reason, "")
    set_condition(status, cond)


def update_gittrackobject_status(gto: Optional[GitTrackObject], opts: StatusOpts) -> bool:
    """Update the GitTrackObject's status field if any condition has changed.

    Returns:
        bool: True if the status was replaced
    """
    if gto is None:
        return False

    status = compute_status(opts)
    carry_transition_times(status, gto.status)

    if gto.status != status:
        gto.status = status
        return True
    return False


def update_status(original: GitTrackObject, opts: StatusOpts, writer: StatusWriter) -> bool:
    """Calculate a new status and write it to the API if it differs.

    Args:
        original: The GitTrackObject as last read; it is never modified
        opts: Inputs for the InSync condition
        writer: Collaborator that persists the updated object

    Returns:
        bool: True if an update was sent to the API

    Raises:
        PersistError: If the write fails
    """
    gto = original.model_copy(deep=True)
    if not update_gittrackobject_status(gto, opts):
        return False

    logger.info(f"Updating GitTrackObject {gto.name} status")
    try:
        writer.update(gto)
    except Exception as e:
        raise PersistError(gto.name, e) from e
    return True
