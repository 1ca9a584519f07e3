"""GitTrackObject handler applying tracked children using Kopf."""

import logging

import kopf

from faros.errors import ChildApplyError
from faros.gittrackobject.child import decode_child
from faros.gittrackobject.conditions import ConditionReason
from faros.gittrackobject.status import (
    KubernetesStatusWriter,
    StatusOpts,
    update_status,
)
from faros.models.gittrackobject import GROUP, VERSION, GitTrackObject

logger = logging.getLogger(__name__)

RETRY_DELAY = 30


def handle_gittrackobject(gto, applier):
    """Apply the child of a GitTrackObject and describe the outcome.

    Returns:
        StatusOpts: Inputs for the status of the GitTrackObject
    """
    try:
        child = decode_child(gto.spec.data)
        result = applier.apply(gto, child)
    except ChildApplyError as e:
        logger.error(f"Failed to apply child of {gto.description()}: {e}")
        return StatusOpts(in_sync_error=e, in_sync_reason=e.reason)

    logger.info(f"Child of {gto.description()} {result}")
    return StatusOpts()


def reconcile(body, memo, **kwargs):
    gto = GitTrackObject.from_body(body)
    opts = handle_gittrackobject(gto, memo.applier)

    update_status(gto, opts, KubernetesStatusWriter())

    if opts.in_sync_error is not None:
        if opts.in_sync_reason == ConditionReason.ERROR_UNMARSHALLING_DATA:
            # Only a spec change can fix the data
            raise kopf.PermanentError(str(opts.in_sync_error))
        raise kopf.TemporaryError(str(opts.in_sync_error), delay=RETRY_DELAY)


@kopf.on.resume(GROUP, VERSION, "gittrackobjects")
@kopf.on.create(GROUP, VERSION, "gittrackobjects")
@kopf.on.update(GROUP, VERSION, "gittrackobjects")
def reconcile_gittrackobject(body, memo, **kwargs):
    reconcile(body, memo)


@kopf.on.resume(GROUP, VERSION, "clustergittrackobjects")
@kopf.on.create(GROUP, VERSION, "clustergittrackobjects")
@kopf.on.update(GROUP, VERSION, "clustergittrackobjects")
def reconcile_clustergittrackobject(body, memo, **kwargs):
    reconcile(body, memo)
