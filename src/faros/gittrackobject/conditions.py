"""Helpers for reading and writing GitTrackObject conditions."""

import datetime
from enum import Enum

from faros.models.gittrackobject import GitTrackObjectCondition


class ConditionReason(str, Enum):
    """Reason codes set on GitTrackObject conditions."""

    CHILD_APPLIED_SUCCESS = "ChildAppliedSuccess"
    ERROR_UNMARSHALLING_DATA = "ErrorUnmarshallingData"
    ERROR_ADDING_OWNER_REFERENCE = "ErrorAddingOwnerReference"
    ERROR_GETTING_CHILD = "ErrorGettingChild"
    ERROR_CREATING_CHILD = "ErrorCreatingChild"
    ERROR_UPDATING_CHILD = "ErrorUpdatingChild"


def new_condition(cond_type, status, reason, message):
    """Create a condition with no transition metadata."""
    return GitTrackObjectCondition(
        type=getattr(cond_type, "value", cond_type),
        status=status,
        reason=getattr(reason, "value", reason),
        message=message,
    )


def get_condition(status, cond_type):
    """Return the condition with the given type, or None."""
    for cond in status.conditions:
        if cond.type == cond_type:
            return cond
    return None


def set_condition(status, condition):
    """Update or append a condition, keyed by its type.

    An existing condition keeps its position in the list. When its status is
    unchanged the original lastTransitionTime is kept.
    """
    for i, current in enumerate(status.conditions):
        if current.type != condition.type:
            continue
        if current.status == condition.status and condition.lastTransitionTime is None:
            condition = condition.model_copy(
                update={"lastTransitionTime": current.lastTransitionTime}
            )
        status.conditions[i] = condition
        return
    status.conditions.append(condition)


def remove_condition(status, cond_type):
    status.conditions = [c for c in status.conditions if c.type != cond_type]


def carry_transition_times(status, previous, now=None):
    """Stamp transition metadata on freshly computed conditions.

    A condition whose status matches the previous condition of the same type
    takes over that condition's timestamps, so an unchanged status compares
    equal to the stored one. Any other condition is stamped with ``now``.
    """
    if now is None:
        now = datetime.datetime.now(datetime.timezone.utc).replace(microsecond=0)

    stamped = []
    for cond in status.conditions:
        prev = get_condition(previous, cond.type)
        if prev is not None and prev.status == cond.status:
            if prev.reason == cond.reason and prev.message == cond.message:
                update_time = prev.lastUpdateTime
            else:
                update_time = now
            update = {
                "lastUpdateTime": update_time,
                "lastTransitionTime": prev.lastTransitionTime,
            }
        else:
            update = {"lastUpdateTime": now, "lastTransitionTime": now}
        stamped.append(cond.model_copy(update=update))
    status.conditions = stamped
