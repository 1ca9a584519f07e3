from __future__ import annotations

import pytest
from kubernetes.client.exceptions import ApiException

from faros.errors import PersistError
from faros.gittrackobject.conditions import ConditionReason
from faros.gittrackobject.status import (
    KubernetesStatusWriter,
    StatusOpts,
    compute_status,
    update_gittrackobject_status,
    update_status,
)
from faros.models.gittrackobject import (
    ConditionStatus,
    ConditionType,
    GitTrackObject,
)
from tests.conftest import FakeStatusWriter, gittrackobject_body


def test_status_opts_default_to_success() -> None:
    opts = StatusOpts()

    assert opts.in_sync_error is None
    assert opts.in_sync_reason == ConditionReason.CHILD_APPLIED_SUCCESS


def test_compute_status_without_error() -> None:
    status = compute_status(StatusOpts())

    assert len(status.conditions) == 1
    cond = status.conditions[0]
    assert cond.type == ConditionType.IN_SYNC
    assert cond.status == ConditionStatus.TRUE
    assert cond.reason == "ChildAppliedSuccess"
    assert cond.message == ""


def test_compute_status_with_error() -> None:
    opts = StatusOpts(
        in_sync_error=ValueError("unable to create child: forbidden"),
        in_sync_reason=ConditionReason.ERROR_CREATING_CHILD,
    )

    cond = compute_status(opts).conditions[0]

    assert cond.status == ConditionStatus.FALSE
    assert cond.reason == "ErrorCreatingChild"
    assert cond.message == "unable to create child: forbidden"


def test_compute_status_is_pure() -> None:
    opts = StatusOpts(in_sync_error=RuntimeError("boom"), in_sync_reason=ConditionReason.ERROR_GETTING_CHILD)

    assert compute_status(opts) == compute_status(opts)


def test_update_gittrackobject_status_handles_none() -> None:
    assert update_gittrackobject_status(None, StatusOpts()) is False


def test_update_status_writes_changed_status(gto: GitTrackObject, status_writer: FakeStatusWriter) -> None:
    updated = update_status(gto, StatusOpts(), status_writer)

    assert updated is True
    assert len(status_writer.updates) == 1
    written = status_writer.updates[0]
    assert written.status.conditions[0].status == ConditionStatus.TRUE
    assert written.status.conditions[0].lastTransitionTime is not None


def test_update_status_only_changes_status(gto: GitTrackObject, status_writer: FakeStatusWriter) -> None:
    update_status(gto, StatusOpts(), status_writer)

    written = status_writer.updates[0]
    assert written is not gto
    assert written.model_dump(exclude={"status"}) == gto.model_dump(exclude={"status"})
    # The caller's object is left untouched
    assert gto.status.conditions == []


def test_update_status_skips_unchanged_status(gto: GitTrackObject, status_writer: FakeStatusWriter) -> None:
    update_status(gto, StatusOpts(), status_writer)
    stored = status_writer.updates[0]

    updated = update_status(stored, StatusOpts(), status_writer)

    assert updated is False
    assert len(status_writer.updates) == 1


def test_update_status_skips_status_read_from_api(status_writer: FakeStatusWriter) -> None:
    body = gittrackobject_body(
        status={
            "conditions": [
                {
                    "type": "InSync",
                    "status": "True",
                    "reason": "ChildAppliedSuccess",
                    "message": "",
                    "lastUpdateTime": "2026-10-01T12:00:00Z",
                    "lastTransitionTime": "2026-10-01T12:00:00Z",
                }
            ]
        }
    )
    gto = GitTrackObject.from_body(body)

    assert update_status(gto, StatusOpts(), status_writer) is False
    assert status_writer.updates == []


def test_update_status_writes_when_condition_flips(status_writer: FakeStatusWriter) -> None:
    body = gittrackobject_body(
        status={
            "conditions": [
                {
                    "type": "InSync",
                    "status": "True",
                    "reason": "ChildAppliedSuccess",
                    "message": "",
                    "lastTransitionTime": "2026-10-01T12:00:00Z",
                }
            ]
        }
    )
    gto = GitTrackObject.from_body(body)
    opts = StatusOpts(in_sync_error=RuntimeError("conflict"), in_sync_reason=ConditionReason.ERROR_UPDATING_CHILD)

    assert update_status(gto, opts, status_writer) is True
    cond = status_writer.updates[0].status.conditions[0]
    assert cond.status == ConditionStatus.FALSE
    assert cond.message == "conflict"


def test_update_status_compares_condition_list_exactly(status_writer: FakeStatusWriter) -> None:
    condition = {
        "type": "InSync",
        "status": "True",
        "reason": "ChildAppliedSuccess",
        "message": "",
    }
    gto = GitTrackObject.from_body(gittrackobject_body(status={"conditions": [condition, condition]}))

    assert update_status(gto, StatusOpts(), status_writer) is True
    assert len(status_writer.updates[0].status.conditions) == 1


def test_update_status_wraps_persist_failure(gto: GitTrackObject) -> None:
    cause = ApiException(status=409, reason="Conflict")
    writer = FakeStatusWriter(error=cause)

    with pytest.raises(PersistError) as exc:
        update_status(gto, StatusOpts(), writer)

    assert exc.value.name == "deployment-nginx"
    assert exc.value.cause is cause
    assert exc.value.__cause__ is cause
    assert "deployment-nginx" in str(exc.value)
    assert len(writer.updates) == 1


class RecordingCustomObjectsApi:
    def __init__(self) -> None:
        self.calls: list[tuple[str, dict]] = []

    def replace_namespaced_custom_object_status(self, **kwargs) -> None:
        self.calls.append(("namespaced", kwargs))

    def replace_cluster_custom_object_status(self, **kwargs) -> None:
        self.calls.append(("cluster", kwargs))


def test_kubernetes_status_writer_namespaced(gto: GitTrackObject) -> None:
    api = RecordingCustomObjectsApi()

    KubernetesStatusWriter(api).update(gto)

    scope, kwargs = api.calls[0]
    assert scope == "namespaced"
    assert kwargs["group"] == "faros.pusher.com"
    assert kwargs["version"] == "v1alpha1"
    assert kwargs["namespace"] == "default"
    assert kwargs["plural"] == "gittrackobjects"
    assert kwargs["name"] == "deployment-nginx"
    assert kwargs["body"]["metadata"]["resourceVersion"] == "42"


def test_kubernetes_status_writer_cluster_scoped() -> None:
    body = gittrackobject_body(kind="ClusterGitTrackObject")
    del body["metadata"]["namespace"]
    gto = GitTrackObject.from_body(body)
    api = RecordingCustomObjectsApi()

    KubernetesStatusWriter(api).update(gto)

    scope, kwargs = api.calls[0]
    assert scope == "cluster"
    assert kwargs["plural"] == "clustergittrackobjects"
    assert "namespace" not in kwargs


READY = {"type": "Ready", "status": "True", "reason": "Available", "message": ""}
IN_SYNC = {"type": "InSync", "status": "True", "reason": "ChildAppliedSuccess", "message": ""}


def test_status_with_null_conditions_reads_as_empty(status_writer: FakeStatusWriter) -> None:
    gto = GitTrackObject.from_body(gittrackobject_body(status={"conditions": None}))

    assert gto.status.conditions == []
    assert update_status(gto, StatusOpts(), status_writer) is True


@pytest.mark.parametrize(
    "stored",
    [[READY, IN_SYNC], [IN_SYNC, READY]],
    ids=["other-first", "in-sync-first"],
)
def test_update_status_replaces_foreign_conditions(stored: list[dict], status_writer: FakeStatusWriter) -> None:
    gto = GitTrackObject.from_body(gittrackobject_body(status={"conditions": stored}))

    assert [c.type for c in gto.status.conditions] == [c["type"] for c in stored]
    assert update_status(gto, StatusOpts(), status_writer) is True

    assert len(status_writer.updates) == 1
    written = status_writer.updates[0].status.conditions
    assert [c.type for c in written] == ["InSync"]
    assert written[0].status == ConditionStatus.TRUE


def test_condition_order_matters() -> None:
    ready_first = GitTrackObject.from_body(gittrackobject_body(status={"conditions": [READY, IN_SYNC]}))
    in_sync_first = GitTrackObject.from_body(gittrackobject_body(status={"conditions": [IN_SYNC, READY]}))

    assert ready_first.status != in_sync_first.status
