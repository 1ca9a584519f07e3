from __future__ import annotations

from typing import Any

import pytest

from faros.crd.base import GroupKind
from faros.models.gittrackobject import GitTrackObject
from faros.utils.openapi import OpenAPIDocument

DRY_RUN_REF = {"$ref": "#/parameters/dryRun-gyRd3Nt3"}
BODY_PARAM = {"name": "body", "in": "body", "required": True}


def patch_operation(group: str, version: str, kind: str, dry_run: bool) -> dict[str, Any]:
    parameters = [BODY_PARAM]
    if dry_run:
        parameters.append(DRY_RUN_REF)
    return {
        "patch": {
            "parameters": parameters,
            "x-kubernetes-action": "patch",
            "x-kubernetes-group-version-kind": {
                "group": group,
                "version": version,
                "kind": kind,
            },
        }
    }


def openapi_document(namespace_dry_run: bool = True, deployment_dry_run: bool = False) -> dict[str, Any]:
    return {
        "swagger": "2.0",
        "parameters": {
            "dryRun-gyRd3Nt3": {"name": "dryRun", "in": "query", "type": "string"},
        },
        "paths": {
            "/api/v1/namespaces/{name}": patch_operation("", "v1", "Namespace", namespace_dry_run),
            "/apis/apps/v1/namespaces/{namespace}/deployments/{name}": patch_operation(
                "apps", "v1", "Deployment", deployment_dry_run
            ),
            "/api/v1/namespaces/{namespace}/configmaps/{name}": patch_operation(
                "", "v1", "ConfigMap", True
            ),
            "/version/": {"get": {"operationId": "getCodeVersion"}},
        },
    }


class FakeOpenAPIGetter:
    def __init__(self, document: dict[str, Any] | None = None, error: Exception | None = None) -> None:
        self.document = document
        self.error = error
        self.calls = 0

    def openapi_schema(self) -> OpenAPIDocument:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return OpenAPIDocument(self.document)


class FakeFinder:
    def __init__(self, result: bool = True, error: Exception | None = None) -> None:
        self.result = result
        self.error = error
        self.calls: list[GroupKind] = []

    def has_crd(self, group_kind: GroupKind) -> bool:
        self.calls.append(group_kind)
        if self.error is not None:
            raise self.error
        return self.result


class FakeStatusWriter:
    def __init__(self, error: Exception | None = None) -> None:
        self.error = error
        self.updates: list[GitTrackObject] = []

    def update(self, resource: GitTrackObject) -> None:
        self.updates.append(resource)
        if self.error is not None:
            raise self.error


def gittrackobject_body(status: dict[str, Any] | None = None, **overrides: Any) -> dict[str, Any]:
    body: dict[str, Any] = {
        "apiVersion": "faros.pusher.com/v1alpha1",
        "kind": "GitTrackObject",
        "metadata": {
            "name": "deployment-nginx",
            "namespace": "default",
            "uid": "6f1c2a4e-0000-4000-8000-000000000001",
            "resourceVersion": "42",
            "labels": {"faros.pusher.com/owned-by": "example"},
        },
        "spec": {
            "name": "nginx",
            "kind": "Deployment",
            "data": '{"apiVersion": "apps/v1", "kind": "Deployment", "metadata": {"name": "nginx"}}',
        },
    }
    if status is not None:
        body["status"] = status
    body.update(overrides)
    return body


@pytest.fixture
def gto() -> GitTrackObject:
    return GitTrackObject.from_body(gittrackobject_body())


@pytest.fixture
def status_writer() -> FakeStatusWriter:
    return FakeStatusWriter()
