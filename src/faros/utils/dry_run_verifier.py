"""Dry-run support detection for the current API server.

Sending dryRun requests to an API server that doesn't support them results in
objects being unwillingly persisted, so support is verified per kind first.

The OpenAPI document is read to see if the given GVK supports dryRun. If the
GVK can not be found, CRDs are assumed to have the same level of support as
"namespaces", and non-CRDs are not supported. The CRD check is delayed as much
as possible since it requires an extra round-trip to the server.
"""

import logging
from enum import Enum
from typing import Protocol

import kubernetes
from kubernetes.dynamic import DynamicClient
from pydantic import BaseModel

from faros.crd.base import GroupKind, GroupVersionKind
from faros.errors import (
    ClientConstructionError,
    CRDLookupError,
    KindNotFoundError,
    SchemaFetchError,
    UnsupportedCapabilityError,
)
from faros.utils.openapi import OpenAPIDocument

logger = logging.getLogger(__name__)

NAMESPACE_GVK = GroupVersionKind(group="", version="v1", kind="Namespace")
CRD_API_VERSION = "apiextensions.k8s.io/v1"


class DryRunSupport(Enum):
    SUPPORTED = "Supported"
    UNSUPPORTED = "Unsupported"
    UNKNOWN = "Unknown"


class DecisionSource(str, Enum):
    """Which tier of the check produced a decision."""

    EXPLICIT_MATCH = "explicit-match"
    NAMESPACE_HEURISTIC = "namespace-heuristic"
    CRD_LOOKUP = "crd-lookup"


class CapabilityDecision(BaseModel):
    gvk: GroupVersionKind
    supported: bool
    source: DecisionSource

    class Config:
        frozen = True


class OpenAPIGetter(Protocol):
    def openapi_schema(self) -> OpenAPIDocument: ...


class Finder(Protocol):
    def has_crd(self, group_kind: GroupKind) -> bool: ...


class OpenAPISchemaSource:
    """Downloads the OpenAPI v2 document from the API server."""

    def __init__(self, api_client):
        self.api_client = api_client

    def openapi_schema(self):
        document = self.api_client.call_api(
            "/openapi/v2",
            "GET",
            header_params={"Accept": "application/json"},
            response_type="object",
            auth_settings=["BearerToken"],
            _return_http_data_only=True,
        )
        return OpenAPIDocument(document)


class CRDFinder:
    """Looks up CustomResourceDefinitions registered on the API server."""

    def __init__(self, dynamic_client):
        self.dynamic_client = dynamic_client

    def get_crds(self):
        """List the group/kind of every registered CRD."""
        resource = self.dynamic_client.resources.get(
            api_version=CRD_API_VERSION, kind="CustomResourceDefinition"
        )
        crds = resource.get()
        return [
            GroupKind(group=item.spec.group, kind=item.spec.names.kind)
            for item in crds.items
        ]

    def has_crd(self, group_kind):
        return group_kind in self.get_crds()


def lookup_support(document, gvk):
    """Read dry-run support for a GVK from the OpenAPI document."""
    try:
        supported = document.supports_dry_run(gvk)
    except KindNotFoundError:
        return DryRunSupport.UNKNOWN
    return DryRunSupport.SUPPORTED if supported else DryRunSupport.UNSUPPORTED


class DryRunVerifier:
    """Verifies if a given group-version-kind supports dry-run."""

    def __init__(self, finder: Finder, openapi_getter: OpenAPIGetter):
        self.finder = finder
        self.openapi_getter = openapi_getter

    def decide(self, gvk: GroupVersionKind) -> CapabilityDecision:
        """Work out dry-run support for a GVK and which check decided it.

        Raises:
            SchemaFetchError: If the OpenAPI document can't be downloaded
            CRDLookupError: If the CRD fallback check fails
        """
        try:
            document = self.openapi_getter.openapi_schema()
        except Exception as e:
            raise SchemaFetchError(f"failed to download openapi: {e}") from e

        support = lookup_support(document, gvk)
        if support is not DryRunSupport.UNKNOWN:
            return CapabilityDecision(
                gvk=gvk,
                supported=support is DryRunSupport.SUPPORTED,
                source=DecisionSource.EXPLICIT_MATCH,
            )

        # Unknown kind, check what the server does for namespaces
        logger.debug(f"{gvk} not found in openapi, checking {NAMESPACE_GVK}")
        if lookup_support(document, NAMESPACE_GVK) is not DryRunSupport.SUPPORTED:
            return CapabilityDecision(
                gvk=gvk, supported=False, source=DecisionSource.NAMESPACE_HEURISTIC
            )

        # Namespaces support dry-run, so only CRDs will
        try:
            has_crd = self.finder.has_crd(gvk.group_kind())
        except Exception as e:
            raise CRDLookupError(f"failed to check CRD: {e}") from e
        return CapabilityDecision(
            gvk=gvk, supported=bool(has_crd), source=DecisionSource.CRD_LOOKUP
        )

    def has_support(self, gvk: GroupVersionKind) -> None:
        """Verify that the given GVK supports dry-run.

        Raises:
            UnsupportedCapabilityError: If it doesn't
        """
        decision = self.decide(gvk)
        if not decision.supported:
            raise UnsupportedCapabilityError(gvk)


def new_dry_run_verifier(configuration=None) -> DryRunVerifier:
    """Construct a DryRunVerifier for the cluster behind a configuration.

    Raises:
        ClientConstructionError: If either client can't be built
    """
    try:
        api_client = kubernetes.client.ApiClient(configuration)
    except Exception as e:
        raise ClientConstructionError(f"error creating API Client: {e}") from e

    try:
        dynamic_client = DynamicClient(api_client)
    except Exception as e:
        raise ClientConstructionError(f"error creating Dynamic Client: {e}") from e

    return DryRunVerifier(
        finder=CRDFinder(dynamic_client),
        openapi_getter=OpenAPISchemaSource(api_client),
    )
