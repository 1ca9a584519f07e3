"""Errors raised by the faros reconciliation and capability checks."""


class FarosError(Exception):
    """Base class for all faros errors."""


class SchemaFetchError(FarosError):
    """The OpenAPI schema could not be downloaded from the API server."""


class CRDLookupError(FarosError):
    """Listing CustomResourceDefinitions on the API server failed."""


class ClientConstructionError(FarosError):
    """A Kubernetes client could not be built from the given configuration."""


class KindNotFoundError(FarosError):
    """The OpenAPI schema does not describe the requested kind."""

    def __init__(self, gvk):
        self.gvk = gvk
        super().__init__(f"couldn't find {gvk} in openapi")


class UnsupportedCapabilityError(FarosError):
    """The API server does not support dry-run for the given kind."""

    def __init__(self, gvk):
        self.gvk = gvk
        super().__init__(f"{gvk} doesn't support dry-run")


class PersistError(FarosError):
    """Writing a resource back to the API server failed."""

    def __init__(self, name, cause):
        self.name = name
        self.cause = cause
        super().__init__(f"unable to update GitTrackObject {name}: {cause}")


class ChildApplyError(FarosError):
    """Applying the child object of a GitTrackObject failed."""

    def __init__(self, reason, message):
        self.reason = reason
        super().__init__(message)
