"""GitTrackObject CRD models."""

from enum import Enum
from typing import List

from pydantic import BaseModel, Field, field_validator

from faros.crd.registry import CRDRegistry
from faros.crd.base import CRDCondition, CRDMetadata, CRDSpec, CRDStatus

GROUP = "faros.pusher.com"
VERSION = "v1alpha1"


class ConditionType(str, Enum):
    """Condition types reported on a GitTrackObject."""

    IN_SYNC = "InSync"


class ConditionStatus(str, Enum):
    TRUE = "True"
    FALSE = "False"
    UNKNOWN = "Unknown"


class GitTrackObjectCondition(CRDCondition):
    """Condition of a GitTrackObject at a certain point."""

    type: str
    status: ConditionStatus


class GitTrackObjectStatus(CRDStatus):
    """Observed state of a GitTrackObject."""

    conditions: List[GitTrackObjectCondition] = Field(default_factory=list)

    @field_validator("conditions", mode="before")
    @classmethod
    def _null_conditions(cls, value):
        return [] if value is None else value


@CRDRegistry.register(GROUP, VERSION, "GitTrackObject", "gittrackobjects")
class GitTrackObjectSpec(CRDSpec):
    """GitTrackObject CRD specification."""

    name: str = Field(..., description="Name of the tracked child object")
    kind: str = Field(..., description="Kind of the tracked child object")
    data: str = Field(
        ..., description="Serialized child object, JSON or YAML, optionally base64"
    )


@CRDRegistry.register(
    GROUP, VERSION, "ClusterGitTrackObject", "clustergittrackobjects", scope="Cluster"
)
class ClusterGitTrackObjectSpec(GitTrackObjectSpec):
    """ClusterGitTrackObject CRD specification."""


class GitTrackObject(BaseModel):
    """A GitTrackObject resource as stored on the API server."""

    apiVersion: str = f"{GROUP}/{VERSION}"
    kind: str = "GitTrackObject"
    metadata: CRDMetadata
    spec: GitTrackObjectSpec
    status: GitTrackObjectStatus = Field(default_factory=GitTrackObjectStatus)

    class Config:
        extra = "allow"

    @property
    def name(self):
        return self.metadata.name

    @property
    def namespace(self):
        return self.metadata.namespace

    @property
    def cluster_scoped(self):
        return self.kind == "ClusterGitTrackObject"

    @classmethod
    def from_body(cls, body):
        """Build a GitTrackObject from a raw API body (dict or kopf Body)."""
        data = dict(body)
        data.setdefault("status", {})
        if data["status"] is None:
            data["status"] = {}
        return cls.model_validate(data)

    def to_body(self):
        """Serialize the object back into an API body."""
        return self.model_dump(mode="json", exclude_none=True)

    def plural(self):
        info = CRDRegistry().get_model_by_kind(self.kind)
        if info is None:
            raise ValueError(f"Unregistered GitTrackObject kind {self.kind!r}")
        return info["plural"]

    def description(self):
        """Short 'Kind namespace/name' string used in log lines."""
        if self.namespace:
            return f"{self.kind} {self.namespace}/{self.name}"
        return f"{self.kind} {self.name}"

