"""Base classes for CRD specifications."""

from pydantic import BaseModel, Field
from typing import Optional, Dict, List
from datetime import datetime


class GroupKind(BaseModel):
    """API group and kind, without a version."""

    group: str = ""
    kind: str

    class Config:
        frozen = True

    def __str__(self):
        if not self.group:
            return self.kind
        return f"{self.kind}.{self.group}"


class GroupVersionKind(BaseModel):
    """Identifies a kind within a versioned API group."""

    group: str = ""
    version: str
    kind: str

    class Config:
        frozen = True

    @classmethod
    def from_api_version(cls, api_version, kind):
        """Build a GVK from an apiVersion string such as 'apps/v1' or 'v1'."""
        if not api_version:
            raise ValueError(f"apiVersion is required for kind {kind!r}")
        group, _, version = api_version.rpartition("/")
        return cls(group=group, version=version, kind=kind)

    @property
    def api_version(self):
        if not self.group:
            return self.version
        return f"{self.group}/{self.version}"

    def group_kind(self):
        return GroupKind(group=self.group, kind=self.kind)

    def __str__(self):
        return f"{self.group}/{self.version}, Kind={self.kind}"


class CRDMetadata(BaseModel):
    """Standard Kubernetes metadata for CRDs."""

    name: str
    namespace: Optional[str] = None
    uid: Optional[str] = None
    resourceVersion: Optional[str] = None
    generation: Optional[int] = None
    labels: Dict[str, str] = Field(default_factory=dict)
    annotations: Dict[str, str] = Field(default_factory=dict)

    class Config:
        extra = "allow"


class CRDCondition(BaseModel):
    """Custom Kubernetes condition."""

    type: str
    status: str  # True, False, Unknown
    reason: str
    message: str = ""
    lastUpdateTime: Optional[datetime] = None
    lastTransitionTime: Optional[datetime] = None


class CRDStatus(BaseModel):
    """Base class for all CRD status objects."""

    conditions: List[CRDCondition] = Field(default_factory=list)

    class Config:
        extra = "ignore"


class CRDSpec(BaseModel):
    """Base class for all CRD spec objects."""

    class Config:
        extra = "forbid"
        validate_assignment = True
