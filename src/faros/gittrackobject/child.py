"""Decoding and applying the child object tracked by a GitTrackObject."""

import base64
import binascii
import logging

import yaml
from kubernetes.client.exceptions import ApiException

from faros.crd.base import GroupVersionKind
from faros.errors import ChildApplyError, FarosError, UnsupportedCapabilityError
from faros.gittrackobject.conditions import ConditionReason

logger = logging.getLogger(__name__)

DRY_RUN_ALL = "All"


def decode_child(data):
    """Parse the serialized child object held in a GitTrackObject spec.

    The data may be JSON or YAML, either plain or base64 encoded.

    Raises:
        ChildApplyError: If the data isn't a Kubernetes object
    """
    text = data
    try:
        text = base64.b64decode(data, validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError, ValueError):
        pass

    try:
        child = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ChildApplyError(
            ConditionReason.ERROR_UNMARSHALLING_DATA, f"unable to unmarshal data: {e}"
        ) from e

    if not isinstance(child, dict):
        raise ChildApplyError(
            ConditionReason.ERROR_UNMARSHALLING_DATA,
            "unable to unmarshal data: not an object",
        )
    for field in ("apiVersion", "kind"):
        if not child.get(field):
            raise ChildApplyError(
                ConditionReason.ERROR_UNMARSHALLING_DATA,
                f"unable to unmarshal data: missing {field}",
            )
    if not (child.get("metadata") or {}).get("name"):
        raise ChildApplyError(
            ConditionReason.ERROR_UNMARSHALLING_DATA,
            "unable to unmarshal data: missing metadata.name",
        )
    return child


def owner_reference(gto):
    return {
        "apiVersion": gto.apiVersion,
        "kind": gto.kind,
        "name": gto.name,
        "uid": gto.metadata.uid,
        "controller": True,
        "blockOwnerDeletion": True,
    }


def add_owner_reference(child, gto, namespaced):
    """Make the GitTrackObject the controller of the child.

    Raises:
        ChildApplyError: If the child can't be owned by the GitTrackObject
    """
    if gto.namespace and not namespaced:
        raise ChildApplyError(
            ConditionReason.ERROR_ADDING_OWNER_REFERENCE,
            f"namespaced {gto.kind} {gto.name} cannot own cluster scoped "
            f"{child['kind']} {child['metadata']['name']}",
        )
    if gto.namespace and child["metadata"].get("namespace", gto.namespace) != gto.namespace:
        raise ChildApplyError(
            ConditionReason.ERROR_ADDING_OWNER_REFERENCE,
            f"{gto.kind} {gto.name} cannot own {child['kind']} "
            f"{child['metadata']['name']} in namespace {child['metadata']['namespace']}",
        )
    if not gto.metadata.uid:
        return

    refs = [
        ref
        for ref in child["metadata"].get("ownerReferences", [])
        if ref.get("uid") != gto.metadata.uid
    ]
    refs.append(owner_reference(gto))
    child["metadata"]["ownerReferences"] = refs


class ChildApplier:
    """Creates or replaces child objects through the dynamic client."""

    def __init__(self, dynamic_client, verifier=None):
        self.dynamic_client = dynamic_client
        self.verifier = verifier

    def dry_run_supported(self, gvk):
        if self.verifier is None:
            return False
        try:
            self.verifier.has_support(gvk)
        except UnsupportedCapabilityError as e:
            logger.info(f"Skipping dry-run: {e}")
            return False
        except FarosError as e:
            logger.warning(f"Could not verify dry-run support for {gvk}: {e}")
            return False
        return True

    def apply(self, gto, child):
        """Apply the child of a GitTrackObject.

        Returns:
            str: 'created' or 'updated'

        Raises:
            ChildApplyError: If any step fails, carrying the condition reason
        """
        gvk = GroupVersionKind.from_api_version(child["apiVersion"], child["kind"])
        name = child["metadata"]["name"]

        try:
            resource = self.dynamic_client.resources.get(
                api_version=gvk.api_version, kind=gvk.kind
            )
        except Exception as e:
            raise ChildApplyError(
                ConditionReason.ERROR_GETTING_CHILD,
                f"unable to find resource for {gvk}: {e}",
            ) from e

        namespace = None
        if resource.namespaced:
            namespace = child["metadata"].get("namespace") or gto.namespace
            child["metadata"]["namespace"] = namespace
        add_owner_reference(child, gto, resource.namespaced)

        try:
            existing = self.dynamic_client.get(resource, name=name, namespace=namespace)
        except ApiException as e:
            if e.status != 404:
                raise ChildApplyError(
                    ConditionReason.ERROR_GETTING_CHILD,
                    f"unable to get child: {e}",
                ) from e
            existing = None

        dry_run = self.dry_run_supported(gvk)

        if existing is None:
            try:
                if dry_run:
                    self.dynamic_client.create(
                        resource, body=child, namespace=namespace, dry_run=DRY_RUN_ALL
                    )
                self.dynamic_client.create(resource, body=child, namespace=namespace)
            except ApiException as e:
                raise ChildApplyError(
                    ConditionReason.ERROR_CREATING_CHILD,
                    f"unable to create child: {e}",
                ) from e
            logger.info(f"Created child {gvk.kind} {name}")
            return "created"

        child["metadata"]["resourceVersion"] = existing.metadata.resourceVersion
        try:
            if dry_run:
                self.dynamic_client.replace(
                    resource, body=child, namespace=namespace, dry_run=DRY_RUN_ALL
                )
            self.dynamic_client.replace(resource, body=child, namespace=namespace)
        except ApiException as e:
            raise ChildApplyError(
                ConditionReason.ERROR_UPDATING_CHILD,
                f"unable to update child: {e}",
            ) from e
        logger.info(f"Updated child {gvk.kind} {name}")
        return "updated"
