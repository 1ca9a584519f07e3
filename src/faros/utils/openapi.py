"""Interpretation of the API server's OpenAPI v2 document."""

import logging

from faros.crd.base import GroupVersionKind
from faros.errors import KindNotFoundError

logger = logging.getLogger(__name__)

GVK_EXTENSION = "x-kubernetes-group-version-kind"
DRY_RUN_PARAMETER = "dryRun"


class OpenAPIDocument:
    """Read-only view over a downloaded OpenAPI v2 document."""

    def __init__(self, document):
        self.document = document or {}

    @property
    def paths(self):
        paths = self.document.get("paths")
        return paths if isinstance(paths, dict) else {}

    def _resolve(self, parameter):
        if not isinstance(parameter, dict):
            return {}
        ref = parameter.get("$ref")
        if not ref:
            return parameter
        prefix = "#/parameters/"
        if not ref.startswith(prefix):
            return {}
        shared = self.document.get("parameters")
        if not isinstance(shared, dict):
            return {}
        resolved = shared.get(ref[len(prefix):])
        return resolved if isinstance(resolved, dict) else {}

    def _accepts(self, parameters, name):
        if not isinstance(parameters, list):
            return False
        return any(self._resolve(p).get("name") == name for p in parameters)

    def find_patch_operations(self, gvk: GroupVersionKind):
        """Yield (path item, patch operation) pairs tagged with the GVK."""
        for path_item in self.paths.values():
            if not isinstance(path_item, dict):
                continue
            operation = path_item.get("patch")
            if not isinstance(operation, dict):
                continue
            tagged = operation.get(GVK_EXTENSION)
            if not isinstance(tagged, dict):
                continue
            if (
                tagged.get("group", "") == gvk.group
                and tagged.get("version") == gvk.version
                and tagged.get("kind") == gvk.kind
            ):
                yield path_item, operation

    def supports_dry_run(self, gvk: GroupVersionKind) -> bool:
        """Report whether the PATCH operation for the GVK accepts dryRun.

        Raises:
            KindNotFoundError: If no PATCH operation is tagged with the GVK
        """
        found = False
        for path_item, operation in self.find_patch_operations(gvk):
            found = True
            if self._accepts(operation.get("parameters"), DRY_RUN_PARAMETER):
                return True
            if self._accepts(path_item.get("parameters"), DRY_RUN_PARAMETER):
                return True
        if not found:
            raise KindNotFoundError(gvk)
        return False
