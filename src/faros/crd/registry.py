"""CRD Registry system for automatic CRD discovery."""

import importlib
import pkgutil
import logging

from .base import GroupVersionKind

logger = logging.getLogger(__name__)


class CRDRegistry:
    """Global registry for CRD models with auto-discovery."""

    _instance = None
    _initialised = False

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._models = {}
            cls._instance._initialised = False
        return cls._instance

    def __init__(self):
        if not self._initialised:
            self._models = {}
            self._initialised = True

    @classmethod
    def register(cls, group, version, kind, plural=None, scope="Namespaced"):
        """Decorator to register CRD models.

        Args:
            group: API group (e.g., 'faros.pusher.com')
            version: API version (e.g., 'v1alpha1')
            kind: Kind name (e.g., 'GitTrackObject')
            plural: Plural name (defaults to kind.lower() + 's')
            scope: 'Namespaced' or 'Cluster'
        """

        def decorator(model_class):
            if not hasattr(model_class, "__annotations__"):
                raise ValueError(
                    f"CRD model {model_class.__name__} must have type annotations"
                )

            gvk = GroupVersionKind(group=group, version=version, kind=kind)
            model_class._crd_gvk = gvk
            model_class._crd_plural = plural or f"{kind.lower()}s"
            model_class._crd_scope = scope

            registry_instance = cls()
            registry_instance._models[str(gvk)] = {
                "model": model_class,
                "gvk": gvk,
                "plural": model_class._crd_plural,
                "scope": scope,
            }

            logger.debug(f"Registered CRD: {gvk}")
            return model_class

        return decorator

    def discover_models(self, package_paths=None):
        """Import model packages so their decorators run.

        Args:
            package_paths: List of package paths to search (e.g., ['faros.models'])
        """
        if package_paths is None:
            package_paths = ["faros.models"]

        for package_path in package_paths:
            try:
                package = importlib.import_module(package_path)
            except ImportError as e:
                logger.warning(f"Could not discover models in {package_path}: {e}")
                continue

            if hasattr(package, "__path__"):
                for _, module_name, _ in pkgutil.iter_modules(package.__path__):
                    full_module_name = f"{package_path}.{module_name}"
                    importlib.import_module(full_module_name)
                    logger.debug(f"Discovered models in {full_module_name}")

    def get_all_models(self):
        """Get all registered CRD models."""
        return self._models.copy()

    def get_model(self, gvk):
        """Get a specific CRD model entry by its GVK."""
        return self._models.get(str(gvk))

    def get_model_by_kind(self, kind):
        """Get the first registered CRD model entry with the given kind."""
        for model_info in self._models.values():
            if model_info["gvk"].kind == kind:
                return model_info
        return None
