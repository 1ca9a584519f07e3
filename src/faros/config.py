"""Environment driven configuration for the faros operator."""

import logging
import os

import kubernetes

logger = logging.getLogger(__name__)


def get_log_level():
    """Logging level name taken from LOG_LEVEL."""
    return os.getenv("LOG_LEVEL", "INFO").upper()


def get_worker_limit():
    return int(os.getenv("WORKER_LIMIT", "5"))


def get_server_timeout():
    return int(os.getenv("SERVER_TIMEOUT", "60"))


def posting_enabled():
    """Determine if kopf should post events for handler logs."""
    return os.getenv("POSTING_ENABLED", "false").lower() == "true"


def dry_run_enabled():
    """Determine if children should be checked with a dry-run request first."""
    return os.getenv("FAROS_DRY_RUN", "true").lower() == "true"


def load_kube_configuration():
    """Load the Kubernetes connection configuration.

    Tries the in-cluster service account first and falls back to the local
    kubeconfig. The loaded configuration also becomes the client default.

    Returns:
        kubernetes.client.Configuration: The loaded configuration
    """
    try:
        kubernetes.config.load_incluster_config()
        logger.info("Loaded in-cluster Kubernetes config")
    except kubernetes.config.ConfigException:
        kubernetes.config.load_kube_config()
        logger.info("Loaded local Kubernetes config")

    return kubernetes.client.Configuration.get_default_copy()
