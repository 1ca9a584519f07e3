import kopf
import kubernetes
import logging
from kubernetes.dynamic import DynamicClient

from faros import config
from faros.crd.registry import CRDRegistry
from faros.errors import ClientConstructionError
from faros.gittrackobject.child import ChildApplier
from faros.models.gittrackobject import GROUP
from faros.utils.dry_run_verifier import new_dry_run_verifier

logging.basicConfig(
    level=getattr(logging, config.get_log_level()),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Register handlers with kopf
from faros import handlers  # noqa: E402,F401


def build_applier(configuration):
    """Build the child applier, with a dry-run verifier when enabled."""
    api_client = kubernetes.client.ApiClient(configuration)
    dynamic_client = DynamicClient(api_client)

    verifier = None
    if config.dry_run_enabled():
        try:
            verifier = new_dry_run_verifier(configuration)
        except ClientConstructionError as e:
            logger.warning(f"Dry-run checks disabled: {e}")
    else:
        logger.info("Dry-run checks disabled by FAROS_DRY_RUN")

    return ChildApplier(dynamic_client, verifier)


@kopf.on.startup()
def startup_fn(settings: kopf.OperatorSettings, memo: kopf.Memo, **kwargs):
    """Configure the operator and its Kubernetes clients."""
    logger.info("Faros Operator is starting up...")

    configuration = config.load_kube_configuration()

    registry = CRDRegistry()
    registry.discover_models()
    logger.info(f"Registered CRDs: {list(registry.get_all_models().keys())}")

    memo.applier = build_applier(configuration)

    # Keep kopf's own state out of .status, which is rebuilt on every pass
    settings.persistence.progress_storage = kopf.AnnotationsProgressStorage(
        prefix=GROUP
    )
    settings.persistence.diffbase_storage = kopf.AnnotationsDiffBaseStorage(
        prefix=GROUP
    )
    settings.batching.worker_limit = config.get_worker_limit()
    settings.posting.enabled = config.posting_enabled()
    settings.watching.server_timeout = config.get_server_timeout()

    logger.info(f"Worker limit: {settings.batching.worker_limit}")
    logger.info(f"Posting enabled: {settings.posting.enabled}")
    logger.info("Faros Operator startup complete")


@kopf.on.cleanup()
def cleanup_fn(memo: kopf.Memo, **kwargs):
    """Cleanup operator resources."""
    logger.info("Faros Operator is shutting down...")
    memo.applier = None
    logger.info("Faros Operator shutdown complete")


def main():
    try:
        kopf.run(clusterwide=True)
    except KeyboardInterrupt:
        logger.info("Operator stopped by user")
    except Exception as e:
        logger.error(f"Operator failed: {e}")
        raise


if __name__ == "__main__":
    main()
