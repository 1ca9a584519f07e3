import typer
from typing_extensions import Annotated

from dotenv import load_dotenv, find_dotenv

load_dotenv(find_dotenv(usecwd=True))

app = typer.Typer(
    help="Faros: GitTrackObject Kubernetes operator",
    add_completion=False,
)


@app.command("operator")
def run_operator():
    """Run the Kubernetes operator (connects to cluster)."""
    from faros.main import main

    main()


@app.command("check-dry-run")
def check_dry_run(
    api_version: Annotated[str, typer.Argument(help="apiVersion, e.g. apps/v1")],
    kind: Annotated[str, typer.Argument(help="Kind, e.g. Deployment")],
):
    """Check whether the cluster supports dry-run for a kind."""
    from kubernetes.config import ConfigException

    from faros.config import load_kube_configuration
    from faros.crd.base import GroupVersionKind
    from faros.errors import FarosError
    from faros.utils.dry_run_verifier import new_dry_run_verifier

    try:
        gvk = GroupVersionKind.from_api_version(api_version, kind)
        verifier = new_dry_run_verifier(load_kube_configuration())
        decision = verifier.decide(gvk)
    except (FarosError, ConfigException, ValueError) as e:
        typer.echo(f"Dry-run check failed: {e}")
        raise typer.Exit(2)

    if decision.supported:
        typer.echo(f"{gvk} supports dry-run ({decision.source.value})")
        return
    typer.echo(f"{gvk} doesn't support dry-run ({decision.source.value})")
    raise typer.Exit(1)


if __name__ == "__main__":
    app()
