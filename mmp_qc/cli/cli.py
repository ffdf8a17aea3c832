import datetime
from typing import List, Optional

import typer
import yaml
from loguru import logger

from mmp_qc.settings.main import load_settings

app = typer.Typer()


@app.command()
def reconcile(
    ctd_store: str = typer.Argument(..., help="zarr store with imported ctd profiles"),
    eng_store: str = typer.Argument(..., help="zarr store with imported eng profiles"),
    target_dir: str = typer.Option(".", help="where the reconciled stores are written"),
    ad2cp_store: Optional[str] = typer.Option(
        None, help="zarr store with imported ad2cp profiles"
    ),
    config: Optional[str] = typer.Option(None, help="YAML processing configuration"),
    profile: Optional[List[int]] = typer.Option(
        None, help="profile number to process; repeat for several"
    ),
):
    "Flag backtracks, sync ctd and eng masks and void short profiles."
    from mmp_qc.flow import reconcile_stores

    logger.info("Running mask reconciliation!")
    start_time = datetime.datetime.utcnow()
    summary = reconcile_stores(
        ctd_path=ctd_store,
        eng_path=eng_store,
        target_dir=target_dir,
        config_path=config,
        profiles=profile or None,
        ad2cp_path=ad2cp_store,
    )
    time_elapsed = datetime.datetime.utcnow() - start_time
    typer.echo(yaml.safe_dump(summary.model_dump(), sort_keys=False))
    typer.echo(f"Reconciliation finished. Process took {str(time_elapsed)}")


@app.command()
def settings(
    config: Optional[str] = typer.Option(None, help="YAML processing configuration"),
):
    "Print the effective processing settings."
    typer.echo(yaml.safe_dump(load_settings(config).model_dump(), sort_keys=False))


if __name__ == "__main__":
    app()
