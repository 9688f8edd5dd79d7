"""CLI tools for maintenance administration."""

import asyncio

import click

from maintenance_engine.core.config import settings
from maintenance_engine.core.structured_logging import configure_logging
from maintenance_engine.db.session import create_engine, create_session_factory, init_db
from maintenance_engine.repositories.sql import SqlVendorRepository, SqlWorkOrderRepository
from maintenance_engine.services.errors import Err
from maintenance_engine.services.event_bus import InMemoryEventBus
from maintenance_engine.services.maintenance_service import MaintenanceService
from maintenance_engine.types import TenantId


@click.group()
@click.option("--database-url", default=None, help="Override DATABASE_URL")
@click.pass_context
def cli(ctx: click.Context, database_url: str | None):
    """Maintenance engine CLI tools."""
    configure_logging(settings.LOG_LEVEL)
    ctx.ensure_object(dict)
    ctx.obj["database_url"] = database_url


@cli.command("init-db")
@click.pass_context
def init_db_command(ctx: click.Context):
    """
    Create the maintenance tables.

    Example:
        python -m maintenance_engine.cli init-db
    """

    async def _run() -> None:
        engine = create_engine(url=ctx.obj["database_url"])
        try:
            await init_db(engine)
        finally:
            await engine.dispose()

    try:
        asyncio.run(_run())
    except Exception as e:
        click.echo(f"❌ Error: {e}")
        raise SystemExit(1)
    click.echo("✓ Maintenance tables ready")


@cli.command("sla-sweep")
@click.option("--tenant-id", required=True, help="Tenant to sweep")
@click.pass_context
def sla_sweep(ctx: click.Context, tenant_id: str):
    """
    Flag newly breached SLA deadlines for one tenant.

    Intended to be run by an external scheduler (cron, k8s CronJob).

    Example:
        python -m maintenance_engine.cli sla-sweep --tenant-id acme
    """

    async def _run():
        engine = create_engine(url=ctx.obj["database_url"])
        try:
            session_factory = create_session_factory(engine)
            service = MaintenanceService(
                SqlWorkOrderRepository(session_factory),
                SqlVendorRepository(session_factory),
                InMemoryEventBus(),
            )
            return await service.check_sla_breaches(TenantId(tenant_id))
        finally:
            await engine.dispose()

    try:
        result = asyncio.run(_run())
    except Exception as e:
        click.echo(f"❌ Error: {e}")
        raise SystemExit(1)

    if isinstance(result, Err):
        click.echo(f"❌ {result.code.value}: {result.error.message}")
        raise SystemExit(1)
    sweep = result.value
    click.echo(f"✓ Scanned {sweep.scanned} open work order(s)")
    click.echo(f"  Breached: {sweep.breached_work_orders}")
    click.echo(f"  Events published: {sweep.events_published}")


if __name__ == "__main__":
    cli()
