import asyncio
import click
from dashboard_api.core.database import SessionLocal, Base, engine
from dashboard_api.core.errors import GatewayError
from dashboard_api.core.security import mask_secret
from dashboard_api.services.diagnostics_service import DiagnosticsService
from dashboard_api.services.secret_store import SecretStore
import dashboard_api.models  # noqa: F401
import logging

logger = logging.getLogger(__name__)


@click.group()
def cli():
    """Marketing dashboard n8n admin commands"""
    Base.metadata.create_all(bind=engine)


@cli.command("set-config")
@click.option('--user-id', required=True, help='Supabase user id')
@click.option('--api-key', required=True, help='n8n API key')
@click.option('--base-url', required=True, help='n8n base URL')
def set_config(user_id, api_key, base_url):
    """Store n8n credentials for a user"""
    db = SessionLocal()
    try:
        saved = SecretStore().save(db, user_id, api_key, base_url)
        click.echo(f"✓ Saved {', '.join(saved)} for {user_id}")
    except GatewayError as e:
        click.echo(f"❌ {e.message}", err=True)
        raise SystemExit(1)
    finally:
        db.close()


@cli.command("show-config")
@click.option('--user-id', required=True, help='Supabase user id')
def show_config(user_id):
    """Show the effective n8n settings for a user"""
    db = SessionLocal()
    try:
        credentials = SecretStore().resolve(db, user_id)
        click.echo(f"Source:   {credentials.source}")
        click.echo(f"Base URL: {credentials.base_url}")
        click.echo(f"API key:  {mask_secret(credentials.api_key) or '<not configured>'}")
    finally:
        db.close()


@cli.command()
@click.option('--user-id', required=True, help='Supabase user id')
def probe(user_id):
    """Test the n8n connection with a user's stored credentials"""
    db = SessionLocal()
    try:
        credentials = SecretStore().resolve(db, user_id)
    finally:
        db.close()

    status_code, result = asyncio.run(DiagnosticsService().test_connection(credentials))
    if result["success"]:
        click.echo(f"✓ {result['message']} ({result['details']['workflowCount']} workflows)")
        return

    click.echo(f"❌ {result['error']} (HTTP {status_code})", err=True)
    if result.get("troubleshooting"):
        click.echo(f"   {result['troubleshooting']}", err=True)
    raise SystemExit(1)


if __name__ == '__main__':
    cli()
