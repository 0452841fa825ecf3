"""
CLI Commands for webhook health.

    flask webhooks health --shop acme                    # Subscription health per topic
    flask webhooks events --shop acme --failed           # Recent failed deliveries
    flask webhooks events --shop acme --topic returns/update --limit 50
"""

import click
from flask.cli import with_appcontext

from ..services.webhook_health import WebhookHealthService
from ..utils.exceptions import TenantNotFoundError
from ..webhooks.delivery import resolve_tenant


@click.group('webhooks')
def webhooks_cli():
    """Shopify webhook commands."""
    pass


def _tenant_or_exit(shop):
    try:
        return resolve_tenant(shop)
    except TenantNotFoundError:
        raise click.ClickException(f"No organization found for shop {shop}")


@webhooks_cli.command('health')
@click.option('--shop', required=True, help='Shop domain or slug (acme, acme.myshopify.com)')
@with_appcontext
def webhook_health(shop):
    """Show subscription health for every required topic."""
    tenant = _tenant_or_exit(shop)
    click.echo(f"Webhook health for {tenant.shopify_domain}")

    for entry in WebhookHealthService(tenant.id).list_health():
        click.echo(f"\n  {entry['topic']}")
        click.echo(f"    Status: {entry['status']}")
        click.echo(f"    Test status: {entry['test_status']}")
        click.echo(f"    Last triggered: {entry['last_triggered_at'] or 'never'}")
        click.echo(f"    Deliveries logged: {entry['delivery_count']}")
        if entry['is_registered'] and not entry['has_received_data']:
            click.echo("    Warning: registered but no deliveries received yet")


@webhooks_cli.command('events')
@click.option('--shop', required=True, help='Shop domain or slug')
@click.option('--topic', help='Only this topic (e.g. orders/cancelled)')
@click.option('--limit', type=int, default=20, help='Number of events (default: 20)')
@click.option('--failed', is_flag=True, help='Only failed deliveries')
@with_appcontext
def webhook_events(shop, topic, limit, failed):
    """List recent webhook deliveries, newest first."""
    tenant = _tenant_or_exit(shop)
    events = WebhookHealthService(tenant.id).recent_events(topic=topic, limit=limit, failed_only=failed)

    if not events:
        click.echo("No webhook events found")
        return

    for event in events:
        outcome = 'ok' if event.success else f'FAILED: {event.error_message}'
        click.echo(f"{event.created_at.isoformat()}  {event.topic:<18} {outcome}")


def init_app(app):
    app.cli.add_command(webhooks_cli)
