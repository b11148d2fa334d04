"""
Flask CLI commands.

Commands:
- flask init-db: Create the database tables
- flask recompute-prices: Re-derive branch prices of automatic inventory items
"""

import click
from huastex.database import db_session, create_all


def init_cli_commands(app):
    """Register CLI commands with Flask app."""
    
    @app.cli.command('init-db')
    def init_db_command():
        """Create every table that does not exist yet."""
        create_all()
        click.echo(click.style('✅ Tablas creadas', fg='green'))
    
    @app.cli.command('recompute-prices')
    @click.option('--dry-run', is_flag=True, help='Compute prices without saving them')
    def recompute_prices(dry_run):
        """Re-derive the 12 branch prices of every item in automatic pricing mode."""
        from huastex.blueprints.metrics import price_recompute_items_total
        from huastex.services.inventory_service import recompute_all_prices
        
        try:
            updated = recompute_all_prices(db_session, commit=not dry_run)
        except Exception as e:
            db_session.rollback()
            click.echo(click.style(f'❌ Error al recalcular precios: {str(e)}', fg='red'))
            raise SystemExit(1)
        
        if dry_run:
            click.echo(f'{updated} producto(s) se recalcularían (sin guardar)')
            return
        
        price_recompute_items_total.inc(updated)
        click.echo(click.style(f'✅ Precios recalculados en {updated} producto(s)', fg='green'))
