"""
Flask CLI commands for database setup.

Commands:
- flask init-db: Create the tables
- flask seed-catalog: Insert the default products and promotion codes
"""

import click
from sqlalchemy.exc import SQLAlchemyError
from webshop import database


def init_cli_commands(app):
    """Register CLI commands with Flask app."""

    @app.cli.command('init-db')
    @click.option('--drop', is_flag=True, help='Drop existing tables first')
    def init_db_command(drop):
        """Create all tables."""
        if drop:
            click.confirm('This deletes every order. Continue?', abort=True)
            database.drop_tables()
            click.echo('Tables dropped.')

        database.create_tables()
        click.echo(click.style('✅ Tables created.', fg='green'))

    @app.cli.command('seed-catalog')
    def seed_catalog_command():
        """Insert the default catalog and promotions (existing rows are kept)."""
        from webshop.services.catalog_service import seed_catalog

        session = database.get_session()
        try:
            inserted = seed_catalog(session)
        except SQLAlchemyError as e:
            session.rollback()
            click.echo(click.style(f'❌ Seeding failed: {e}', fg='red'))
            raise SystemExit(1)

        click.echo(click.style(f'✅ {inserted} rows inserted.', fg='green'))
