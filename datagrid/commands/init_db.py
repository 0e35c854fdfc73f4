import click
from flask.cli import with_appcontext
from datagrid import db


@click.command('init-db')
@with_appcontext
def init_db():
    """Creates the tables of all the registered models."""
    from datagrid import models  # noqa: F401
    click.echo("Creating all tables...")
    db.create_all()
    click.echo("Done.")
