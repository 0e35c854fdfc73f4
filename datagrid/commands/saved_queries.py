import click
from flask.cli import with_appcontext
from datagrid import db
from datagrid.models import SavedQuery


@click.group('saved-queries')
def saved_queries():
    """Manage saved grid queries."""
    pass


@saved_queries.command('list')
@click.option('--grid', 'grid_name', default=None, help='Only list the queries of this grid')
@with_appcontext
def list_queries(grid_name):
    """
    Lists saved queries, grouped by grid.
    """
    query = SavedQuery.query
    if grid_name:
        query = query.filter_by(grid_name=grid_name)
    saved = query.order_by(SavedQuery.grid_name, SavedQuery.name).all()

    if not saved:
        click.echo("No saved queries found.")
        return

    for saved_query in saved:
        click.echo(f"{saved_query.id}\t{saved_query.grid_name}\t{saved_query.name}")


@saved_queries.command('delete')
@click.argument('query_id', type=int)
@with_appcontext
def delete_query(query_id):
    """Deletes a saved query by id."""
    saved_query = db.session.get(SavedQuery, query_id)
    if not saved_query:
        click.echo(f"Error: Saved query {query_id} not found.")
        return

    db.session.delete(saved_query)
    db.session.commit()
    click.echo(f"Deleted saved query '{saved_query.name}' of grid '{saved_query.grid_name}'.")
