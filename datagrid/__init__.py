from flask import Flask
from flask_sqlalchemy import SQLAlchemy
from markupsafe import Markup
from sqlalchemy import MetaData


# 1. Create extension instances WITHOUT an app
# They will be "connected" to the app inside the factory

# Define naming convention for SQLAlchemy
convention = {
    "ix": 'ix_%(column_0_label)s',
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s"
}
metadata = MetaData(naming_convention=convention)

db = SQLAlchemy(metadata=metadata)


def _for_template(helper):
    """Templates print what a helper returns; an exported grid prints nothing."""
    def wrapper(*args, **kwargs):
        result = helper(*args, **kwargs)
        if result is None or not hasattr(result, '__html__'):
            return Markup('')
        return Markup(result.__html__())
    wrapper.__name__ = helper.__name__
    wrapper.__doc__ = helper.__doc__
    return wrapper


def register_template_helpers(app):
    """Makes the grid helpers available in Jinja templates."""
    from .helpers import grid, define_grid, render_grid, grid_filter

    app.jinja_env.globals.update(
        grid=_for_template(grid),
        define_grid=_for_template(define_grid),
        render_grid=_for_template(render_grid),
        grid_filter=_for_template(grid_filter),
    )


def create_app(config_class='config.Config'):
    """
    Application Factory Function
    """

    app = Flask(__name__, instance_relative_config=True)

    # Load configuration from the config.py file
    app.config.from_object(config_class)

    db.init_app(app)

    register_template_helpers(app)

    # Register Blueprints
    # Imports are *inside* the factory to avoid circular import issues
    with app.app_context():
        from .saved_queries_routes import saved_queries_bp

        # Import models so SQLAlchemy knows about them
        from . import models

        app.register_blueprint(saved_queries_bp)

    # Register CLI commands
    from .commands.init_db import init_db
    from .commands.saved_queries import saved_queries

    app.cli.add_command(init_db)
    app.cli.add_command(saved_queries)

    return app


from .exceptions import GridException, GridArgumentError  # noqa: E402
from .grids import Grid, initialize_grid  # noqa: E402
from .helpers import (  # noqa: E402
    grid,
    define_grid,
    render_grid,
    grid_filter,
    export_grid_if_requested,
)
