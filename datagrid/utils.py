# datagrid/utils.py

from flask import current_app
from .exceptions import GridException


def config_value(name, strict=True):
    """
    Reads a grid setting from the application config.

    Args:
        name (str): The config key, e.g. 'GRID_PER_PAGE'.
        strict (bool): Raise when the key is not configured.

    Returns:
        The configured value, or None for a missing key when not strict.
    """
    if name in current_app.config:
        return current_app.config[name]
    if strict:
        raise GridException(f"Grid setting '{name}' is not configured.")
    return None


def is_blank(value):
    """True for None, empty strings and empty containers."""
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ''
    if isinstance(value, (list, tuple, dict, set)):
        return all(is_blank(v) for v in (value.values() if isinstance(value, dict) else value))
    return False
