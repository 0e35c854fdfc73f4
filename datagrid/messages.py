from .utils import config_value


MESSAGES = {
    'hide_filter_tooltip': 'Hide filter',
    'show_filter_tooltip': 'Show filter',
    'filter_tooltip': 'Filter',
    'reset_filter_tooltip': 'Reset',
    'all_queries_warning': 'Are you sure you want to display all records?',
    'show_all_records_label': 'show all',
    'show_all_records_tooltip': 'Show all records',
    'switch_back_to_paginated_mode_label': 'back to paginated view',
    'switch_back_to_paginated_mode_tooltip': 'Switch back to the view with pages',
    'export_to_xlsx': 'Export to XLSX',
    'select_all': 'Select all',
    'deselect_all': 'Remove selection',
    'boolean_filter_true_label': 'yes',
    'boolean_filter_false_label': 'no',
    'date_from': 'From',
    'date_to': 'To',
}


def message(key):
    overrides = config_value('GRID_MESSAGES', strict=False) or {}
    if key in overrides:
        return overrides[key]
    return MESSAGES[key]
