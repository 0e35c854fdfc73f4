"""
GridRenderer is what the column-declaring callable receives.

    def task_columns(g):
        g.caption('Open tasks')

        g.column(name='Title', attribute='title')

        @g.column(name='Project', attribute='name', model=Project)
        def project(task):
            return task.project.name

        g.action_column(param_name='selected')
"""
from urllib.parse import urlencode

from flask import request
from markupsafe import Markup

from .columns import ActionColumn, ViewColumn
from .messages import message
from .tags import content_tag

MODES = ('in_html', 'in_xlsx')


class GridRenderer:
    """Collects the column declarations and row handlers of one grid."""
    def __init__(self, grid):
        self.grid = grid
        self.columns = []
        self.kaption = None
        self.blank_slate_handler = None
        self.before_row_handler = None
        self.after_row_handler = None
        self.replace_row_handler = None
        self.last_row_handler = None
        self.row_attributes_handler = None
        grid.reset_columns()

    # Declarations

    def column(self, block=None, **options):
        """
        Declares a column, see ViewColumn for the options.

        Without a block it can be used as a decorator; the decorated
        function becomes the cell block.
        """
        if block is None and not self._displays_without_block(options):
            def decorator(fn):
                self._add_column(ViewColumn(self.grid, block=fn, **options))
                return fn
            return decorator
        return self._add_column(ViewColumn(self.grid, block=block, **options))

    def _displays_without_block(self, options):
        attribute = options.get('attribute')
        if attribute is None:
            return False
        if isinstance(attribute, str):
            return (options.get('model') or self.grid.model) is self.grid.model
        return getattr(attribute, 'class_', None) is self.grid.model

    def action_column(self, **options):
        return self._add_column(ActionColumn(self.grid, **options))

    def _add_column(self, column):
        self.columns.append(column)
        self.grid.register_column(column)
        return column

    def caption(self, text):
        self.kaption = text

    def blank_slate(self, handler=None, **template):
        """
        Content shown instead of the grid when there are no records and no
        filter is active: a callable, a string, or template options as
        accepted by render_template (template='...', plus context).
        """
        self.blank_slate_handler = template if handler is None else handler

    def before_row(self, fn):
        self.before_row_handler = fn
        return fn

    def after_row(self, fn):
        self.after_row_handler = fn
        return fn

    def replace_row(self, fn):
        self.replace_row_handler = fn
        return fn

    def last_row(self, fn):
        self.last_row_handler = fn
        return fn

    def row_attributes(self, fn):
        self.row_attributes_handler = fn
        return fn

    # Column queries

    def _check_mode(self, mode):
        if mode not in MODES:
            raise ValueError(f"Unknown mode '{mode}', expected one of {MODES}")

    def columns_for(self, mode):
        self._check_mode(mode)
        return [column for column in self.columns if getattr(column, mode)]

    def each_column(self, mode):
        return iter(self.columns_for(mode))

    def each_column_aware_of_one_last_one(self, mode):
        columns = self.columns_for(mode)
        for index, column in enumerate(columns):
            yield column, index == len(columns) - 1

    def number_of_columns(self, mode):
        return len(self.columns_for(mode))

    @property
    def last_column_for_html(self):
        columns = self.columns_for('in_html')
        return columns[-1] if columns else None

    def find_one_for(self, mode, predicate):
        for column in self.columns_for(mode):
            if predicate(column):
                return column
        return None

    def select_for(self, mode, predicate):
        return [column for column in self.columns_for(mode) if predicate(column)]

    def no_filter_needed(self):
        return not any(column.filter_shown() for column in self.columns_for('in_html'))

    def no_filter_needed_in_main_table(self):
        return not any(column.filter_shown() and not column.detach_with_id
                       for column in self.columns_for('in_html'))

    def column_labels(self, mode):
        return [column.name or '' for column in self.columns_for(mode)]

    def get_row_attributes(self, record):
        if self.row_attributes_handler is None:
            return {}
        attributes = self.row_attributes_handler(record)
        return dict(attributes) if attributes else {}

    # Panels and links

    def pagination_panel(self, number_of_columns, hide_xlsx_button, content_fn):
        panel = content_fn()
        render_export_button = self.grid.export_to_xlsx_enabled and not hide_xlsx_button
        if not panel:
            if render_export_button:
                return Markup(f'<tr><td colspan="{number_of_columns}"></td><td>{self.export_xlsx_button()}</td></tr>')
            return Markup('')
        if render_export_button:
            return Markup(f'<tr><td colspan="{number_of_columns}">{panel}</td><td>{self.export_xlsx_button()}</td></tr>')
        return Markup(f'<tr><td colspan="{number_of_columns + 1}">{panel}</td></tr>')

    def export_xlsx_button(self):
        return content_tag('button', content_tag('i', '', {'class': 'fa fa-file-excel-o'}), {
            'type': 'button',
            'title': message('export_to_xlsx'),
            'class': 'wg-external-xlsx-button btn btn-default btn-xs',
            'data-grid-name': self.grid.name,
        })

    def _grid_params(self, params, extra_parameters, drop=()):
        """Request params with the given keys of this grid dropped and the extras added."""
        dropped = tuple(f'{self.grid.name}[{key}]' for key in drop)
        pairs = [(key, value) for key, value in params.items(multi=True)
                 if not any(key == d or key.startswith(d + '[') for d in dropped)]
        if extra_parameters:
            extra_keys = set(extra_parameters)
            pairs = [(key, value) for key, value in pairs if key not in extra_keys]
            pairs.extend(extra_parameters.items())
        return pairs

    def _url(self, pairs):
        query_string = urlencode(pairs)
        return f'{request.path}?{query_string}' if query_string else request.path

    def column_link(self, column, direction, params, extra_parameters=None):
        pairs = self._grid_params(params, extra_parameters, drop=('order', 'order_direction', 'page'))
        pairs.append((f'{self.grid.name}[order]', column.fully_qualified_attribute_name))
        pairs.append((f'{self.grid.name}[order_direction]', direction))
        return self._url(pairs)

    def base_link_for_filter(self, extra_parameters=None):
        """
        Returns the links the client script builds filter requests from:
        without and with the show-all-records parameter.
        """
        pairs = self._grid_params(request.args, extra_parameters, drop=('page', 'f', 'foc', 'q'))
        base_link_with_pp_info = self._url(pairs)
        pp_name = f'{self.grid.name}[pp]'
        base_link_without_pp_info = self._url([(key, value) for key, value in pairs if key != pp_name])
        return base_link_without_pp_info, base_link_with_pp_info

    def link_for_export(self, format, extra_parameters=None):
        pairs = self._grid_params(request.args, extra_parameters, drop=('page', 'export'))
        pairs.append((f'{self.grid.name}[export]', format))
        return self._url(pairs)
