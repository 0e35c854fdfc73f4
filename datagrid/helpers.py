"""
View helpers rendering a Grid.

    tasks_grid = initialize_grid(Task.query, name='tasks', per_page=20,
                                 enable_export_to_xlsx=True)

    def task_columns(g):
        g.column(name='Title', attribute='title')
        g.column(name='Done', attribute='done', html={'class': 'done'})

        @g.column(name='Project', attribute='name', model=Project)
        def project(task):
            return task.project.name

    html = grid(tasks_grid, task_columns, html={'id': 'tasks'}, show_filters='when_filtered')

Options accepted by grid and define_grid:

* html - HTML attributes of the table tag.
* class - shortcut for html={'class': ...}.
* header_tr_html - HTML attributes of the title row (and of the filter row).
* show_filters - 'when_filtered', 'always' (or True), 'no' (or False).
* upper_pagination_panel - an extra pagination panel above the table.
* extra_request_parameters - parameters added to every link of the grid.
* sorting_dependant_row_cycling - odd/even row classes change only when the
  value of the ordered column changes.
* allow_showing_all_records - allow the "show all" mode.
* hide_reset_button, hide_submit_button, hide_xlsx_button - drop the default
  buttons when the page provides its own.
* pagination_theme - name of the pagination template.

Detached filters: declare the grid with define_grid, place the filters
with grid_filter, then output the table with render_grid.
"""
import itertools
import json
from urllib.parse import urlencode

from flask import current_app, render_template, request, send_file
from markupsafe import Markup

from .columns import ActionColumn
from .exceptions import GridArgumentError, GridException
from .grids import Grid
from .messages import message
from .output_buffer import GridOutputBuffer
from .pagination import paginate
from .renderer import GridRenderer
from .services.export import Spreadsheet, save_workbook
from .tags import add_or_append_class_value, content_tag, link_to, tag_options
from .utils import config_value, is_blank

XLSX_MIMETYPE = 'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet'

GRID_OPTIONS = (
    'allow_showing_all_records',
    'class',
    'extra_request_parameters',
    'header_tr_html',
    'hide_reset_button',
    'hide_submit_button',
    'hide_xlsx_button',
    'show_filters',
    'sorting_dependant_row_cycling',
    'html',
    'upper_pagination_panel',
    'pagination_theme',
)

SHOW_FILTERS_VALUES = ('when_filtered', 'always', 'no')


def grid(grid, block=None, **opts):
    """Declares the columns of a grid with ``block`` and returns its HTML."""
    if block is None:
        raise GridArgumentError(
            'Missing block for the grid helper. For detached filters use first define_grid with the same API '
            'as grid, then grid_filter to add filters, and then render_grid to actually show the grid')
    define_grid(grid, block, **opts)
    return render_grid(grid)


def _grid_options(opts):
    unknown = sorted(set(opts) - set(GRID_OPTIONS))
    if unknown:
        raise GridArgumentError(
            f"Unknown grid option(s): {', '.join(unknown)}. Valid options are: {', '.join(GRID_OPTIONS)}")

    options = {
        'allow_showing_all_records': config_value('GRID_ALLOW_SHOWING_ALL_RECORDS'),
        'class': None,
        'extra_request_parameters': {},
        'header_tr_html': {},
        'hide_reset_button': False,
        'hide_submit_button': False,
        'hide_xlsx_button': False,
        'show_filters': config_value('GRID_SHOW_FILTER'),
        'sorting_dependant_row_cycling': False,
        'html': {},
        'upper_pagination_panel': config_value('GRID_SHOW_UPPER_PAGINATION_PANEL'),
        'pagination_theme': config_value('GRID_PAGINATION_THEME'),
    }
    options.update(opts)

    if options['show_filters'] is False:
        options['show_filters'] = 'no'
    elif options['show_filters'] is True:
        options['show_filters'] = 'always'
    if options['show_filters'] not in SHOW_FILTERS_VALUES:
        raise GridArgumentError(
            f"show_filters must be one of {', '.join(SHOW_FILTERS_VALUES)}, True or False; "
            f"got {options['show_filters']!r}")

    # the helpers modify these, the caller's dicts stay untouched
    options['html'] = dict(options['html'] or {})
    options['header_tr_html'] = dict(options['header_tr_html'] or {})
    options['extra_request_parameters'] = dict(options['extra_request_parameters'] or {})
    return options


def define_grid(grid, block, **opts):
    """
    Has the same parameters as grid but does not output the grid;
    render_grid outputs it afterwards. Returns the workbook when the grid
    is being exported, None otherwise.
    """
    if not isinstance(grid, Grid):
        raise GridArgumentError('The first argument for the grid helper must be an instance of the Grid class')
    if not callable(block):
        raise GridArgumentError('The grid block must be a callable declaring the columns.')

    options = _grid_options(opts)
    grid.allow_showing_all_records = options['allow_showing_all_records']

    rendering = GridRenderer(grid)
    block(rendering)

    last_column = rendering.last_column_for_html
    reuse_last_column_for_filter_buttons = bool(
        config_value('GRID_REUSE_LAST_COLUMN_FOR_FILTER_ICONS')
        and last_column is not None
        and last_column.capable_of_hosting_filter_related_icons())

    grid.output_buffer = None
    grid.xlsx_package = None

    if grid.output_xlsx():
        grid_xlsx(grid, rendering)
    elif rendering.blank_slate_handler is not None and len(grid.resultset.items) == 0 and not grid.filtering_on():
        # with a blank slate there is no grid at all
        generate_blank_slate(grid, rendering)
    else:
        grid_html(grid, options, rendering, reuse_last_column_for_filter_buttons)

    grid.view_helper_finished = True

    return grid.xlsx_package


def render_grid(grid):
    """Outputs a grid declared with define_grid."""
    if grid.output_buffer is not None:
        return grid.output_buffer
    if grid.xlsx_package is not None:
        return grid.xlsx_package
    raise GridException("Attempt to use 'render_grid' without 'define_grid' before.")


def generate_blank_slate(grid, rendering):
    grid.output_buffer = GridOutputBuffer()

    handler = rendering.blank_slate_handler
    if callable(handler):
        grid.output_buffer << handler()
    elif isinstance(handler, dict):
        context = dict(handler)
        template = context.pop('template', None)
        if template is None:
            raise GridArgumentError("blank_slate needs a callable, a string, or template='...'")
        grid.output_buffer << Markup(render_template(template, **context))
    else:
        grid.output_buffer << handler

    if rendering.find_one_for('in_html', lambda column: column.detach_with_id):
        grid.output_buffer.return_empty_strings_for_nonexistent_filters = True


def call_block(block, record, extra_argument=None):
    if extra_argument is not None:
        return block(record, extra_argument)
    return block(record)


def get_row_content(grid, rendering, record, sorting_dependant_row_cycling):
    cell_value_of_the_ordered_column = None
    row_content = Markup('')
    for column in rendering.each_column('in_html'):
        cell_block = column.cell_rendering_block

        opts = dict(column.html)

        if isinstance(column, ActionColumn):
            column_block_output = cell_block(record, request.args)
        else:
            column_block_output = call_block(cell_block, record)

        if isinstance(column_block_output, (list, tuple)):
            if len(column_block_output) != 2:
                raise GridArgumentError(
                    'When a grid column block returns a list or a tuple it is expected to contain 2 elements only - '
                    'the first is the contents of the table cell and the second is a dict containing HTML '
                    'attributes for the <td> tag.')

            column_block_output, additional_opts = column_block_output

            if not isinstance(additional_opts, dict):
                raise GridArgumentError(
                    'When a grid column block returns a list or a tuple its second element is expected to be a '
                    f'dict containing HTML attributes for the <td> tag. The returned value is {additional_opts!r}.')

            additional_opts = dict(additional_opts)
            additional_css_class = additional_opts.pop('class', None)
            opts.update(additional_opts)
            if not is_blank(additional_css_class):
                add_or_append_class_value(opts, additional_css_class)

        add_or_append_class_value(opts, column.css_class)

        if sorting_dependant_row_cycling and column.attribute and grid.ordered_by(column):
            cell_value_of_the_ordered_column = column_block_output
        row_content += content_tag('td', column_block_output, opts)
    return row_content, cell_value_of_the_ordered_column


def grid_html(grid, options, rendering, reuse_last_column_for_filter_buttons):
    table_html_attrs, header_tr_html = options['html'], options['header_tr_html']

    add_or_append_class_value(table_html_attrs, 'wice-grid', True)

    default_classes = config_value('GRID_DEFAULT_TABLE_CLASSES', strict=False)
    if isinstance(default_classes, (list, tuple)):
        for default_class in default_classes:
            add_or_append_class_value(table_html_attrs, default_class, True)

    if options['class']:
        add_or_append_class_value(table_html_attrs, options['class'])

    sorting_dependant_row_cycling = options['sorting_dependant_row_cycling']
    extra_request_parameters = options['extra_request_parameters']

    out = grid.output_buffer = GridOutputBuffer()

    out << Markup('<div class="wice-grid-container table-responsive"%s><div%s>') % (
        tag_options({'data-grid-name': grid.name, 'id': grid.name}), tag_options({'id': f'{grid.name}_title'}))
    if grid.saved_query is not None:
        out << content_tag('h3', grid.saved_query.name)
    out << Markup('</div><table%s>') % tag_options(table_html_attrs)
    if rendering.kaption:
        out << content_tag('caption', rendering.kaption)
    out << '<thead>'

    no_filters_at_all = options['show_filters'] == 'no' or rendering.no_filter_needed()

    if no_filters_at_all:
        no_rightmost_column = no_filter_row = True
    else:
        no_rightmost_column = no_filter_row = rendering.no_filter_needed_in_main_table()

    if reuse_last_column_for_filter_buttons:
        no_rightmost_column = True

    number_of_columns = rendering.number_of_columns('in_html')
    if no_rightmost_column:
        number_of_columns -= 1

    number_of_columns_for_extra_rows = number_of_columns + 1

    # computed once, shared by the upper and the lower panel
    pagination_panel_content_html = None

    def panel_content():
        nonlocal pagination_panel_content_html
        if pagination_panel_content_html is None:
            pagination_panel_content_html = pagination_panel_content(
                grid, extra_request_parameters, options['allow_showing_all_records'], options['pagination_theme'])
        return pagination_panel_content_html

    if options['upper_pagination_panel']:
        out << rendering.pagination_panel(number_of_columns, options['hide_xlsx_button'], panel_content)

    title_row_attrs = dict(header_tr_html)
    add_or_append_class_value(title_row_attrs, 'wice-grid-title-row', True)

    out << Markup('<tr%s>') % tag_options(title_row_attrs)

    filter_row_id = f'{grid.name}_filter_row'

    # first row: column titles with ordering links
    if options['show_filters'] == 'when_filtered':
        filter_shown = grid.filtering_on()
    else:
        filter_shown = options['show_filters'] == 'always'

    for column, last in rendering.each_column_aware_of_one_last_one('in_html'):
        column_name = column.name or ''

        opts = dict(column.html)
        add_or_append_class_value(opts, column.css_class)

        if column.attribute and (column.ordering or column.sort_by):
            if grid.filtered_by(column):
                column.add_css_class('active-filter')

            direction = 'asc'
            link_style = None
            arrow_class = None

            if grid.ordered_by(column):
                column.add_css_class('sorted')
                add_or_append_class_value(opts, 'sorted')
                link_style = grid.order_direction

                if grid.order_direction == 'asc':
                    direction = 'desc'
                    arrow_class = 'down'
                elif grid.order_direction == 'desc':
                    direction = 'asc'
                    arrow_class = 'up'

            link_content = Markup('%s') % column_name
            if arrow_class:
                link_content += Markup(' ') + content_tag('i', '', {'class': f'fa fa-arrow-{arrow_class}'})

            href = rendering.column_link(column, direction, request.args, extra_request_parameters)
            col_link = link_to(link_content, href, {'class': link_style})
            out << content_tag('th', col_link, opts)

        elif reuse_last_column_for_filter_buttons and last:
            out << content_tag('th', hide_show_icon(filter_row_id, grid, filter_shown, no_filter_row,
                                                    options['show_filters'], rendering), opts)
        else:
            out << content_tag('th', column_name, opts)

    if not no_rightmost_column:
        out << content_tag('th', hide_show_icon(filter_row_id, grid, filter_shown, no_filter_row,
                                                options['show_filters'], rendering))

    out << '</tr>'

    if not no_filters_at_all:
        if no_filter_row:
            # all the filters are detached
            for column in rendering.each_column('in_html'):
                if column.filter_shown():
                    out.add_filter(column.detach_with_id, column.render_filter())
        else:
            filter_row_attrs = dict(header_tr_html)
            add_or_append_class_value(filter_row_attrs, 'wg-filter-row', True)
            filter_row_attrs['id'] = filter_row_id
            if not filter_shown:
                filter_row_attrs['style'] = 'display:none'

            out << Markup('<tr%s>') % tag_options(filter_row_attrs)

            for column, last in rendering.each_column_aware_of_one_last_one('in_html'):
                opts = dict(column.html)
                add_or_append_class_value(opts, column.css_class)

                if column.filter_shown():
                    filter_html_code = column.render_filter()
                    if column.detach_with_id:
                        out << content_tag('th', '', opts)
                        out.add_filter(column.detach_with_id, filter_html_code)
                    else:
                        out << content_tag('th', filter_html_code, opts)
                elif reuse_last_column_for_filter_buttons and last:
                    out << content_tag('th', reset_submit_buttons(options, grid, rendering),
                                       add_or_append_class_value(opts, 'filter_icons'))
                else:
                    out << content_tag('th', '', opts)

            if not no_rightmost_column:
                out << content_tag('th', reset_submit_buttons(options, grid, rendering), {'class': 'filter_icons'})
            out << '</tr>'

    out << '</thead><tfoot>'
    out << rendering.pagination_panel(number_of_columns, options['hide_xlsx_button'], panel_content)
    out << '</tfoot><tbody>'

    # rows
    row_classes = itertools.cycle(['odd', 'even'])
    cycle_class = None
    cell_value_of_the_ordered_column = None
    previous_cell_value_of_the_ordered_column = None
    first_row = True

    for record in grid.each():
        before_row_output = None
        if rendering.before_row_handler is not None:
            before_row_output = call_block(rendering.before_row_handler, record, number_of_columns_for_extra_rows)

        after_row_output = None
        if rendering.after_row_handler is not None:
            after_row_output = call_block(rendering.after_row_handler, record, number_of_columns_for_extra_rows)

        replace_row_output = None
        if rendering.replace_row_handler is not None:
            replace_row_output = call_block(rendering.replace_row_handler, record, number_of_columns_for_extra_rows)

        if replace_row_output is not None:
            no_rightmost_column = True
            row_content = replace_row_output
        else:
            row_content, ordered_cell_value = get_row_content(
                grid, rendering, record, sorting_dependant_row_cycling)
            if ordered_cell_value is not None:
                cell_value_of_the_ordered_column = ordered_cell_value

        row_attributes = rendering.get_row_attributes(record)

        if sorting_dependant_row_cycling:
            if first_row or cell_value_of_the_ordered_column != previous_cell_value_of_the_ordered_column:
                cycle_class = next(row_classes)
            previous_cell_value_of_the_ordered_column = cell_value_of_the_ordered_column
        else:
            cycle_class = next(row_classes)
        first_row = False

        add_or_append_class_value(row_attributes, cycle_class)

        out << before_row_output
        out << Markup('<tr%s>') % tag_options(row_attributes)
        out << row_content
        if not no_rightmost_column:
            out << content_tag('td', '')
        out << '</tr>'
        out << after_row_output

    if rendering.last_row_handler is not None:
        out << rendering.last_row_handler(number_of_columns_for_extra_rows)

    out << '</tbody></table>'

    base_link_for_filter, base_link_for_show_all_records = rendering.base_link_for_filter(extra_request_parameters)

    link_for_export = rendering.link_for_export('xlsx', extra_request_parameters)

    parameter_name_for_query_loading = urlencode({f'{grid.name}[q]': ''})
    parameter_name_for_focus = urlencode({f'{grid.name}[foc]': ''})

    processor_initializer_arguments = [
        base_link_for_filter,
        base_link_for_show_all_records,
        link_for_export,
        parameter_name_for_query_loading,
        parameter_name_for_focus,
        'development' if current_app.debug else 'production',
    ]

    if no_filters_at_all:
        filter_declarations = []
    else:
        filter_declarations = [
            column.yield_declaration()
            for column in rendering.select_for(
                'in_html', lambda column: column.attribute and column.column_filter is not None)
        ]

    wg_data = {
        'data-processor-initializer-arguments': json.dumps(processor_initializer_arguments),
        'data-filter-declarations': json.dumps(filter_declarations),
        'class': 'wg-data',
    }

    if grid.status.get('foc'):
        wg_data['data-foc'] = grid.status['foc']

    out << content_tag('div', '', wg_data)

    out << '</div>'

    if current_app.debug:
        out << Markup(
            '<script>\n'
            'document.addEventListener("DOMContentLoaded", function(){\n'
            '  if (typeof(WiceGridProcessor) == "undefined"){\n'
            '    alert("wice_grid.js not loaded, the grid cannot proceed!\\n" +\n'
            '      "Make sure that you have loaded wice_grid.js.");\n'
            '  }\n'
            '});\n'
            '</script>')

    return out


def hide_show_icon(filter_row_id, grid, filter_shown, no_filter_row, show_filters, rendering):
    no_filter_opening_closing_icon = show_filters == 'always' or no_filter_row

    if no_filter_opening_closing_icon:
        return Markup('')

    styles = ['display: block;', 'display: none;']
    if not filter_shown:
        styles.reverse()

    return content_tag('div', content_tag('i', '', {'class': 'fa fa-eye-slash'}), {
        'title': message('hide_filter_tooltip'),
        'style': styles[0],
        'class': 'clickable  wg-hide-filter',
    }) + content_tag('div', content_tag('i', '', {'class': 'fa fa-eye'}), {
        'title': message('show_filter_tooltip'),
        'style': styles[1],
        'class': 'clickable  wg-show-filter',
    })


def reset_submit_buttons(options, grid, rendering):
    if options['hide_submit_button']:
        submit = Markup('')
    else:
        submit = content_tag('div', content_tag('i', '', {'class': 'fa fa-filter'}), {
            'title': message('filter_tooltip'),
            'id': f'{grid.name}_submit_grid_icon',
            'class': 'submit clickable',
        })

    if options['hide_reset_button']:
        reset = Markup('')
    else:
        reset = content_tag('div', content_tag('i', '', {'class': 'fa fa-table'}), {
            'title': message('reset_filter_tooltip'),
            'id': f'{grid.name}_reset_grid_icon',
            'class': 'reset clickable',
        })

    return submit + Markup(' ') + reset


def grid_filter(grid, filter_key):
    """
    Renders a detached filter.

    Args:
        grid: The Grid, already declared with define_grid.
        filter_key: The detach_with_id given in the column declaration.
    """
    if not isinstance(grid, Grid):
        raise GridArgumentError('grid_filter: the parameter must be a Grid instance.')
    if grid.xlsx_package is not None:
        return Markup('')
    if grid.output_buffer is None:
        raise GridArgumentError(
            "grid_filter: You have attempted to run 'grid_filter' before 'grid'. "
            'Read about detached filters in the documentation.')
    if not grid.output_buffer.has_filters and not grid.output_buffer.return_empty_strings_for_nonexistent_filters:
        raise GridArgumentError(
            'grid_filter: You have defined no detached filters, or you try use detached filters with '
            "show_filters='no' (set show_filters to 'always' in this case). "
            'Read about detached filters in the documentation.')

    return content_tag('span', grid.output_buffer.filter_for(filter_key), {
        'class': f'wg-detached-filter {grid.name}_detached_filter',
        'data-grid-name': grid.name,
    })


def grid_xlsx(grid, rendering):
    spreadsheet = Spreadsheet(grid.name)

    spreadsheet << rendering.column_labels('in_xlsx')

    for record in grid.each():
        row = []

        for column in rendering.each_column('in_xlsx'):
            column_block_output = call_block(column.cell_rendering_block, record)

            if isinstance(column_block_output, (list, tuple)):
                column_block_output = column_block_output[0]

            row.append(column_block_output)
        spreadsheet << row

    current_app.logger.info(f"Grid '{grid.name}': exported {spreadsheet.sheet.max_row - 1} rows to XLSX")
    grid.xlsx_package = spreadsheet.finish()


def pagination_panel_content(grid, extra_request_parameters, allow_showing_all_records, pagination_theme):
    extra_request_parameters = dict(extra_request_parameters)
    if grid.saved_query is not None:
        extra_request_parameters[f'{grid.name}[q]'] = grid.saved_query.id

    html = pagination_info(grid, allow_showing_all_records)

    return paginate(
        grid.resultset,
        theme=pagination_theme,
        param_name=f'{grid.name}[page]',
        params=extra_request_parameters,
        inner_window=4,
        outer_window=2,
    ) + Markup(' <div class="pagination_status">%s</div>') % html


def show_all_link(collection_total_entries, parameters, grid_name):
    confirmation = None
    if collection_total_entries > config_value('GRID_START_SHOWING_WARNING_FROM'):
        confirmation = message('all_queries_warning')

    html = link_to(message('show_all_records_label'), '#', {
        'title': message('show_all_records_tooltip'),
        'class': 'wg-show-all-link',
        'data-grid-state': json.dumps(parameters),
        'data-confim-message': confirmation,
    })

    return html


def back_to_pagination_link(parameters, grid_name):
    pagination_override_parameter_name = f'{grid_name}[pp]'
    parameters = [pair for pair in parameters if pair[0] != pagination_override_parameter_name]

    return link_to(message('switch_back_to_paginated_mode_label'), '#', {
        'title': message('switch_back_to_paginated_mode_tooltip'),
        'class': 'wg-back-to-pagination-link',
        'data-grid-state': json.dumps(parameters),
    })


def pagination_info(grid, allow_showing_all_records):
    collection = grid.resultset
    page_length = len(collection.items)

    if grid.all_record_mode():
        collection_total_entries = page_length
        first = 1
        last = page_length
        total_pages = 1
    else:
        collection_total_entries = collection.total or 0
        offset = (collection.page - 1) * collection.per_page
        if page_length == 0:
            # a page past the last one
            first = last = 0
        else:
            first = offset + 1
            last = offset + page_length
        total_pages = collection.pages

    parameters = [list(pair) for pair in grid.get_state_as_parameter_value_pairs()]

    if total_pages < 2 and page_length == 0:
        html = Markup('0')
    else:
        parameters.append([f'{grid.name}[pp]', collection_total_entries])

        show_all_records_link = allow_showing_all_records and collection_total_entries > page_length

        if show_all_records_link:
            limit = config_value('GRID_SHOW_ALL_ALLOWED_UP_TO', strict=False)
            if limit is not None:
                show_all_records_link = limit > collection_total_entries

        html = Markup('%s-%s / %s ') % (first, last, collection_total_entries)
        if show_all_records_link:
            html += show_all_link(collection_total_entries, parameters, grid.name)

    if grid.all_record_mode():
        html += back_to_pagination_link(parameters, grid.name)

    return html


def export_grid_if_requested(*grids):
    """
    Returns a download response for the first grid being exported, or None.

    Call it after the template declaring the grids has been rendered:

        html = render_template('tasks.html', tasks_grid=tasks_grid)
        return export_grid_if_requested(tasks_grid) or html
    """
    for candidate in grids:
        if candidate.xlsx_package is None:
            continue
        output = save_workbook(candidate.xlsx_package)
        return send_file(output, mimetype=XLSX_MIMETYPE, as_attachment=True,
                         download_name=f'{candidate.name}.xlsx')
    return None
