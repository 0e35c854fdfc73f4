"""
The grid object: a Flask-SQLAlchemy query plus the grid state read from the request.

Grid state travels in request parameters scoped by the grid name, e.g.
``tasks[page]=2``, ``tasks[order]=tasks.title``, ``tasks[f][tasks.title]=foo``
or ``tasks[f][tasks.id][fr]=10``.
"""
import math
import re

from flask import current_app, request
from sqlalchemy.orm import QueryableAttribute

from .exceptions import GridArgumentError
from .utils import config_value, is_blank

NAME_RE = re.compile(r'^[A-Za-z][A-Za-z0-9_]*$')
SEGMENT_RE = re.compile(r'\[([^\[\]]*)\]')


def parse_grid_params(name, args):
    """Collects the ``name[...]`` parameters of a MultiDict into a nested dict."""
    state = {}
    for key in args.keys():
        tail = key[len(name):]
        if not key.startswith(name + '['):
            continue
        path = SEGMENT_RE.findall(tail)
        if not path or ''.join(f'[{p}]' for p in path) != tail:
            continue

        as_list = path[-1] == ''
        if as_list:
            path = path[:-1]
            if not path:
                continue
        value = args.getlist(key) if as_list else args.get(key)

        node = state
        for segment in path[:-1]:
            node = node.setdefault(segment, {})
            if not isinstance(node, dict):
                break
        else:
            node[path[-1]] = value
    return state


def flatten_params(prefix, value):
    """The inverse of parse_grid_params: yields (parameter name, value) pairs."""
    if isinstance(value, dict):
        for key, sub_value in value.items():
            yield from flatten_params(f'{prefix}[{key}]', sub_value)
    elif isinstance(value, (list, tuple)):
        for item in value:
            yield f'{prefix}[]', item
    else:
        yield prefix, value


class ListPage:
    """
    A page over an in-memory list of records.

    Mirrors the attributes of Flask-SQLAlchemy's Pagination so the
    helpers can treat both the same way.
    """
    def __init__(self, records, page=1, per_page=None):
        self.records = list(records)
        self.total = len(self.records)
        self.per_page = per_page or max(self.total, 1)
        self.pages = max(int(math.ceil(self.total / float(self.per_page))), 1) if self.total else 0
        self.page = max(page, 1)
        start = (self.page - 1) * self.per_page
        self.items = self.records[start:start + self.per_page]

    @property
    def has_prev(self):
        return self.page > 1

    @property
    def has_next(self):
        return self.page < self.pages

    @property
    def prev_num(self):
        return self.page - 1 if self.has_prev else None

    @property
    def next_num(self):
        return self.page + 1 if self.has_next else None

    def iter_pages(self, *, left_edge=2, left_current=2, right_current=4, right_edge=2):
        pages_end = self.pages + 1
        if pages_end == 1:
            return

        left_end = min(1 + left_edge, pages_end)
        yield from range(1, left_end)
        if left_end == pages_end:
            return

        mid_start = max(left_end, self.page - left_current)
        mid_end = min(self.page + right_current + 1, pages_end)
        if mid_start - left_end > 0:
            yield None
        yield from range(mid_start, mid_end)
        if mid_end == pages_end:
            return

        right_start = max(mid_end, pages_end - right_edge)
        if right_start - mid_end > 0:
            yield None
        yield from range(right_start, pages_end)


class Grid:
    """A paginated, filterable, sortable view over a Flask-SQLAlchemy query."""

    def __init__(self, query, name='grid', per_page=None, order=None, order_direction='asc',
                 enable_export_to_xlsx=False, saved_query=None, request_args=None):
        if not isinstance(name, str) or not NAME_RE.match(name):
            raise GridArgumentError(
                f"Grid name '{name}' must start with a letter and contain only letters, digits and underscores.")
        if order_direction not in ('asc', 'desc'):
            raise GridArgumentError("order_direction must be either 'asc' or 'desc'.")
        descriptions = getattr(query, 'column_descriptions', None)
        if not descriptions or descriptions[0].get('entity') is None:
            raise GridArgumentError('The grid needs a query over a mapped model, e.g. Task.query.')

        self.query = query
        self.name = name
        self.model = descriptions[0]['entity']
        self.per_page = per_page or config_value('GRID_PER_PAGE')
        self.default_order = self._qualify(order)
        self._default_order_attribute = order if isinstance(order, QueryableAttribute) else None
        self.default_order_direction = order_direction
        self.export_to_xlsx_enabled = enable_export_to_xlsx
        # None defers to GRID_ALLOW_SHOWING_ALL_RECORDS; define_grid sets the per-grid option
        self.allow_showing_all_records = None

        self.request_args = request.args if request_args is None else request_args
        self.status = parse_grid_params(name, self.request_args)

        self.saved_query = None
        saved_query = self.status.get('q') or saved_query
        if saved_query:
            self._load_saved_query(saved_query)

        self.columns = []
        self.output_buffer = None
        self.xlsx_package = None
        self.view_helper_finished = False
        self._resultset = None
        self._all_record_mode = False

    def __repr__(self):
        return f'<Grid {self.name} over {self.model.__name__}>'

    @property
    def table_name(self):
        return self.model.__table__.name

    def _qualify(self, attribute_name):
        if not attribute_name:
            return None
        if not isinstance(attribute_name, str):
            return f'{attribute_name.class_.__table__.name}.{attribute_name.key}'
        if '.' in attribute_name:
            return attribute_name
        return f'{self.table_name}.{attribute_name}'

    def _load_saved_query(self, saved_query):
        from .models import SavedQuery

        if not isinstance(saved_query, SavedQuery):
            try:
                saved_query_id = int(saved_query)
            except (TypeError, ValueError):
                current_app.logger.warning(f"Grid '{self.name}': ignoring malformed saved query id {saved_query!r}")
                return
            saved_query = SavedQuery.query.filter_by(id=saved_query_id, grid_name=self.name).first()
            if saved_query is None:
                current_app.logger.warning(f"Grid '{self.name}': saved query {saved_query_id} not found")
                return

        self.saved_query = saved_query
        state = dict(saved_query.state or {})
        for key, value in self.status.items():
            if key == 'f' and is_blank(value):
                continue
            state[key] = value
        self.status = state

    # Columns are attached by the renderer while the grid is being declared

    def reset_columns(self):
        self.columns = []
        self._resultset = None

    def register_column(self, column):
        self.columns.append(column)
        self._resultset = None

    # State queries

    @property
    def filter_values(self):
        filters = self.status.get('f')
        return filters if isinstance(filters, dict) else {}

    def filter_value_for(self, column):
        return self.filter_values.get(column.fully_qualified_attribute_name)

    def filtering_on(self):
        return any(not is_blank(value) for value in self.filter_values.values())

    def filtered_by(self, column):
        if not column.attribute:
            return False
        return not is_blank(self.filter_value_for(column))

    @staticmethod
    def _orderable(column):
        return bool(column.attribute) and (column.ordering or column.sort_by is not None)

    @property
    def order(self):
        """The requested order when a declared orderable column backs it, else the default order."""
        order = self.status.get('order')
        if isinstance(order, str) and order:
            for column in self.columns:
                if self._orderable(column) and column.fully_qualified_attribute_name == order:
                    return order
        return self.default_order

    @property
    def order_direction(self):
        direction = self.status.get('order_direction')
        if direction in ('asc', 'desc'):
            return direction
        return self.default_order_direction

    def ordered_by(self, column):
        return bool(column.attribute) and self.order == column.fully_qualified_attribute_name

    def output_xlsx(self):
        return self.export_to_xlsx_enabled and self.status.get('export') == 'xlsx'

    @property
    def current_page(self):
        try:
            return max(int(self.status.get('page', 1)), 1)
        except (TypeError, ValueError):
            return 1

    def all_record_mode(self):
        if self._resultset is None:
            self._resultset = self._build_resultset()
        return self._all_record_mode

    # Result set

    @property
    def resultset(self):
        if self._resultset is None:
            self._resultset = self._build_resultset()
        return self._resultset

    def _ordered_column(self):
        for column in self.columns:
            if self._orderable(column) and self.ordered_by(column):
                return column
        return None

    def _default_order_expression(self):
        """The mapped attribute behind the order given to initialize_grid, when no column declares it."""
        if not self.default_order or self.order != self.default_order:
            return None
        if self._default_order_attribute is not None:
            return self._default_order_attribute
        table, _, attribute = self.default_order.partition('.')
        if table != self.table_name:
            return None
        expr = getattr(self.model, attribute, None)
        return expr if isinstance(expr, QueryableAttribute) else None

    def _show_all_requested(self, query):
        if is_blank(self.status.get('pp')):
            return False
        allowed = self.allow_showing_all_records
        if allowed is None:
            allowed = config_value('GRID_ALLOW_SHOWING_ALL_RECORDS')
        if not allowed:
            current_app.logger.info(f"Grid '{self.name}': show all requested but not allowed")
            return False
        limit = config_value('GRID_SHOW_ALL_ALLOWED_UP_TO', strict=False)
        if limit is not None:
            total = query.order_by(None).count()
            if total >= limit:
                current_app.logger.info(
                    f"Grid '{self.name}': show all requested for {total} records, allowed up to {limit}")
                return False
        return True

    def _build_resultset(self):
        query = self.query
        for column in self.columns:
            if not column.attribute or not column.filter_enabled:
                continue
            value = self.filter_value_for(column)
            if not is_blank(value):
                query = column.apply_filter(query, value)

        descending = self.order_direction == 'desc'
        sort_key = None
        column = self._ordered_column()
        if column is not None and column.sort_by:
            sort_key = column.sort_by
        else:
            expr = column.expr if column is not None else self._default_order_expression()
            if expr is not None:
                query = query.order_by(expr.desc() if descending else expr.asc())

        self._all_record_mode = self._show_all_requested(query)

        if self.output_xlsx() or self._all_record_mode:
            records = query.all()
            if sort_key:
                records.sort(key=sort_key, reverse=descending)
            return ListPage(records)

        if sort_key:
            records = sorted(query.all(), key=sort_key, reverse=descending)
            return ListPage(records, page=self.current_page, per_page=self.per_page)

        return query.paginate(page=self.current_page, per_page=self.per_page, error_out=False)

    def each(self):
        return iter(self.resultset.items)

    __iter__ = each

    def get_state_as_parameter_value_pairs(self, including_saved_query_request=False):
        pairs = []
        if not is_blank(self.filter_values):
            pairs.extend(flatten_params(f'{self.name}[f]', self.filter_values))
        if including_saved_query_request and self.saved_query is not None:
            pairs.append((f'{self.name}[q]', self.saved_query.id))
        for parameter in ('order', 'order_direction'):
            if self.status.get(parameter):
                pairs.append((f'{self.name}[{parameter}]', self.status[parameter]))
        return pairs


def initialize_grid(query, **options):
    """Builds a Grid for the current request. See Grid for the options."""
    return Grid(query, **options)
