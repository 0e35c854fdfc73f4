"""Filter controls and the query conditions behind them."""
from datetime import date, datetime, time

import sqlalchemy as sa
from markupsafe import Markup

from ..exceptions import GridArgumentError
from ..messages import message
from ..tags import content_tag, tag_options


def escape_like(value):
    return value.replace('\\', '\\\\').replace('%', '\\%').replace('_', '\\_')


def to_number(value):
    if value is None:
        return None
    value = str(value).strip()
    try:
        return int(value)
    except ValueError:
        pass
    try:
        return float(value)
    except ValueError:
        return None


def to_date(value):
    if value is None:
        return None
    try:
        return date.fromisoformat(str(value).strip())
    except ValueError:
        return None


def detect_filter_type(expr):
    """Picks a filter kind from the SQLAlchemy type of a column."""
    col_type = getattr(expr, 'type', None)
    if isinstance(col_type, sa.Boolean):
        return 'boolean'
    if isinstance(col_type, (sa.Date, sa.DateTime)):
        return 'date'
    if isinstance(col_type, (sa.Integer, sa.Numeric)):
        return 'integer'
    return 'string'


class ColumnFilter:
    """Base class for the filter of a column."""
    kind = None

    def parameter_names(self, column):
        return [column.filter_param_name]

    def ids(self, column):
        return [column.filter_dom_id]

    def render(self, column, value):
        raise NotImplementedError

    def apply(self, query, expr, value):
        raise NotImplementedError


class StringFilter(ColumnFilter):
    kind = 'string'

    def render(self, column, value):
        if not isinstance(value, str):
            value = ''
        return Markup('<input%s>' % tag_options({
            'type': 'text',
            'class': 'form-control input-sm',
            'name': column.filter_param_name,
            'id': column.filter_dom_id,
            'value': value,
        }))

    def apply(self, query, expr, value):
        if not isinstance(value, str):
            return query
        return query.filter(expr.ilike(f'%{escape_like(value.strip())}%', escape='\\'))


class RangeFilter(ColumnFilter):
    """Two inputs, 'fr' and 'to', both optional."""
    input_type = 'text'

    def convert(self, value):
        raise NotImplementedError

    def parameter_names(self, column):
        return [f'{column.filter_param_name}[fr]', f'{column.filter_param_name}[to]']

    def ids(self, column):
        return [f'{column.filter_dom_id}_fr', f'{column.filter_dom_id}_to']

    def _input(self, column, bound, value, placeholder=None):
        return Markup('<input%s>' % tag_options({
            'type': self.input_type,
            'class': 'form-control input-sm range-start' if bound == 'fr' else 'form-control input-sm range-end',
            'name': f'{column.filter_param_name}[{bound}]',
            'id': f'{column.filter_dom_id}_{bound}',
            'value': value.get(bound, '') if isinstance(value, dict) else '',
            'placeholder': placeholder,
        }))

    def render(self, column, value):
        return content_tag('div', self._input(column, 'fr', value) + self._input(column, 'to', value),
                           {'class': f'wg-{self.kind}-filter'})

    def lower_bound(self, expr, value):
        return value

    def upper_bound(self, expr, value):
        return value

    def apply(self, query, expr, value):
        if not isinstance(value, dict):
            return query
        lower = self.convert(value.get('fr'))
        upper = self.convert(value.get('to'))
        if lower is not None:
            query = query.filter(expr >= self.lower_bound(expr, lower))
        if upper is not None:
            query = query.filter(expr <= self.upper_bound(expr, upper))
        return query


class IntegerRangeFilter(RangeFilter):
    kind = 'integer'
    input_type = 'number'

    def convert(self, value):
        return to_number(value)


class DateRangeFilter(RangeFilter):
    kind = 'date'
    input_type = 'date'

    def convert(self, value):
        return to_date(value)

    def _input(self, column, bound, value, placeholder=None):
        label = message('date_from') if bound == 'fr' else message('date_to')
        return super()._input(column, bound, value, placeholder=label)

    def lower_bound(self, expr, value):
        if isinstance(getattr(expr, 'type', None), sa.DateTime):
            return datetime.combine(value, time.min)
        return value

    def upper_bound(self, expr, value):
        # the whole last day is included for timestamps
        if isinstance(getattr(expr, 'type', None), sa.DateTime):
            return datetime.combine(value, time.max)
        return value


class BooleanFilter(ColumnFilter):
    kind = 'boolean'

    def render(self, column, value):
        options = [('', ''), ('t', message('boolean_filter_true_label')), ('f', message('boolean_filter_false_label'))]
        html = Markup('')
        for option_value, label in options:
            html += content_tag('option', label, {'value': option_value, 'selected': value == option_value})
        return content_tag('select', html, {
            'class': 'form-control input-sm',
            'name': column.filter_param_name,
            'id': column.filter_dom_id,
        })

    def apply(self, query, expr, value):
        if value not in ('t', 'f'):
            return query
        return query.filter(expr == (value == 't'))


class CustomFilter(ColumnFilter):
    """
    A dropdown over fixed options.

    Options are given as a dict {value: label}, as (label, value) pairs,
    or as plain values which are their own labels.
    """
    kind = 'custom'

    def __init__(self, options):
        if isinstance(options, dict):
            self.options = [(label, value) for value, label in options.items()]
        else:
            self.options = [tuple(option) if isinstance(option, (list, tuple)) else (option, option)
                            for option in options]

    def parameter_names(self, column):
        return [f'{column.filter_param_name}[]']

    def render(self, column, value):
        selected = value if isinstance(value, list) else [value]
        selected = [str(v) for v in selected if v is not None]
        html = content_tag('option', '', {'value': ''})
        for label, option_value in self.options:
            html += content_tag('option', label, {
                'value': option_value,
                'selected': str(option_value) in selected,
            })
        return content_tag('select', html, {
            'class': 'form-control input-sm custom-dropdown',
            'name': f'{column.filter_param_name}[]',
            'id': column.filter_dom_id,
        })

    def apply(self, query, expr, value):
        submitted = value if isinstance(value, list) else [value]
        by_string = {str(option_value): option_value for _label, option_value in self.options}
        values = [by_string[v] for v in submitted if v in by_string]
        if not values:
            return query
        return query.filter(expr.in_(values))


FILTER_TYPES = {
    'string': StringFilter,
    'integer': IntegerRangeFilter,
    'date': DateRangeFilter,
    'boolean': BooleanFilter,
}


def build_filter(expr, filter_type=None, custom_filter=None):
    if custom_filter is not None:
        return CustomFilter(custom_filter)
    filter_type = filter_type or detect_filter_type(expr)
    if filter_type not in FILTER_TYPES:
        raise GridArgumentError(
            f"Unknown filter_type '{filter_type}', expected one of: {', '.join(sorted(FILTER_TYPES))}")
    return FILTER_TYPES[filter_type]()
