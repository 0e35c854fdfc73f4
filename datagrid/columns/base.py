from ..exceptions import GridArgumentError
from ..tags import add_or_append_class_value
from .filters import build_filter


class ViewColumn:
    """
    A declared grid column.

    Args:
        grid: The Grid the column belongs to.
        name (str): The column title.
        attribute: Model attribute name (or ORM attribute) the column is
            ordered and filtered by.
        model: Model the attribute lives on, defaults to the grid's model.
        html (dict): HTML attributes of the header and data cells.
        css_class (str): Extra css class of the header and data cells.
        ordering (bool): Whether the title links to ordering by the attribute.
        sort_by (callable): Key function ordering the records in Python
            instead of in SQL.
        filter (bool): Whether the column gets a filter.
        filter_type (str): Force a filter kind: string, integer, date, boolean.
        custom_filter: Options of a dropdown filter.
        detach_with_id (str): Render the filter outside of the table,
            see grid_filter.
        in_html (bool): Show the column in the HTML table.
        in_xlsx (bool): Include the column in the spreadsheet export.
        block (callable): Returns the cell content for a record, or a
            (content, td attributes) pair.
    """
    def __init__(self, grid, name=None, attribute=None, model=None, html=None, css_class=None,
                 ordering=True, sort_by=None, filter=True, filter_type=None, custom_filter=None,
                 detach_with_id=None, in_html=True, in_xlsx=True, block=None):
        self.grid = grid
        self.name = name
        self.html = dict(html) if html else {}
        self.css_class = css_class
        self.ordering = ordering
        self.sort_by = sort_by
        self.filter_enabled = filter
        self.detach_with_id = detach_with_id
        self.in_html = in_html
        self.in_xlsx = in_xlsx

        self.attribute = None
        self.model = None
        self.expr = None
        self.column_filter = None
        if attribute is not None:
            self._resolve_attribute(attribute, model)
            if self.filter_enabled:
                self.column_filter = build_filter(self.expr, filter_type, custom_filter)
        elif sort_by is not None:
            raise GridArgumentError('sort_by needs an attribute to know when the column is ordered.')

        if block is None:
            if self.attribute is None or self.model is not grid.model:
                raise GridArgumentError(
                    f"Column '{name or ''}' needs a block: only attributes of {grid.model.__name__} "
                    'can be displayed without one.')
            attribute_name = self.attribute
            block = lambda record: getattr(record, attribute_name)
        elif not callable(block):
            raise GridArgumentError('The column block must be callable.')
        self.cell_rendering_block = block

    def __repr__(self):
        return f'<{self.__class__.__name__} {self.name!r} {self.attribute!r}>'

    def _resolve_attribute(self, attribute, model):
        if isinstance(attribute, str):
            model = model or self.grid.model
            expr = getattr(model, attribute, None)
            if expr is None:
                raise GridArgumentError(f"{model.__name__} has no attribute '{attribute}'")
            self.attribute = attribute
        else:
            expr = attribute
            model = getattr(attribute, 'class_', None)
            if model is None:
                raise GridArgumentError('attribute must be a name or a mapped attribute such as Task.title')
            self.attribute = attribute.key
        self.model = model
        self.expr = expr

    @property
    def fully_qualified_attribute_name(self):
        if self.attribute is None:
            return None
        return f'{self.model.__table__.name}.{self.attribute}'

    @property
    def filter_param_name(self):
        return f'{self.grid.name}[f][{self.fully_qualified_attribute_name}]'

    @property
    def filter_dom_id(self):
        return f'{self.grid.name}_f_{self.fully_qualified_attribute_name.replace(".", "_")}'

    def add_css_class(self, klass):
        holder = {'class': self.css_class}
        self.css_class = add_or_append_class_value(holder, klass)['class']

    def filter_shown(self):
        return self.attribute is not None and self.column_filter is not None and self.in_html

    def capable_of_hosting_filter_related_icons(self):
        return self.attribute is None and not self.name and not self.filter_shown()

    def render_filter(self):
        return self.column_filter.render(self, self.grid.filter_value_for(self))

    def apply_filter(self, query, value):
        return self.column_filter.apply(query, self.expr, value)

    def yield_declaration(self):
        return {
            'filterName': self.fully_qualified_attribute_name,
            'detached': bool(self.detach_with_id),
            'declaration': {
                'templates': self.column_filter.parameter_names(self),
                'ids': self.column_filter.ids(self),
            },
        }
