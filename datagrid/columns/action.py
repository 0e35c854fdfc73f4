from markupsafe import Markup

from ..messages import message
from ..tags import content_tag, tag_options
from .base import ViewColumn


class ActionColumn(ViewColumn):
    """
    A column of checkboxes for selecting records.

    The selection is submitted as ``<grid>[<param_name>][]``; checkboxes of
    records whose ``object_property`` is in the current request are checked.
    The filter row hosts the select all / deselect all buttons.
    """
    def __init__(self, grid, param_name='selected', html=None, css_class=None,
                 select_all_buttons=True, object_property='id', detach_with_id=None, name=None):
        self.param_name = param_name
        self.select_all_buttons = select_all_buttons
        self.object_property = object_property
        super().__init__(grid, name=name, html=html, css_class=css_class, ordering=False, filter=False,
                         detach_with_id=detach_with_id, in_xlsx=False, block=self.render_checkbox)
        self.add_css_class('sel')

    @property
    def selection_param_name(self):
        return f'{self.grid.name}[{self.param_name}][]'

    def render_checkbox(self, record, params):
        value = getattr(record, self.object_property)
        selected = params.getlist(self.selection_param_name) if hasattr(params, 'getlist') else []
        return Markup('<input%s>' % tag_options({
            'type': 'checkbox',
            'class': 'sel-input',
            'name': self.selection_param_name,
            'value': value,
            'checked': str(value) in selected,
        }))

    def filter_shown(self):
        return self.select_all_buttons and self.in_html

    def capable_of_hosting_filter_related_icons(self):
        return False

    def render_filter(self):
        select_all = content_tag('div', content_tag('i', '', {'class': 'fa fa-check-square-o'}), {
            'class': 'clickable select-all',
            'title': message('select_all'),
        })
        deselect_all = content_tag('div', content_tag('i', '', {'class': 'fa fa-square-o'}), {
            'class': 'clickable deselect-all',
            'title': message('deselect_all'),
        })
        return content_tag('div', select_all + ' ' + deselect_all, {'class': 'select-all-buttons'})
