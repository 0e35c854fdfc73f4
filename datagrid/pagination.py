"""Page links for a grid, rendered from datagrid/pagination/<theme>.html."""
from urllib.parse import urlencode

from flask import render_template, request
from markupsafe import Markup


def page_url(param_name, page_number, params=None):
    """The current URL with the page parameter set and the extra params merged in."""
    params = params or {}
    overridden = set(params) | {param_name}
    pairs = [(key, value) for key, value in request.args.items(multi=True) if key not in overridden]
    pairs.extend(params.items())
    pairs.append((param_name, page_number))
    return f'{request.path}?{urlencode(pairs)}'


def paginate(page, theme, param_name, params=None, inner_window=4, outer_window=2):
    """
    Renders the page links of a Pagination (or ListPage).

    Returns an empty string when there is nothing to page through.
    """
    if page.pages < 2:
        return Markup('')

    links = []
    for number in page.iter_pages(left_edge=outer_window, left_current=inner_window,
                                  right_current=inner_window + 1, right_edge=outer_window):
        if number is None:
            links.append(None)
        else:
            links.append({
                'number': number,
                'url': page_url(param_name, number, params),
                'current': number == page.page,
            })

    return Markup(render_template(
        f'datagrid/pagination/{theme}.html',
        page=page,
        links=links,
        prev_url=page_url(param_name, page.prev_num, params) if page.has_prev else None,
        next_url=page_url(param_name, page.next_num, params) if page.has_next else None,
    ))
