"""Small HTML building helpers used by the grid renderer."""
import json

from markupsafe import Markup, escape


def tag_options(attrs):
    """Renders an attribute mapping as ' key="value"' pairs, in insertion order."""
    if not attrs:
        return Markup('')
    parts = []
    for key, value in attrs.items():
        if value is None or value is False:
            continue
        if value is True:
            value = key
        elif isinstance(value, (dict, list, tuple)):
            value = json.dumps(value)
        parts.append(f' {escape(key)}="{escape(value)}"')
    return Markup(''.join(parts))


def content_tag(name, content='', attrs=None):
    if content is None:
        content = ''
    return Markup(f'<{name}{tag_options(attrs)}>{escape(content)}</{name}>')


def link_to(content, href, attrs=None):
    options = {'href': href}
    if attrs:
        options.update(attrs)
    return content_tag('a', content, options)


def add_or_append_class_value(attrs, klass, prepend=False):
    """
    Adds a css class to the 'class' entry of an attribute dict.

    The dict is modified in place and returned so calls can be chained.
    """
    if klass is None or str(klass).strip() == '':
        return attrs
    klass = str(klass)
    current = attrs.get('class')
    if current is None or str(current).strip() == '':
        attrs['class'] = klass
    elif prepend:
        attrs['class'] = f'{klass} {current}'
    else:
        attrs['class'] = f'{current} {klass}'
    return attrs
