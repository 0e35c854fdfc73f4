from markupsafe import Markup

from .exceptions import GridException


class GridOutputBuffer:
    """Accumulates the grid HTML and keeps the detached filters apart."""
    def __init__(self):
        self._parts = []
        self._filters = {}
        self.return_empty_strings_for_nonexistent_filters = False

    def append(self, html):
        if html:
            self._parts.append(str(html))
        return self

    __lshift__ = append

    def add_filter(self, detach_with_id, filter_code):
        if detach_with_id in self._filters:
            raise GridException(f"Detached ID '{detach_with_id}' is already used!")
        self._filters[detach_with_id] = filter_code

    @property
    def has_filters(self):
        return bool(self._filters)

    def filter_for(self, detach_with_id):
        if detach_with_id not in self._filters:
            if self.return_empty_strings_for_nonexistent_filters:
                return Markup('')
            raise GridException(f"No filter with Detached ID '{detach_with_id}'!")

        if self._filters[detach_with_id] is None:
            raise GridException(
                f"Filter with Detached ID '{detach_with_id}' has already been requested once! "
                'There cannot be two instances of the same filter on one page')

        res = self._filters[detach_with_id]
        self._filters[detach_with_id] = None
        return res

    def __str__(self):
        return ''.join(self._parts)

    def __html__(self):
        return str(self)
