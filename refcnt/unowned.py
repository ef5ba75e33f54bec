"""A pointer that never owns or counts its target."""

from refcnt.refcount import _addr, _compare, _text


class UnownedPtr:
    """Holds a target without taking ownership of it or touching its count."""

    def __init__(self, target=None):
        self._ptr = target

    def get(self):
        """The target, or None."""
        return self._ptr

    @staticmethod
    def compare(x, y):
        """Order two pointers by target identity: -1, 0 or 1."""
        return _compare(x, y)

    def __bool__(self):
        return self._ptr is not None

    def __eq__(self, other):
        if isinstance(other, UnownedPtr):
            return self._ptr is other.get()
        return NotImplemented

    def __hash__(self):
        return hash(_addr(self._ptr))

    def __str__(self):
        return _text(self._ptr)

    def __repr__(self):
        return f"{type(self).__name__}({self._ptr!r})"