"""Reference-counted objects with a human-readable representation."""

import io
from abc import ABC, abstractmethod

from refcnt.refcount import Refcount


class Displayable(Refcount, ABC):
    """Refcounted object that can write a description of itself to a stream."""

    @abstractmethod
    def display(self, stream):
        """Write a human-readable representation to the text ``stream``."""

    def display_string(self):
        """What ``display`` writes, collected into a string."""
        buf = io.StringIO()
        self.display(buf)
        return buf.getvalue()

    def __str__(self):
        return self.display_string()