"""Intrusive reference counting with owning (RefPtr) and borrowed (Borrow) pointers."""

import logging
import threading
from typing import Generic, Optional, TypeVar

_log = logging.getLogger(__name__)

_MASK = 0xFFFFFFFF
# Stored in a released object's counter so a second release can be detected.
_DELETED = 0xFFFFFFFF

_debug = False


class DoubleReleaseError(RuntimeError):
    """Raised when an object whose last reference is gone is released again."""


class Refcount:
    """Base for objects that carry their own reference count."""

    def __init__(self):
        self._reference_counter = 0
        self._refcount_lock = threading.Lock()

    def reference_counter(self):
        """Current number of owning references."""
        return self._reference_counter

    def destroy(self):
        """Called once, when the last owning reference is released.

        Releases every owning pointer held directly as an attribute, so that
        whatever this object owned is released along with it.
        """
        for value in list(getattr(self, "__dict__", {}).values()):
            if isinstance(value, RefPtr):
                value.reset()


T = TypeVar("T")


def type_name(cls):
    """Human-readable name of a type, qualified by its module."""
    if cls.__module__ == "builtins":
        return cls.__qualname__
    return f"{cls.__module__}.{cls.__qualname__}"


def set_debug(flag):
    """Turn verbose logging of reference count changes on or off."""
    global _debug
    _debug = bool(flag)


def refcount(x):
    """Reference count of ``x``; 0 for None."""
    return 0 if x is None else x.reference_counter()


def add_ref(x):
    """Add one reference to ``x``; None is ignored."""
    if x is None:
        return
    with x._refcount_lock:
        x._reference_counter = (x._reference_counter + 1) & _MASK
        n = x._reference_counter
    if _debug:
        _log.debug("add_ref: x=%r n=%d", x, n)


def release(x):
    """Drop one reference to ``x``, destroying it when none remain."""
    if x is None:
        return
    with x._refcount_lock:
        n = x._reference_counter
        if n == _DELETED:
            _log.error("detected double-delete attempt: x=%r n=%d", x, n)
            raise DoubleReleaseError(f"double release of {type_name(type(x))} object")
        x._reference_counter = _DELETED if n == 1 else (n - 1) & _MASK
    if _debug:
        _log.debug("release: x=%r n=%d", x, n)
    if n == 1:
        if _debug:
            _log.debug("delete object with 0 refs: x=%r", x)
        x.destroy()


def _addr(obj):
    return 0 if obj is None else id(obj)


def _compare(x, y):
    """Order two pointer-like handles by target identity: -1, 0 or 1."""
    ia, ib = _addr(x.get()), _addr(y.get())
    return (ia > ib) - (ia < ib)


def _text(target):
    return "<nullptr>" if target is None else str(target)


class RefPtr(Generic[T]):
    """Owning pointer: holds one reference on its target while it points to it."""

    _ptr = None

    def __init__(self, target: Optional[T] = None):
        self._ptr = target
        add_ref(target)

    @classmethod
    def _adopt(cls, target):
        ptr = cls.__new__(cls)
        ptr._ptr = target
        return ptr

    @classmethod
    def aliasing(cls, other, target):
        """Pointer to ``target`` sharing ownership with ``other``; types must agree."""
        held = other.get()
        if held is not None and target is not None and type(held) is not type(target):
            raise TypeError(
                "attempt to use aliasing constructor with "
                f"Y={type_name(type(held))} T={type_name(type(target))}"
            )
        return cls(target)

    def __del__(self):
        ptr = self.__dict__.get("_ptr")
        self._ptr = None
        release(ptr)

    def get(self):
        """The target, or None."""
        return self._ptr

    def borrow(self) -> "Borrow[T]":
        """Non-owning pointer to the same target."""
        return Borrow(self._ptr)

    def copy(self) -> "RefPtr[T]":
        """New owning pointer to the same target."""
        return RefPtr(self._ptr)

    def take(self) -> "RefPtr[T]":
        """Move the reference into a new pointer, leaving this one null."""
        ptr, self._ptr = self._ptr, None
        return RefPtr._adopt(ptr)

    def assign(self, other: Optional["RefPtr[T]"]):
        """Point at what ``other`` points at."""
        self.reset(None if other is None else other.get())
        return self

    def reset(self, target: Optional[T] = None):
        """Point at ``target`` (null by default), releasing the old target."""
        old = self._ptr
        self._ptr = target
        add_ref(target)
        release(old)
        return self

    @staticmethod
    def compare(x, y):
        """Order two pointers by target identity: -1, 0 or 1."""
        return _compare(x, y)

    def __bool__(self):
        return self._ptr is not None

    def __eq__(self, other):
        if isinstance(other, (RefPtr, Borrow)):
            return self._ptr is other.get()
        return NotImplemented

    def __hash__(self):
        return hash(_addr(self._ptr))

    def __str__(self):
        return _text(self._ptr)

    def __repr__(self):
        return f"{type(self).__name__}({self._ptr!r})"


class Borrow(Generic[T]):
    """Non-owning pointer for passing a target down the stack; never touches counts."""

    def __init__(self, target=None):
        if isinstance(target, (RefPtr, Borrow)):
            target = target.get()
        self._ptr = target

    def cast(self, cls):
        """Borrow of the target if it is an instance of ``cls``, else a null borrow."""
        return Borrow(self._ptr if isinstance(self._ptr, cls) else None)

    def get(self):
        """The target, or None."""
        return self._ptr

    def promote(self) -> RefPtr[T]:
        """Owning pointer to the borrowed target."""
        return RefPtr(self._ptr)

    @staticmethod
    def compare(x, y):
        """Order two pointers by target identity: -1, 0 or 1."""
        return _compare(x, y)

    def __bool__(self):
        return self._ptr is not None

    def __eq__(self, other):
        if isinstance(other, (RefPtr, Borrow)):
            return self._ptr is other.get()
        return NotImplemented

    def __hash__(self):
        return hash(_addr(self._ptr))

    def __str__(self):
        return _text(self._ptr)

    def __repr__(self):
        return f"{type(self).__name__}({self._ptr!r})"