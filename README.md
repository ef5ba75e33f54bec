# refcnt

Explicit, intrusive reference counting for Python objects.

Python manages memory on its own, but some designs need a lifetime that
the program controls: pooled resources, caches that must release entries
at a known moment, or objects whose teardown has to run the instant the
last owner lets go. `refcnt` provides that. Every object carries its own
counter, and three kinds of handle work with it:

- `RefPtr` (in `refcnt.refcount`) is an owning handle. It adds a reference
  when it takes hold of a target and drops it when it lets go. When the
  count falls from one to zero, the target's `destroy()` hook runs.
- `Borrow` (in `refcnt.refcount`) is a non-owning view. You pass it down a
  call stack without touching the count, and you can `promote()` it to an
  owning `RefPtr` whenever you need one.
- `UnownedPtr` (in `refcnt.unowned`) is a plain holder for a target that
  something else owns.

The package has no dependencies outside the standard library.

## Installation

```
pip install refcnt
```

## Defining a counted type

```python
from refcnt.refcount import Refcount


class Connection(Refcount):
    def __init__(self, name):
        super().__init__()
        self.name = name
        self.closed = False

    def destroy(self):
        self.closed = True
```

A new `Refcount` starts with a count of zero; `reference_counter()`
returns the current count. `destroy()` is called once, when the last
owning reference is released. The default `destroy()` resets every
`RefPtr` held directly as an attribute of the object, so whatever the
object owned is released along with it. Each object guards its counter
with its own lock, so handles may be used from several threads.

## Owning pointers

```python
from refcnt.refcount import RefPtr

p1 = RefPtr(Connection("db"))
assert p1.get().reference_counter() == 1

p2 = p1.copy()                 # a second owner
assert p1.get().reference_counter() == 2

p3 = p2.take()                 # move: p2 is now empty, the count is unchanged
assert not p2
assert p3.get().reference_counter() == 2

p1.reset(None)                 # drop one owner
conn = p3.get()
p3.reset(None)                 # last owner gone: destroy() runs
assert conn.closed
```

- `RefPtr()` or `RefPtr(None)` is an empty handle; it is false.
- `reset(target)` points the handle at `target` (empty by default) and
  releases the old target. `assign(other)` points it at whatever `other`
  points at. Both return the handle itself.
- When a `RefPtr` is garbage-collected it releases the reference it holds.
- `==` is true when two handles (`RefPtr` or `Borrow`) point at the same
  object. `RefPtr.compare(x, y)` orders two handles by target identity and
  returns `-1`, `0` or `1`; two empty handles compare equal. Handles hash
  by target identity.
- `str()` of a handle is `str()` of its target, or `<nullptr>` when it is
  empty.

`RefPtr.aliasing(other, target)` builds a new owning handle to `target`
alongside `other`. Only trivial aliasing is supported: if both `other`'s
target and `target` are present and their types differ, it raises
`TypeError`.

## Borrowed pointers

```python
from refcnt.refcount import Borrow

owner = RefPtr(Connection("cache"))
view = owner.borrow()          # the count stays at 1
assert view.get() is owner.get()
assert view == owner

again = view.promote()         # a new owning handle; the count is now 2
assert owner.get().reference_counter() == 2
```

`Borrow` can be built from a target, from `None`, or from another `RefPtr`
or `Borrow`. `Borrow(None)` is an empty, false borrow. `view.cast(SomeClass)`
returns a borrow of the same target if it is an instance of `SomeClass`,
and an empty borrow otherwise. `Borrow.compare`, `==`, hashing and `str()`
behave as for `RefPtr`.

## Low-level helpers

The module-level functions `refcount(x)`, `add_ref(x)` and `release(x)`
work directly on a target. Each accepts `None` and does nothing with it
(`refcount(None)` returns `0`). Releasing an object whose last reference
is already gone raises `DoubleReleaseError`, a subclass of `RuntimeError`.

`set_debug(True)` turns on debug-level logging of every `add_ref` and
`release` through the standard `logging` module (logger
`refcnt.refcount`). `type_name(cls)` gives the module-qualified name of a
type, as used in error messages.

## Displayable objects

`Displayable` (in `refcnt.displayable`) is an abstract `Refcount` whose
subclasses implement `display(stream)` to write a description of
themselves to a text stream. `display_string()` collects that into a
string, and `str()` of the object returns the same.

```python
from refcnt.displayable import Displayable


class Point(Displayable):
    def __init__(self, x, y):
        super().__init__()
        self.x, self.y = x, y

    def display(self, stream):
        stream.write(f"<Point {self.x} {self.y}>")


assert Point(1, 2).display_string() == "<Point 1 2>"
assert str(RefPtr(Point(3, 4))) == "<Point 3 4>"
```

## Unowned pointers

```python
from refcnt.unowned import UnownedPtr

target = Connection("log")
holder = UnownedPtr(target)
assert holder.get() is target
assert target.reference_counter() == 0   # never counted
assert not UnownedPtr(None)
```

`UnownedPtr` never changes the count and never destroys its target. Two
`UnownedPtr` handles are equal when they hold the same object;
`UnownedPtr.compare`, hashing and `str()` work as for the other handles.

## Running the tests

```
pip install -e ".[test]"
pytest
```