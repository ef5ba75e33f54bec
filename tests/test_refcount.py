import logging
import threading

import pytest

from refcnt.refcount import (
    Borrow,
    DoubleReleaseError,
    Refcount,
    RefPtr,
    add_ref,
    refcount,
    release,
    set_debug,
    type_name,
)


class JustRefcount(Refcount):
    ctor_count = 0
    dtor_count = 0

    def __init__(self):
        super().__init__()
        JustRefcount.ctor_count += 1

    def destroy(self):
        JustRefcount.dtor_count += 1

    def __str__(self):
        return "JustRefcount"


class Other(Refcount):
    pass


class Node(Refcount):
    def __init__(self, child=None):
        super().__init__()
        self.child = RefPtr(child)


class _Tally:
    """Counts JustRefcount constructions and destructions since creation."""

    def __init__(self):
        self._start = (JustRefcount.ctor_count, JustRefcount.dtor_count)

    def __call__(self):
        return (
            JustRefcount.ctor_count - self._start[0],
            JustRefcount.dtor_count - self._start[1],
        )


@pytest.fixture
def tally():
    return _Tally()


@pytest.fixture
def owned(tally):
    """Owning pointer to a fresh JustRefcount, created after the tally."""
    return RefPtr(JustRefcount())


def test_refcount_starts_at_zero():
    x = Refcount()
    assert (x.reference_counter(), refcount(x)) == (0, 0)


def test_null_pointers():
    p1, p2, p3 = RefPtr(), RefPtr(), RefPtr()
    assert (p1.get(), p2.get(), bool(p1)) == (None, None, False)
    assert p3.assign(p1).get() is None
    assert refcount(p1.get()) == 0
    add_ref(None)
    release(None)

    b1, b2 = p1.borrow(), p2.borrow()
    assert (b1.get(), bool(b1)) == (None, False)
    assert b1.promote().get() is p1.get()
    assert Borrow.compare(b1, b2) == 0


@pytest.mark.parametrize(
    "left, right",
    [
        (RefPtr(), RefPtr().borrow()),
        (RefPtr().borrow(), RefPtr()),
        (Borrow(), Borrow()),
    ],
)
def test_null_handles_compare_equal(left, right):
    assert left == right
    assert (left != right) is False


def test_identity(tally, owned):
    assert tally() == (1, 0)
    assert refcount(owned.get()) == 1

    add_ref(owned.get())
    assert refcount(owned.get()) == 2
    release(owned.get())
    assert refcount(owned.get()) == 1

    p2 = RefPtr(JustRefcount())
    assert tally() == (2, 0)
    assert p2.get() is not owned.get()
    assert p2.get().reference_counter() == 1

    b1 = owned.borrow()
    b2 = Borrow(b1)
    assert b1.get() is owned.get() and b2.get() is owned.get()
    assert owned.get().reference_counter() == 1
    assert tally() == (2, 0)


def test_release_destroys(tally, owned):
    owned.reset()
    assert owned.get() is None
    assert tally() == (1, 1)


def test_copy(tally, owned):
    p2 = owned.copy()
    assert p2.get() is owned.get()
    assert owned.get().reference_counter() == 2
    assert tally() == (1, 0)


def test_move(tally, owned):
    native = owned.get()
    p2 = owned.take()
    assert (owned.get(), p2.get()) == (None, native)
    assert native.reference_counter() == 1
    assert tally() == (1, 0)
    p2.reset()
    assert tally() == (1, 1)


@pytest.mark.parametrize("move", [False, True])
def test_assign(tally, owned, move):
    native = owned.get()
    p2 = RefPtr()
    p2.assign(owned.take() if move else owned)
    assert p2.get() is native
    assert native.reference_counter() == (1 if move else 2)
    owned.reset()
    assert native.reference_counter() == 1
    assert tally() == (1, 0)
    p2.reset()
    assert tally() == (1, 1)


def test_self_assign_keeps_object(tally, owned):
    owned.assign(owned)
    assert owned.get().reference_counter() == 1
    assert tally() == (1, 0)


def test_double_release_raises(tally):
    obj = JustRefcount()
    add_ref(obj)
    release(obj)
    assert tally() == (1, 1)
    with pytest.raises(DoubleReleaseError):
        release(obj)
    assert tally() == (1, 1)


def test_destroy_releases_owned_pointers(tally):
    leaf = JustRefcount()
    parent = RefPtr(Node(leaf))
    assert leaf.reference_counter() == 1
    parent.reset()
    assert tally() == (1, 1)


def test_aliasing_same_type_shares(owned):
    alias = RefPtr.aliasing(owned, owned.get())
    assert alias == owned
    assert owned.get().reference_counter() == 2


def test_aliasing_other_type_rejected(owned):
    with pytest.raises(TypeError):
        RefPtr.aliasing(owned, Other())
    assert owned.get().reference_counter() == 1


def test_borrow_cast():
    obj = JustRefcount()
    b = Borrow(obj)
    assert b.cast(JustRefcount).get() is obj
    assert b.cast(Other).get() is None
    assert obj.reference_counter() == 0


def test_compare_is_antisymmetric(owned):
    p2 = RefPtr(JustRefcount())
    assert RefPtr.compare(owned, p2) == -RefPtr.compare(p2, owned)
    assert RefPtr.compare(owned, owned) == 0
    assert RefPtr.compare(owned, p2) in (-1, 1)
    assert (owned == p2) is False


def test_equal_pointers_hash_equal(owned):
    assert hash(owned) == hash(owned.borrow())
    assert len({owned, owned.copy()}) == 1


def test_str(owned):
    assert (str(owned), str(owned.borrow())) == ("JustRefcount", "JustRefcount")
    assert (str(RefPtr()), str(Borrow())) == ("<nullptr>", "<nullptr>")


@pytest.mark.parametrize(
    "cls, expected", [(int, "int"), (RefPtr, "refcnt.refcount.RefPtr")]
)
def test_type_name(cls, expected):
    assert type_name(cls) == expected


def _logged_add_ref(caplog, obj):
    caplog.clear()
    with caplog.at_level(logging.DEBUG, logger="refcnt.refcount"):
        add_ref(obj)
    return any("add_ref" in r.getMessage() for r in caplog.records)


def test_debug_logging(caplog):
    obj = JustRefcount()
    set_debug(True)
    try:
        assert _logged_add_ref(caplog, obj) is True
    finally:
        set_debug(False)
    assert _logged_add_ref(caplog, obj) is False


def test_concurrent_add_release_balances(owned):
    obj = owned.get()

    def work():
        for _ in range(1000):
            add_ref(obj)
        for _ in range(1000):
            release(obj)

    threads = [threading.Thread(target=work) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert owned.get().reference_counter() == 1