import pytest

from latticeviterbi import InternalConsistencyError, WindowBuffer


class _Recorder:
    """Iterable that counts how many elements have been pulled."""

    def __init__(self, items: list[int]) -> None:
        self.items = items
        self.pulled = 0

    def __iter__(self):
        for item in self.items:
            self.pulled += 1
            yield item


def test_get_reads_lazily() -> None:
    source = _Recorder(list(range(10)))
    window = WindowBuffer(source)

    assert window.get(3) == 3
    assert source.pulled == 4
    assert window.get(1) == 1
    assert source.pulled == 4


def test_get_past_end_reports_default() -> None:
    window = WindowBuffer(iter([1, 2]))

    assert window.get(5) is None
    assert window.exhausted
    assert window.get(2, default="end") == "end"
    assert window.get(7, default="end") == "end"
    assert window.get(1) == 2


def test_truncate_keeps_later_indices() -> None:
    window = WindowBuffer(iter("abcdef"))
    assert window.get(4) == "e"

    window.truncate(3)

    assert window.window_offset == 3
    assert window.retained == 2
    assert window.get(3) == "d"
    assert window.get(5) == "f"


def test_access_below_offset_fails_fast() -> None:
    window = WindowBuffer(iter("abcdef"))
    window.truncate(2)

    with pytest.raises(InternalConsistencyError):
        window.get(1)
    with pytest.raises(InternalConsistencyError):
        window.suffix(0)


def test_truncate_is_monotonic() -> None:
    window = WindowBuffer(iter(range(5)))
    window.truncate(3)
    window.truncate(1)

    assert window.window_offset == 3


def test_truncate_stops_at_end_of_input() -> None:
    window = WindowBuffer(iter(range(3)))
    window.truncate(10)

    assert window.window_offset == 3
    assert window.retained == 0
    assert window.get(3) is None


def test_truncate_reads_ahead_without_retaining() -> None:
    source = _Recorder(list(range(100)))
    window = WindowBuffer(source)
    for idx in range(100):
        assert window.get(idx) == idx
        window.truncate(idx)
        assert window.retained <= 1


def test_negative_index_is_invalid() -> None:
    window = WindowBuffer([1])
    with pytest.raises(InternalConsistencyError):
        window.get(-1)


def test_suffix_view() -> None:
    window = WindowBuffer(iter("abcdef"))
    suffix = window.suffix(2)

    assert suffix[0] == "c"
    assert suffix[:2] == ["c", "d"]
    assert suffix[1:10] == ["d", "e", "f"]
    assert list(suffix) == ["c", "d", "e", "f"]
    assert suffix[-1] == "f"
    assert len(suffix) == 4
    assert suffix.covers(3)
    assert not suffix.covers(4)
    with pytest.raises(IndexError):
        suffix[4]


def test_suffix_truthiness_does_not_drain() -> None:
    source = _Recorder(list(range(10)))
    window = WindowBuffer(source)

    assert window.suffix(2)
    assert source.pulled == 3
    assert not window.suffix(10)
    assert window.exhausted


def test_drain_returns_length() -> None:
    window = WindowBuffer(iter("abc"))
    window.truncate(2)

    assert window.drain() == 3
    assert window.window_offset == 2
