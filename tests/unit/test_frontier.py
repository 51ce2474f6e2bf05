# Frontier Unit Tests
"""
フロンティア実装の単体テスト
"""

import pytest

from tansaku.frontier import (
    BoundedFrontier,
    FifoFrontier,
    Frontier,
    LifoFrontier,
    RankedFrontier,
    check_size,
)


class TestFrontierProtocol:
    """Frontier プロトコルのテスト"""

    @pytest.mark.parametrize("cls", [FifoFrontier, LifoFrontier, RankedFrontier])
    def test_implementations_satisfy_protocol(self, cls):
        assert isinstance(cls(), Frontier)
        assert isinstance(cls(), BoundedFrontier)

    def test_plain_list_is_not_a_frontier(self):
        assert not isinstance([], Frontier)

    def test_truncate_is_only_required_for_bounded(self):
        class Minimal:
            def add_all(self, candidates): ...
            def __len__(self): return 0
            def poll(self, n): return []
            def clear(self): ...

        assert isinstance(Minimal(), Frontier)
        assert not isinstance(Minimal(), BoundedFrontier)

    def test_check_size(self):
        assert check_size(0) == 0
        assert check_size(5) == 5
        with pytest.raises(ValueError):
            check_size(-1)
        with pytest.raises(TypeError):
            check_size(1.5)
        with pytest.raises(TypeError):
            check_size(True)


class TestFifoFrontier:
    """FifoFrontier のテスト"""

    def test_poll_oldest_first(self):
        frontier = FifoFrontier()
        frontier.add_all([1, 2, 3])
        frontier.add_all([4])
        assert frontier.poll(2) == [1, 2]
        assert frontier.poll(5) == [3, 4]
        assert len(frontier) == 0

    def test_poll_more_than_available(self):
        frontier = FifoFrontier([1])
        assert frontier.poll(10) == [1]
        assert frontier.poll(10) == []

    def test_truncate_drops_newest(self):
        frontier = FifoFrontier([1, 2, 3, 4, 5])
        assert frontier.truncate(3) == [4, 5]
        assert len(frontier) == 3
        assert frontier.poll(3) == [1, 2, 3]

    def test_truncate_noop_when_small(self):
        frontier = FifoFrontier([1, 2])
        assert frontier.truncate(5) == []
        assert len(frontier) == 2

    def test_truncate_to_zero(self):
        frontier = FifoFrontier([1, 2])
        assert frontier.truncate(0) == [1, 2]
        assert len(frontier) == 0

    def test_peek_and_clear(self):
        frontier = FifoFrontier()
        assert frontier.peek() is None
        frontier.add_all("ab")
        assert frontier.peek() == "a"
        frontier.clear()
        assert len(frontier) == 0

    def test_negative_size_rejected(self):
        frontier = FifoFrontier([1])
        with pytest.raises(ValueError):
            frontier.poll(-1)
        with pytest.raises(ValueError):
            frontier.truncate(-1)


class TestLifoFrontier:
    """LifoFrontier のテスト"""

    def test_poll_newest_first(self):
        frontier = LifoFrontier()
        frontier.add_all([1, 2, 3])
        assert frontier.poll(2) == [3, 2]
        frontier.add_all([4])
        assert frontier.poll(5) == [4, 1]

    def test_truncate_keeps_newest(self):
        frontier = LifoFrontier([1, 2, 3, 4, 5])
        discarded = frontier.truncate(2)
        # 捨てた候補は取り出し順
        assert discarded == [3, 2, 1]
        assert frontier.poll(2) == [5, 4]

    def test_truncate_noop_when_small(self):
        frontier = LifoFrontier([1])
        assert frontier.truncate(1) == []
        assert frontier.peek() == 1


class TestRankedFrontier:
    """RankedFrontier のテスト"""

    def test_poll_lowest_rank_first(self):
        frontier = RankedFrontier()
        frontier.add_all([5, 1, 4, 2])
        assert frontier.poll(3) == [1, 2, 4]

    def test_reverse(self):
        frontier = RankedFrontier(reverse=True, candidates=[5, 1, 4, 2])
        assert frontier.poll(2) == [5, 4]

    def test_key_function(self):
        frontier = RankedFrontier(key=len)
        frontier.add_all(["ccc", "a", "bb"])
        assert frontier.poll(3) == ["a", "bb", "ccc"]

    def test_ties_keep_insertion_order(self):
        frontier = RankedFrontier(key=lambda pair: pair[0])
        frontier.add_all([(1, "x"), (0, "y"), (1, "z"), (0, "w")])
        assert frontier.poll(4) == [(0, "y"), (0, "w"), (1, "x"), (1, "z")]

    def test_truncate_keeps_best(self):
        frontier = RankedFrontier(candidates=[7, 3, 9, 1, 5])
        assert frontier.truncate(2) == [5, 7, 9]
        assert len(frontier) == 2
        frontier.add_all([2])
        assert frontier.poll(3) == [1, 2, 3]

    def test_unorderable_candidates_with_key(self):
        frontier = RankedFrontier(key=lambda d: d["cost"])
        frontier.add_all([{"cost": 2}, {"cost": 1}])
        assert frontier.peek() == {"cost": 1}
