import pytest

from ccagent.stuck import StuckDetector


@pytest.mark.unit
class TestStuckDetector:
    def test_oscillation_fires_on_sixth_position(self):
        det = StuckDetector(revisit_limit=99)
        signals = [det.record(p) for p in [(0, 0), (0, 1)] * 3]
        assert signals == [False] * 5 + [True]
        assert det.is_oscillating()

    def test_corridor_walk_never_fires(self):
        det = StuckDetector()
        signals = [det.record((0, c)) for c in range(12)]
        assert not any(signals)

    def test_revisit_signal(self):
        det = StuckDetector()
        seq = [(0, 0), (0, 1), (0, 2), (0, 1), (0, 0), (1, 0), (0, 0)]
        signals = [det.record(p) for p in seq]
        assert signals[-1] is True
        assert det.is_revisiting((0, 0))
        assert not det.is_oscillating()

    def test_not_sticky(self):
        det = StuckDetector(revisit_limit=99)
        for p in [(0, 0), (0, 1)] * 3:
            det.record(p)
        assert det.is_oscillating()
        # a third cell breaks the two-cell pattern on the very next tick
        assert det.record((0, 2)) is False
        assert not det.is_oscillating()

    def test_window_is_capped(self):
        det = StuckDetector(history_size=10)
        for c in range(25):
            det.record((0, c))
        assert len(det.recent()) == 10
        assert det.recent()[0] == (0, 15)

    def test_recently_visited(self):
        det = StuckDetector()
        for c in range(3):
            det.record((0, c))
        # not enough history yet
        assert not det.recently_visited((0, 2))
        det.record((0, 3))
        assert det.recently_visited((0, 1))
        assert det.recently_visited((0, 3))
        assert not det.recently_visited((0, 0))
