from ensemble.performance_window import PerformanceWindow


def test_record_and_recent_performance():
    window = PerformanceWindow(max_size=5)
    window.record('gap', 0.7, True)
    window.record('gap', 0.4, False)
    window.record('temporal', 0.9, 1)
    assert window.recent_performance('gap') == [1, 0]
    assert window.history('gap') == ([0.7, 0.4], [1, 0])
    assert window.algorithms() == ['gap', 'temporal']
    assert len(window) == 3


def test_window_drops_oldest():
    window = PerformanceWindow(max_size=3)
    for i in range(5):
        window.record('seq', i / 10, i % 2 == 0)
    confidences, accuracies = window.history('seq')
    assert confidences == [0.2, 0.3, 0.4]
    assert accuracies == [1, 0, 1]


def test_unknown_algorithm_is_empty():
    window = PerformanceWindow()
    assert window.max_size == 100
    assert window.recent_performance('none') == []
    assert window.history('none') == ([], [])


def test_clear():
    window = PerformanceWindow()
    window.record('a', 0.5, True)
    window.record('b', 0.5, False)
    window.clear('a')
    assert window.algorithms() == ['b']
    window.clear()
    assert len(window) == 0


def test_zero_size_window_keeps_nothing():
    window = PerformanceWindow(max_size=0)
    assert window.max_size == 0
    window.record('gap', 0.7, True)
    assert window.recent_performance('gap') == []
