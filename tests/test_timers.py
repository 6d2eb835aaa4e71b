def test_fires_only_when_due(timers, clock):
    fired = []
    timers.schedule(500, lambda: fired.append("a"))
    clock.advance(0.45)
    assert timers.pump() == 0
    clock.advance(0.1)
    assert timers.pump() == 1
    assert fired == ["a"]
    assert timers.pending == 0

def test_deadline_order_and_fifo_ties(timers, clock):
    fired = []
    timers.schedule(300, lambda: fired.append("late"))
    timers.schedule(100, lambda: fired.append("first"))
    timers.schedule(100, lambda: fired.append("second"))
    clock.advance(1.0)
    timers.pump()
    assert fired == ["first", "second", "late"]

def test_cancelled_handle_never_fires_even_if_overdue(timers, clock):
    fired = []
    h = timers.schedule(100, lambda: fired.append("x"))
    clock.advance(5.0)   # already due, not pumped yet
    timers.cancel(h)
    assert timers.pump() == 0
    assert fired == []
    assert h.cancelled and not h.fired

def test_cancel_from_earlier_callback_in_same_pump(timers, clock):
    fired = []
    later = None
    def first():
        fired.append("first")
        timers.cancel(later)
    timers.schedule(100, first)
    later = timers.schedule(200, lambda: fired.append("later"))
    clock.advance(1.0)
    timers.pump()
    assert fired == ["first"]

def test_schedule_relative_to_explicit_start(timers, clock):
    start = clock()
    clock.advance(0.2)
    h = timers.schedule(500, lambda: None, now=start)
    assert h.deadline == start + 0.5

def test_clear_cancels_everything(timers, clock):
    fired = []
    hs = [timers.schedule(d, lambda: fired.append(1)) for d in (0, 10, 20)]
    timers.clear()
    clock.advance(1)
    assert timers.pump() == 0
    assert all(h.cancelled for h in hs)
    assert timers.pending == 0
