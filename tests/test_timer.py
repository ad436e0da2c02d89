from games.timer import CountdownTimer


def make_timer(scheduler, duration=3):
    ticks, completions = [], []
    timer = CountdownTimer(scheduler, duration,
                           on_tick=ticks.append,
                           on_complete=lambda: completions.append(scheduler.time()))
    return timer, ticks, completions


def test_ticks_every_interval_and_completes_once(scheduler):
    timer, ticks, completions = make_timer(scheduler)
    timer.start()

    scheduler.advance(3)
    assert ticks == [2, 1, 0]
    assert completions == [3.0]
    assert not timer.is_running()

    scheduler.advance(10)
    assert ticks == [2, 1, 0]
    assert len(completions) == 1


def test_nothing_fires_after_stop(scheduler):
    timer, ticks, completions = make_timer(scheduler)
    timer.start()
    scheduler.advance(1)
    timer.stop()

    scheduler.advance(10)
    assert ticks == [2]
    assert completions == []
    assert timer.get_remaining() == 2


def test_start_after_stop_resumes_from_remaining(scheduler):
    timer, ticks, completions = make_timer(scheduler)
    timer.start()
    scheduler.advance(1)
    timer.stop()
    timer.start()

    scheduler.advance(2)
    assert ticks == [2, 1, 0]
    assert len(completions) == 1


def test_start_while_running_is_noop(scheduler):
    timer, ticks, _ = make_timer(scheduler)
    timer.start()
    timer.start()

    scheduler.advance(1)
    assert ticks == [2]


def test_reset_restores_duration(scheduler):
    timer, ticks, _ = make_timer(scheduler, duration=5)
    timer.start()
    scheduler.advance(2)
    timer.reset()

    assert not timer.is_running()
    assert timer.get_remaining() == 5
    scheduler.advance(5)
    assert ticks == [4, 3]


def test_restart_after_completion_runs_full_duration(scheduler):
    timer, ticks, completions = make_timer(scheduler, duration=2)
    timer.start()
    scheduler.advance(2)
    timer.start()
    scheduler.advance(2)

    assert ticks == [1, 0, 1, 0]
    assert len(completions) == 2


def test_stopping_from_tick_prevents_completion(scheduler):
    completions = []
    timer = None

    def on_tick(remaining):
        if remaining == 1:
            timer.stop()

    timer = CountdownTimer(scheduler, 3, on_tick=on_tick, on_complete=lambda: completions.append(True))
    timer.start()
    scheduler.advance(10)

    assert completions == []
    assert timer.get_remaining() == 1
