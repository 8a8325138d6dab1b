from conftest import ManualScheduler
from game.timer import DiscussionTimer


def make_timer(scheduler, duration=3):
    calls = []
    timer = DiscussionTimer(
        scheduler, duration,
        on_tick=lambda t, left: calls.append(('tick', left)),
        on_expire=lambda t: calls.append(('expire', None)),
        label='test'
    )
    return timer, calls


def test_counts_down_then_expires():
    scheduler = ManualScheduler()
    timer, calls = make_timer(scheduler)
    timer.start()
    assert timer.is_live
    assert len(scheduler.tasks) == 1

    scheduler.run_pending()
    assert calls == [('tick', 2), ('tick', 1), ('expire', None)]
    assert scheduler.sleeps == 3
    assert timer.finished
    assert not timer.is_live


def test_start_is_idempotent():
    scheduler = ManualScheduler()
    timer, _ = make_timer(scheduler)
    timer.start()
    timer.start()
    assert len(scheduler.tasks) == 1


def test_cancel_before_run_fires_nothing():
    scheduler = ManualScheduler()
    timer, calls = make_timer(scheduler)
    timer.start()
    timer.cancel()
    scheduler.run_pending()
    assert calls == []
    assert not timer.is_live


def test_cancel_mid_countdown():
    timer_box = []
    scheduler = ManualScheduler(on_sleep=lambda count: timer_box[0].cancel() if count == 2 else None)
    timer, calls = make_timer(scheduler, duration=5)
    timer_box.append(timer)
    timer.start()
    scheduler.run_pending()
    assert calls == [('tick', 4)]


def test_zero_duration_expires_immediately():
    scheduler = ManualScheduler()
    timer, calls = make_timer(scheduler, duration=0)
    timer.start()
    scheduler.run_pending()
    assert calls == [('expire', None)]
    assert scheduler.sleeps == 0
