import threading

import pytest

from imageupload.services.rate_limit import UploadRateLimiter


def test_defaults():
    limiter = UploadRateLimiter()
    assert limiter.max_uploads == 10
    assert limiter.window_ms == 60_000
    assert limiter.can_upload()
    assert limiter.get_remaining_uploads() == 10


@pytest.mark.parametrize("max_uploads, window", [(0, 1), (-3, 1), (5, 0), (5, -1)])
def test_rejects_non_positive_arguments(max_uploads, window):
    with pytest.raises(ValueError):
        UploadRateLimiter(max_uploads, window)


def test_blocks_after_max_uploads(clock):
    limiter = UploadRateLimiter(3, 1, clock=clock)
    for _ in range(3):
        assert limiter.can_upload()
        limiter.record_upload()
        clock.advance(1)

    assert not limiter.can_upload()
    assert limiter.get_remaining_uploads() == 0


def test_window_slides(clock):
    limiter = UploadRateLimiter(2, 1, clock=clock)
    limiter.record_upload()
    clock.advance(30)
    limiter.record_upload()
    assert not limiter.can_upload()

    # first record is exactly one window old and falls out
    clock.advance(30)
    assert limiter.can_upload()
    assert limiter.get_remaining_uploads() == 1

    clock.advance(30)
    assert limiter.get_remaining_uploads() == 2


def test_fractional_window(clock):
    limiter = UploadRateLimiter(1, 0.5, clock=clock)
    limiter.record_upload()
    clock.advance(29)
    assert not limiter.can_upload()
    clock.advance(1)
    assert limiter.can_upload()


def test_record_without_check_overshoots(clock):
    limiter = UploadRateLimiter(1, 1, clock=clock)
    limiter.record_upload()
    limiter.record_upload()
    assert limiter.get_remaining_uploads() == 0
    assert not limiter.can_upload()


def test_reset(clock):
    limiter = UploadRateLimiter(1, 1, clock=clock)
    limiter.record_upload()
    limiter.reset()
    assert limiter.can_upload()


def test_concurrent_records_are_not_lost():
    limiter = UploadRateLimiter(1000, 1)

    def worker():
        for _ in range(100):
            limiter.record_upload()

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert limiter.get_remaining_uploads() == 200
