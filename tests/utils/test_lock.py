import pytest
from unittest.mock import patch, MagicMock
from sms2fa.utils.lock import session_lock

@patch("sms2fa.utils.lock.get_redis")
def test_lock_acquire_and_release(mock_get_redis):
    mr = MagicMock()
    mr.set.return_value = True
    mock_get_redis.return_value = mr

    with session_lock("s1", ttl_ms=1000):
        args, kwargs = mr.set.call_args
        assert args[0] == "lock:authsession:s1"
        assert kwargs == {"px": 1000, "nx": True}

    # released with the same token it was taken with
    eval_args = mr.eval.call_args.args
    assert eval_args[2] == "lock:authsession:s1"
    assert eval_args[3] == args[1]

@patch("sms2fa.utils.lock.time.sleep")
@patch("sms2fa.utils.lock.get_redis")
def test_lock_contention_gives_up(mock_get_redis, mock_sleep):
    mr = MagicMock()
    mr.set.return_value = None
    mock_get_redis.return_value = mr

    with pytest.raises(RuntimeError):
        with session_lock("s1", retries=2):
            pass
    assert mr.set.call_count == 3
    mr.eval.assert_not_called()
