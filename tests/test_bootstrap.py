from conftest import make_message
from maildraft.application.use_cases.bootstrap import select_latest_thread_keys
from maildraft.infrastructure.email.threading import derive_thread_key


def _pull():
    # three threads; thread "old" has the oldest activity
    return [
        make_message(1, "<old@x>", subject="old", sent_at=1_000),
        make_message(2, "<mid@x>", subject="mid", sent_at=2_000),
        make_message(3, "<mid-2@x>", subject="mid", sent_at=2_500),
        make_message(4, "<new@x>", subject="new", sent_at=3_000),
    ]


def test_window_counts_threads_not_messages():
    messages = _pull()
    keys = select_latest_thread_keys(messages, 2)
    assert keys == {derive_thread_key(messages[3]), derive_thread_key(messages[1])}


def test_limit_larger_than_threads():
    assert len(select_latest_thread_keys(_pull(), 10)) == 3


def test_empty_for_zero_limit_or_no_messages():
    assert select_latest_thread_keys(_pull(), 0) == set()
    assert select_latest_thread_keys([], 5) == set()
