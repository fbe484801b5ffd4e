from datetime import timedelta

import pytest

from octoproto.options import (
    DEFAULT_CONNECTION_TIMEOUT,
    DEFAULT_POOL_SIZE,
    ConnectionOptions,
    ServerMode,
    with_intervals,
    with_pool_size,
    with_timeout,
)


@pytest.mark.parametrize(
    "opts, expected",
    [
        ([], "ff9ed3cc"),
        ([with_timeout(0.05, 0.1)], "f855b29a"),
        ([with_timeout(0.05, 0.1), with_intervals(50, 50, 50)], "fdef5d9b"),
    ],
)
def test_connection_id_matches_source_cases(opts, expected):
    options = ConnectionOptions("127.0.0.1", ServerMode.MASTER, *opts)
    assert options.get_connection_id() == expected


def test_same_options_give_same_id():
    first = ConnectionOptions("127.0.0.1", ServerMode.MASTER)
    second = ConnectionOptions("127.0.0.1", ServerMode.MASTER)
    assert first.get_connection_id() == second.get_connection_id() == "ff9ed3cc"


def test_timedelta_durations_hash_like_seconds():
    options = ConnectionOptions(
        "127.0.0.1",
        ServerMode.MASTER,
        with_timeout(timedelta(milliseconds=50), timedelta(milliseconds=100)),
    )
    assert options.get_connection_id() == "f855b29a"


def test_empty_server_is_rejected():
    with pytest.raises(ValueError, match="server is empty"):
        ConnectionOptions("", ServerMode.MASTER, with_timeout(0.05, 0.1))


def test_hash_frozen_after_id_read():
    options = ConnectionOptions("127.0.0.1")
    options.get_connection_id()
    with pytest.raises(RuntimeError):
        options.update_hash("x")


def test_defaults_and_mode():
    options = ConnectionOptions("127.0.0.1:11211", ServerMode.REPLICA)
    assert options.instance_mode() == ServerMode.REPLICA
    assert options.pool_config.size == DEFAULT_POOL_SIZE
    assert options.pool_config.connect_timeout == DEFAULT_CONNECTION_TIMEOUT


def test_options_change_pool_config():
    options = ConnectionOptions(
        "127.0.0.1",
        ServerMode.MASTER,
        with_timeout(0.05, 0.1),
        with_intervals(1, 2, 3),
        with_pool_size(5),
    )
    pool = options.pool_config
    assert pool.size == 5
    assert pool.connect_timeout == pytest.approx(0.1)
    assert pool.dial_timeout == pytest.approx(0.1)
    assert pool.channel_config.request_timeout == pytest.approx(0.05)
    assert pool.channel_config.write_timeout == pytest.approx(0.05)
    assert (pool.redial_interval, pool.max_redial_interval) == (1, 2)
    assert pool.channel_config.ping_interval == 3


def test_pool_size_feeds_connection_id():
    plain = ConnectionOptions("127.0.0.1").get_connection_id()
    sized = ConnectionOptions("127.0.0.1", ServerMode.MASTER, with_pool_size(3))
    sized_again = ConnectionOptions("127.0.0.1", ServerMode.MASTER, with_pool_size(3))
    sized_id = sized.get_connection_id()
    assert sized_id == sized_again.get_connection_id()
    assert len(sized_id) == 8
    assert sized_id != plain


def test_unsupported_hash_value():
    options = ConnectionOptions("127.0.0.1")
    with pytest.raises(TypeError):
        options.update_hash(object())