import io
from unittest import mock

import pytest

from m65net.hal import debug_msg, usleep


def test_usleep_short_waits_do_not_sleep():
    with mock.patch("m65net.hal.time.sleep") as sleep:
        assert usleep(0) == 0
        assert usleep(64) == 0
        assert sleep.call_count == 0


@pytest.mark.parametrize("micros", [65, 128, 129, 1000, 5000])
def test_usleep_rounds_to_raster_lines(micros):
    with mock.patch("m65net.hal.time.sleep") as sleep:
        slept = usleep(micros)
    assert slept % 64 == 0
    assert micros - 64 <= slept < micros
    assert sleep.call_args == mock.call(pytest.approx(slept / 1_000_000))


def test_debug_msg_writes_to_stream():
    out = io.StringIO()
    debug_msg("ready", out)
    assert out.getvalue() == "\rready"