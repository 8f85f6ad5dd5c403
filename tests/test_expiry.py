from datetime import datetime, timedelta, timezone

import pytest

from ictransport.expiry import Expiry, ExpiryKind

SPEC_TIME = datetime(2023, 5, 31, 22, 0, tzinfo=timezone.utc)
SPEC_NANOS = 1685570400000000000


def test_default_is_unspecified():
    assert Expiry() == Expiry.unspecified()
    assert Expiry().kind is ExpiryKind.UNSPECIFIED
    assert Expiry.unspecified().ingress_expiry(SPEC_TIME) is None


def test_at_gives_nanoseconds_since_epoch():
    assert Expiry.at(SPEC_TIME).ingress_expiry() == SPEC_NANOS


def test_at_ignores_now():
    expiry = Expiry.at(SPEC_TIME)
    assert expiry.ingress_expiry(SPEC_TIME + timedelta(days=3)) == expiry.ingress_expiry(SPEC_TIME)


def test_after_is_relative_to_now():
    delay = timedelta(minutes=5)
    assert Expiry.after(delay).ingress_expiry(SPEC_TIME) == Expiry.at(
        SPEC_TIME + delay
    ).ingress_expiry()


def test_after_zero_delay_equals_now():
    assert Expiry.after(timedelta(0)).ingress_expiry(SPEC_TIME) == SPEC_NANOS


def test_after_defaults_to_current_time():
    before = Expiry.at(datetime.now(timezone.utc)).ingress_expiry()
    value = Expiry.after(timedelta(seconds=1)).ingress_expiry()
    after = Expiry.at(datetime.now(timezone.utc) + timedelta(seconds=1)).ingress_expiry()
    assert before < value <= after


def test_naive_datetime_is_utc():
    naive = SPEC_TIME.replace(tzinfo=None)
    assert Expiry.at(naive) == Expiry.at(SPEC_TIME)
    assert Expiry.at(naive).ingress_expiry() == SPEC_NANOS


def test_other_timezone_is_same_instant():
    shifted = SPEC_TIME.astimezone(timezone(timedelta(hours=2)))
    assert Expiry.at(shifted).ingress_expiry() == SPEC_NANOS


def test_from_value():
    delay = timedelta(seconds=30)
    assert Expiry.from_value(delay) == Expiry.after(delay)
    assert Expiry.from_value(SPEC_TIME) == Expiry.at(SPEC_TIME)
    existing = Expiry.after(delay)
    assert Expiry.from_value(existing) is existing


@pytest.mark.parametrize("value", [5, "soon", None, 1.5])
def test_from_value_rejects_other_types(value):
    with pytest.raises(TypeError):
        Expiry.from_value(value)


def test_negative_delay_rejected():
    with pytest.raises(ValueError):
        Expiry.after(timedelta(seconds=-1))


def test_before_epoch_rejected():
    with pytest.raises(ValueError):
        Expiry.at(datetime(1960, 1, 1, tzinfo=timezone.utc)).ingress_expiry()


def test_ordering_by_kind_then_value():
    unspecified = Expiry.unspecified()
    short = Expiry.after(timedelta(seconds=1))
    long = Expiry.after(timedelta(seconds=2))
    fixed = Expiry.at(SPEC_TIME)
    assert sorted([fixed, long, unspecified, short]) == [unspecified, short, long, fixed]


def test_hashable_and_equal():
    assert len({Expiry.after(timedelta(seconds=1)), Expiry.after(timedelta(seconds=1))}) == 1
    assert Expiry.after(timedelta(seconds=1)) != Expiry.after(timedelta(seconds=2))