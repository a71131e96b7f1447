import pytest

from pos_core.errors import PreconditionViolation
from pos_core.services.currency import CurrencyRateStore, require_rate, to_local, to_usd


def test_default_rate_until_set(ctx):
    assert ctx.rates.get() == 40.0
    ctx.rates.set(36.5)
    assert ctx.rates.get() == 36.5


def test_rate_persists_for_new_store(ctx, conn):
    ctx.rates.set(50)
    assert CurrencyRateStore(conn, default_rate=1.0).get() == 50.0


@pytest.mark.parametrize('bad', [0, -2, 'abc', None])
def test_invalid_rate_is_rejected(ctx, bad):
    with pytest.raises(PreconditionViolation):
        ctx.rates.set(bad)
    assert ctx.rates.get() == 40.0


def test_conversions():
    assert to_local(10, 64.6116) == pytest.approx(646.116)
    assert to_usd(646.116, 64.6116) == pytest.approx(10.0)
    assert to_usd(to_local(12.34, 7.5), 7.5) == pytest.approx(12.34)


def test_conversion_needs_positive_rate():
    with pytest.raises(PreconditionViolation):
        to_local(1, 0)
    assert require_rate('2.5') == 2.5
