from decimal import Decimal

import pytest

from lpsift.application.valuation import passes_pool_gate, pool_value, qualify_holders
from lpsift.domain.errors import RPCError

from conftest import UNIT, FixedPrice, addr

POOL = addr(0x100)
THRESHOLD = Decimal(5_000)


@pytest.mark.asyncio
async def test_pool_value_is_supply_times_price(chain):
    chain.supply[POOL] = 5_000 * UNIT

    assert await pool_value(chain, FixedPrice(5), POOL) == Decimal(25_000)


@pytest.mark.asyncio
async def test_pool_value_honours_decimals(chain):
    chain.supply[POOL] = 1_500_000  # 1.5 tokens at 6 decimals

    assert await pool_value(chain, FixedPrice(5), POOL, decimals=6) == Decimal("7.5")


@pytest.mark.asyncio
async def test_pool_value_read_failure_counts_as_zero(chain, caplog):
    chain.supply[POOL] = RPCError("execution reverted")

    assert await pool_value(chain, FixedPrice(5), POOL) == 0
    assert POOL in caplog.text


@pytest.mark.parametrize("value,above,below", [
    (Decimal(25_000), True, False),
    (Decimal(20_000), False, False),
    (Decimal(19_999), False, True),
    (Decimal(0), False, True),
])
def test_pool_gate_polarity(value, above, below):
    assert passes_pool_gate(value, Decimal(20_000)) is above
    assert passes_pool_gate(value, Decimal(20_000), "above") is above
    assert passes_pool_gate(value, Decimal(20_000), "below") is below


def test_pool_gate_unknown_polarity():
    with pytest.raises(ValueError):
        passes_pool_gate(Decimal(1), Decimal(0), "sideways")


@pytest.mark.asyncio
async def test_holder_threshold_is_inclusive(chain):
    at, below, above = addr(1), addr(2), addr(3)
    chain.set_balance(POOL, at, 1_000 * UNIT)            # exactly $5000
    chain.set_balance(POOL, below, 1_000 * UNIT - 1)     # one unit short
    chain.set_balance(POOL, above, 1_200 * UNIT)         # $6000

    out = await qualify_holders(chain, POOL, [at, below, above], Decimal(5), threshold=THRESHOLD)

    assert [r.holder for r in out] == [at, above]
    assert out[0].holding_value == Decimal(5_000)
    assert out[1].balance == Decimal(1_200)
    assert all(r.pool == POOL for r in out)


@pytest.mark.asyncio
async def test_failed_holder_is_skipped_and_rest_continue(chain, caplog):
    bad, slow, good = addr(1), addr(2), addr(3)
    chain.set_balance(POOL, bad, RPCError("nope", "other"))
    chain.set_balance(POOL, slow, RPCError("t", "timeout"), RPCError("t", "timeout"), 2_000 * UNIT)
    chain.set_balance(POOL, good, 2_000 * UNIT)

    out = await qualify_holders(chain, POOL, [bad, slow, good], Decimal(5),
                                threshold=THRESHOLD, retry_delay=0)

    assert [r.holder for r in out] == [slow, good]
    assert chain.balance_calls.count((POOL, bad)) == 1
    assert chain.balance_calls.count((POOL, slow)) == 3
    assert f"Error fetching balance for {bad}" in caplog.text


@pytest.mark.asyncio
async def test_holder_dropped_after_exhausting_timeouts(chain):
    h = addr(1)
    chain.set_balance(POOL, h, RPCError("t", "timeout"))

    out = await qualify_holders(chain, POOL, [h], Decimal(5), threshold=THRESHOLD,
                                max_attempts=2, retry_delay=0)

    assert out == []
    assert chain.balance_calls == [(POOL, h), (POOL, h)]
