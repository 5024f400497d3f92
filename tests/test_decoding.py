import pytest

from lpsift.domain.decoding import (
    PAIR_CREATED_T0, TRANSFER_T0, ZERO_TOPIC, address_topic, decode_pair_created, decode_transfer,
)
from lpsift.domain.errors import DecodeError

from conftest import addr, mint_log, pair_created_log


def test_topic_constants():
    assert TRANSFER_T0 == "0xddf252ad1be2c89b69c2b068fc378daa952ba7f163c4a11628f55a4df523b3ef"
    assert PAIR_CREATED_T0 == "0x0d3648bd0f6ba80134a33ba9275ac585d9d315f0ad8355cddefde31afa28d0e9"
    assert ZERO_TOPIC == "0x" + "0" * 64


def test_address_topic_pads_and_lowercases():
    raw = "0xABCDEF" + "0" * 33 + "1"
    assert address_topic(raw) == "0x" + "0" * 24 + "abcdef" + "0" * 33 + "1"
    with pytest.raises(ValueError):
        address_topic("0x1234")


def test_decode_pair_created():
    ev = decode_pair_created(pair_created_log(addr(7), 1, index=12))
    assert ev.pair == addr(7)
    assert ev.token0 == addr(0xAA)
    assert ev.token1 == addr(0xBB)
    assert ev.index == 12


def test_decode_transfer():
    ev = decode_transfer(mint_log(addr(1), addr(2), 10**18, 5))
    assert ev.sender == "0x0000000000000000000000000000000000000000"
    assert ev.recipient == addr(2)
    assert ev.value == 10**18


def test_wrong_event_rejected():
    with pytest.raises(DecodeError):
        decode_transfer(pair_created_log(addr(7), 1))
    with pytest.raises(DecodeError):
        decode_pair_created(mint_log(addr(1), addr(2), 1, 5))
