from __future__ import annotations

from eth_utils import encode_hex, event_signature_to_log_topic, to_checksum_address

from .errors import DecodeError
from .models import EventLog, PairCreated, Transfer
from .value_types import Address, Topic


# Topic0 constants (lowercase, with 0x)
PAIR_CREATED_T0 = Topic(encode_hex(event_signature_to_log_topic("PairCreated(address,address,address,uint256)")))
TRANSFER_T0     = Topic(encode_hex(event_signature_to_log_topic("Transfer(address,address,uint256)")))

ZERO_ADDRESS = Address("0x0000000000000000000000000000000000000000")


def address_topic(addr: str) -> Topic:
    """Left-pad a 20-byte address into a 32-byte indexed topic."""
    h = addr[2:] if addr[:2].lower() == "0x" else addr
    if len(h) != 40:
        raise ValueError(f"not an address: {addr!r}")
    return Topic("0x" + h.lower().rjust(64, "0"))

ZERO_TOPIC = address_topic(ZERO_ADDRESS)


def _data_bytes(data_hex: str) -> bytes:
    h = data_hex[2:] if data_hex[:2].lower() == "0x" else data_hex
    if len(h) % 2: h = "0" + h
    return bytes.fromhex(h) if h else b""

def _word(b: bytes, i: int) -> bytes: o = i*32; return b[o:o+32]
def _addr_from_word(w: bytes) -> Address: return Address(to_checksum_address("0x" + w[-20:].hex()))
def _addr_from_topic(t: str) -> Address: return Address(to_checksum_address("0x" + t[-40:]))


def decode_pair_created(ev: EventLog) -> PairCreated:
    # PairCreated(address indexed token0, address indexed token1, address pair, uint)
    if len(ev.topics) < 3 or ev.topics[0] != PAIR_CREATED_T0:
        raise DecodeError(f"not a PairCreated log: tx={ev.tx_hash} idx={ev.log_index}")
    data = _data_bytes(ev.data_hex)
    if len(data) < 32 * 2:
        raise DecodeError(f"PairCreated data too short ({len(data)} bytes): tx={ev.tx_hash}")
    return PairCreated(
        token0=_addr_from_topic(ev.topics[1]),
        token1=_addr_from_topic(ev.topics[2]),
        pair=_addr_from_word(_word(data, 0)),
        index=int.from_bytes(_word(data, 1), "big"),
    )


def decode_transfer(ev: EventLog) -> Transfer:
    # Transfer(address indexed from, address indexed to, uint256 value)
    if len(ev.topics) < 3 or ev.topics[0] != TRANSFER_T0:
        raise DecodeError(f"not a Transfer log: tx={ev.tx_hash} idx={ev.log_index}")
    data = _data_bytes(ev.data_hex)
    if len(data) < 32:
        raise DecodeError(f"Transfer data too short ({len(data)} bytes): tx={ev.tx_hash}")
    return Transfer(
        sender=_addr_from_topic(ev.topics[1]),
        recipient=_addr_from_topic(ev.topics[2]),
        value=int.from_bytes(_word(data, 0), "big"),
    )
