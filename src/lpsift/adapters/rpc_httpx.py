from __future__ import annotations
import asyncio, logging, httpx
from typing import Any
from eth_utils import encode_hex, function_signature_to_4byte_selector
from ..domain.errors import RPCError
from ..domain.models import EventLog, LogFilter
from ..domain.value_types import Address
from ..ports.rpc import ContractReader, LogSource

log = logging.getLogger(__name__)

TOTAL_SUPPLY_SELECTOR = encode_hex(function_signature_to_4byte_selector("totalSupply()"))
BALANCE_OF_SELECTOR   = encode_hex(function_signature_to_4byte_selector("balanceOf(address)"))

# JSON-RPC 2.0 "method not found"
_METHOD_NOT_FOUND = -32601

def _to_hex_block(n: int) -> str: return hex(int(n))

def _encode_address_arg(addr: str) -> str:
    h = addr[2:] if addr[:2].lower() == "0x" else addr
    return h.lower().rjust(64, "0")

def _build_topics_param(log_filter: LogFilter) -> list[str | None]:
    out: list[str | None] = [t.lower() if t is not None else None for t in log_filter.topics]
    # trailing wildcards are implicit
    while out and out[-1] is None:
        out.pop()
    return out

def _parse_log(rl: dict[str, Any]) -> EventLog:
    topics = tuple(t.lower() for t in rl.get("topics", []))
    return EventLog(
        address=Address(rl["address"].lower()),
        topics=topics,
        data_hex=str(rl.get("data") or "0x"),
        block_number=int(rl["blockNumber"], 16),
        tx_hash=(rl.get("transactionHash") or "").lower(),
        log_index=int(rl["logIndex"], 16),
    )


class HttpxRPC(LogSource, ContractReader):
    """JSON-RPC client over httpx. Every failure leaves as a classified RPCError."""

    def __init__(
        self,
        rpc_url: str,
        timeout_s: float = 20,
        max_conn: int = 8,
        *,
        client: httpx.AsyncClient | None = None,
        rate_limit_retries: int = 3,
    ) -> None:
        self.rpc_url = rpc_url
        self.rate_limit_retries = rate_limit_retries
        self._id = 0
        self.client = client or httpx.AsyncClient(
            http2=True,
            timeout=httpx.Timeout(timeout_s),
            limits=httpx.Limits(max_connections=max_conn, max_keepalive_connections=max(1, max_conn//2)),
        )

    async def __aenter__(self) -> "HttpxRPC":
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self.client.aclose()

    async def _request(self, method: str, params: list[Any]) -> Any:
        self._id += 1
        payload = {"jsonrpc": "2.0", "id": self._id, "method": method, "params": params}
        # retry on 429 with simple backoff
        for attempt in range(self.rate_limit_retries):
            try:
                r = await self.client.post(self.rpc_url, json=payload)
            except httpx.TimeoutException as e:
                raise RPCError(f"{method} timed out: {type(e).__name__}", "timeout") from e
            except httpx.HTTPError as e:
                raise RPCError(f"{method} transport error: {type(e).__name__}: {e}") from e
            if r.status_code == 429:
                ra = r.headers.get("Retry-After")
                delay = max(1.0, float(ra)) if ra and ra.isdigit() else (1.0 * (2**attempt))
                log.warning("%s rate limited (attempt %d/%d), sleeping %.1fs",
                            method, attempt + 1, self.rate_limit_retries, delay)
                await asyncio.sleep(delay); continue
            if r.status_code == 404:
                raise RPCError(f"{method}: HTTP 404 from {self.rpc_url}", "not_found")
            if r.status_code >= 400:
                raise RPCError(f"{method}: HTTP {r.status_code}")
            try:
                data = r.json()
            except ValueError as e:
                raise RPCError(f"{method}: malformed JSON response") from e
            if not isinstance(data, dict):
                raise RPCError(f"{method}: unexpected response {data!r}")
            if "error" in data:
                err = data["error"]
                code = err.get("code") if isinstance(err, dict) else None
                msg = err.get("message") if isinstance(err, dict) else str(err)
                kind = "not_found" if code == _METHOD_NOT_FOUND else "other"
                raise RPCError(f"{method} RPC error code={code} message={msg}", kind)
            return data.get("result")
        raise RPCError(f"Retries exhausted for {method} (rate limited)")

    async def latest_block(self) -> int:
        res = await self._request("eth_blockNumber", [])
        try:
            return int(res, 16)
        except (TypeError, ValueError) as e:
            raise RPCError(f"eth_blockNumber: bad result {res!r}") from e

    async def get_logs(self, log_filter: LogFilter, from_block: int, to_block: int) -> list[EventLog]:
        res = await self._request("eth_getLogs", [{
            "address": str(log_filter.address).lower(),
            "fromBlock": _to_hex_block(from_block),
            "toBlock": _to_hex_block(to_block),
            "topics": _build_topics_param(log_filter),
        }])
        try:
            return [_parse_log(rl) for rl in (res or [])]
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise RPCError(f"eth_getLogs: malformed log in {from_block}-{to_block}: {e}") from e

    async def _call_uint(self, to: Address, data: str) -> int:
        res = await self._request("eth_call", [{"to": str(to), "data": data}, "latest"])
        if not isinstance(res, str):
            raise RPCError(f"eth_call to {to}: bad result {res!r}")
        h = res[2:] if res[:2].lower() == "0x" else res
        if not h:
            # no code at `to`, or the function does not exist
            raise RPCError(f"eth_call to {to} returned no data", "not_found")
        try:
            return int(h[:64], 16)
        except ValueError as e:
            raise RPCError(f"eth_call to {to}: bad result {res!r}") from e

    async def total_supply(self, token: Address) -> int:
        return await self._call_uint(token, TOTAL_SUPPLY_SELECTOR)

    async def balance_of(self, token: Address, owner: Address) -> int:
        return await self._call_uint(token, BALANCE_OF_SELECTOR + _encode_address_arg(owner))
