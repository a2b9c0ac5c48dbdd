import base64
import ssl
from typing import Any, Dict, List, Optional, Tuple, Union

import httpx
from loguru import logger

from ..core.base import Amount, Network, Unit
from ..core.errors import BackendConnectionError, LndRpcError
from ..core.settings import settings
from .macaroon import load_macaroon
from .protocols import (
    AddInvoiceData,
    LndChannelInfo,
    LndPaymentResult,
    LndPeer,
    OutPoint,
    WalletBalance,
)


def _b64(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


def _unb64(data: Optional[str]) -> bytes:
    return base64.b64decode(data) if data else b""


class LndRestNode:
    """LND reached through its REST proxy.

    https://lightning.engineering/api-docs/api/lnd/
    """

    def __init__(
        self,
        address: str,
        network: Union[Network, str],
        macaroon_path: str,
        tls_path: Optional[str] = None,
        tls_verify: bool = True,
    ):
        if not address:
            raise BackendConnectionError("cannot initialize LndRestNode: no address")
        if not macaroon_path:
            raise BackendConnectionError("cannot initialize LndRestNode: no macaroon")

        self.network = Network(network)
        address = address[:-1] if address.endswith("/") else address
        self.endpoint = (
            f"https://{address}" if not address.startswith("http") else address
        )
        self.macaroon = load_macaroon(macaroon_path)

        verify: Union[bool, ssl.SSLContext] = True
        if not tls_verify:
            logger.warning("certificate validation will be disabled for LndRestNode")
            verify = False
        elif tls_path:
            verify = ssl.create_default_context(cafile=tls_path)
        else:
            logger.warning(
                "no certificate for LndRestNode provided, this only works if you"
                " have a publicly issued certificate"
            )

        self.client = httpx.AsyncClient(
            base_url=self.endpoint,
            headers={"Grpc-Metadata-macaroon": self.macaroon},
            verify=verify,
        )

    @classmethod
    async def create(
        cls,
        address: str,
        network: Union[Network, str],
        macaroon_path: str,
        tls_path: Optional[str] = None,
    ) -> "LndRestNode":
        node = cls(
            address,
            network,
            macaroon_path,
            tls_path,
            tls_verify=settings.lnd_tls_verify,
        )
        try:
            await node.check_network()
        except BaseException:
            await node.close()
            raise
        return node

    async def check_network(self) -> None:
        try:
            info = await self._request("GET", "/v1/getinfo")
        except httpx.RequestError as exc:
            raise BackendConnectionError(f"Unable to connect to {self.endpoint}. {exc}")
        chains = info.get("chains") or []
        networks = [c.get("network") for c in chains]
        if str(self.network) not in networks:
            raise BackendConnectionError(
                f"LND runs on {', '.join(n for n in networks if n) or 'unknown network'},"
                f" expected {self.network}"
            )
        logger.debug(
            f"LND {info.get('alias')} ({info.get('identity_pubkey')}) version"
            f" {info.get('version')} on {self.network}"
        )

    async def _request(self, method: str, url: str, **kwargs) -> Dict[str, Any]:
        r = await self.client.request(method, url, **kwargs)
        if r.is_error:
            raise LndRpcError(self._error_message(r), status_code=r.status_code)
        return r.json()

    @staticmethod
    def _error_message(r: httpx.Response) -> str:
        try:
            data = r.json()
        except ValueError:
            return r.text[:200]
        if isinstance(data, dict):
            return data.get("message") or data.get("error") or r.text[:200]
        return r.text[:200]

    async def wallet_balance(self) -> WalletBalance:
        data = await self._request("GET", "/v1/balance/blockchain")
        return WalletBalance(
            confirmed=Amount(Unit.sat, int(data.get("confirmed_balance", 0))),
            unconfirmed=Amount(Unit.sat, int(data.get("unconfirmed_balance", 0))),
        )

    async def add_invoice(self, data: AddInvoiceData) -> Tuple[bytes, str]:
        body: Dict[str, Any] = {"value_msat": str(data.value.to(Unit.msat).amount)}
        if data.description_hash:
            body["description_hash"] = _b64(data.description_hash)
        else:
            body["memo"] = data.memo
        if data.expiry:
            body["expiry"] = str(data.expiry)

        r = await self._request("POST", "/v1/invoices", json=body)
        return _unb64(r.get("r_hash")), r["payment_request"]

    async def pay_invoice(
        self, invoice: str, max_fee: Amount, outgoing_channel: Optional[int]
    ) -> LndPaymentResult:
        body: Dict[str, Any] = {
            "payment_request": invoice,
            "fee_limit": {"fixed_msat": str(max_fee.to(Unit.msat).amount)},
        }
        if outgoing_channel is not None:
            body["outgoing_chan_id"] = str(outgoing_channel)

        try:
            data = await self._request(
                "POST", "/v1/channels/transactions", json=body, timeout=None
            )
        except (LndRpcError, httpx.HTTPError) as exc:
            return LndPaymentResult(error=exc)

        if data.get("payment_error"):
            return LndPaymentResult(error=LndRpcError(data["payment_error"]))

        route = data.get("payment_route") or {}
        return LndPaymentResult(
            preimage=_unb64(data.get("payment_preimage")) or bytes(32),
            paid_fee=Amount(Unit.msat, int(route.get("total_fees_msat", 0))),
            paid_amount=Amount(Unit.msat, int(route.get("total_amt_msat", 0))),
        )

    async def connect(self, peer: bytes, host: str, permanent: bool) -> None:
        await self._request(
            "POST",
            "/v1/peers",
            json={"addr": {"pubkey": peer.hex(), "host": host}, "perm": permanent},
        )

    async def list_peers(self) -> List[LndPeer]:
        data = await self._request("GET", "/v1/peers")
        return [
            LndPeer(
                pubkey=bytes.fromhex(p["pub_key"]),
                address=p.get("address", ""),
                inbound=bool(p.get("inbound", False)),
                ping_time=int(p.get("ping_time", 0)),
                sent=Amount(Unit.sat, int(p.get("sat_sent", 0))),
                received=Amount(Unit.sat, int(p.get("sat_recv", 0))),
            )
            for p in data.get("peers") or []
        ]

    async def open_channel(
        self, peer: bytes, local_sat: Amount, push_sat: Amount, private: bool
    ) -> OutPoint:
        data = await self._request(
            "POST",
            "/v1/channels",
            json={
                "node_pubkey": _b64(peer),
                "local_funding_amount": str(local_sat.to(Unit.sat).amount),
                "push_sat": str(push_sat.to(Unit.sat).amount),
                "private": private,
            },
            timeout=None,
        )
        if data.get("funding_txid_str"):
            txid = bytes.fromhex(data["funding_txid_str"])
        else:
            # lnd returns the txid bytes in internal (little endian) order
            txid = _unb64(data.get("funding_txid_bytes"))[::-1]
        return OutPoint(hash=txid, index=int(data.get("output_index", 0)))

    async def list_channels(
        self, active_only: bool, public_only: bool
    ) -> List[LndChannelInfo]:
        data = await self._request(
            "GET",
            "/v1/channels",
            params={
                "active_only": str(active_only).lower(),
                "public_only": str(public_only).lower(),
            },
        )
        return [
            LndChannelInfo(
                channel_id=int(c.get("chan_id", 0)),
                pubkey_bytes=bytes.fromhex(c["remote_pubkey"]),
                capacity=Amount(Unit.sat, int(c.get("capacity", 0))),
                local_balance=Amount(Unit.sat, int(c.get("local_balance", 0))),
                remote_balance=Amount(Unit.sat, int(c.get("remote_balance", 0))),
                active=bool(c.get("active", False)),
                private=bool(c.get("private", False)),
            )
            for c in data.get("channels") or []
        ]

    async def close(self) -> None:
        await self.client.aclose()
