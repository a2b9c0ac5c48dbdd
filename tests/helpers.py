from typing import Optional, Type, Union

from fuse.core.errors import FuseError
from fuse.lightning.fake import FakeLnd

# mainnet, 1000 sat
payment_request = (
    "lnbc10u1pjap7phpp50s9lzr3477j0tvacpfy2ucrs4q0q6cvn232ex7nt2zqxxxj8gxrsdpv2phhwetjv4jzqcneypqyc6t8dp6xu6twva2xjuzzda6qcqzzsxqrrsss"
    "p575z0n39w2j7zgnpqtdlrgz9rycner4eptjm3lz363dzylnrm3h4s9qyyssqfz8jglcshnlcf0zkw4qu8fyr564lg59x5al724kms3h6gpuhx9xrfv27tgx3l3u3cyf6"
    "3r52u0xmac6max8mdupghfzh84t4hfsvrfsqwnuszf"
)

pubkey_a = "02" + "11" * 32
pubkey_b = "03" + "22" * 32


async def assert_err(f, msg: Union[str, FuseError]):
    """Compute f() and expect an error message 'msg'."""
    try:
        await f
    except Exception as exc:
        error_message: str = str(exc.args[0])
        if isinstance(msg, FuseError):
            if msg.detail not in error_message:
                raise Exception(
                    f"FuseError. Expected error: {msg.detail}, got: {error_message}"
                )
            return
        if msg not in error_message:
            raise Exception(f"Expected error: {msg}, got: {error_message}")
        return
    raise Exception(f"Expected error: {msg}, got no error")


def flaky_backend(failures: int) -> Type[FakeLnd]:
    """A FakeLnd whose first `failures` connection attempts are refused."""

    class FlakyLnd(FakeLnd):
        attempts = 0

        @classmethod
        async def create(
            cls,
            address: Optional[str],
            network,
            macaroon_path: Optional[str] = None,
            tls_path: Optional[str] = None,
        ) -> "FlakyLnd":
            cls.attempts += 1
            if cls.attempts <= failures:
                raise ConnectionRefusedError(f"attempt {cls.attempts} refused")
            return cls(network=network)

    return FlakyLnd
