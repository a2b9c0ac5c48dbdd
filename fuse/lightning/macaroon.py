import base64
import binascii
import os

from ..core.errors import BackendConnectionError


def load_macaroon(macaroon: str) -> str:
    """Returns the hex encoding of a macaroon LND expects in its request header.

    :param macaroon: Path to a `.macaroon` file, or the macaroon itself encoded
        in hex or base64.
    :return: Hex version of macaroon.
    """
    macaroon = os.path.expanduser(macaroon)
    if macaroon.endswith(".macaroon"):
        try:
            with open(macaroon, "rb") as f:
                return f.read().hex()
        except FileNotFoundError:
            raise BackendConnectionError(f"Macaroon file not found: {macaroon}")

    try:
        bytes.fromhex(macaroon)
        return macaroon
    except ValueError:
        pass

    try:
        return base64.b64decode(macaroon, validate=True).hex()
    except (binascii.Error, ValueError):
        raise BackendConnectionError("Macaroon is neither a file, hex nor base64")
