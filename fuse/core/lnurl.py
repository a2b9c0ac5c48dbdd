import hashlib
import json
from typing import Iterable, List, Optional, Tuple

import bech32

LNURL_HRP = "lnurl"
PAY_REQUEST_TAG = "payRequest"

MIME_TEXT_PLAIN = "text/plain"


class Metadata:
    """LNURL-pay metadata: an ordered list of [mime type, content] pairs.

    Wallets hash the encoded string and compare it against the description
    hash of the invoice returned by the callback, so `encode()` has to produce
    the exact same string every time it is called.
    """

    def __init__(self, entries: Optional[Iterable[Tuple[str, str]]] = None):
        self.entries: List[Tuple[str, str]] = [
            (str(mime), str(content)) for mime, content in (entries or [])
        ]

    @classmethod
    def from_description(cls, description: str) -> "Metadata":
        return cls([(MIME_TEXT_PLAIN, description)])

    @classmethod
    def decode(cls, encoded: str) -> "Metadata":
        try:
            raw = json.loads(encoded)
        except json.JSONDecodeError as e:
            raise ValueError(f"invalid metadata: {e}")
        if not isinstance(raw, list) or not all(
            isinstance(e, list) and len(e) == 2 for e in raw
        ):
            raise ValueError("metadata must be a list of [type, content] pairs")
        return cls((e[0], e[1]) for e in raw)

    def add(self, mime: str, content: str) -> "Metadata":
        self.entries.append((mime, content))
        return self

    @property
    def description(self) -> Optional[str]:
        return next((c for m, c in self.entries if m == MIME_TEXT_PLAIN), None)

    def encode(self) -> str:
        return json.dumps(
            [[mime, content] for mime, content in self.entries],
            separators=(",", ":"),
            ensure_ascii=False,
        )

    def description_hash(self) -> bytes:
        return hashlib.sha256(self.encode().encode("utf-8")).digest()

    def __eq__(self, other):
        return isinstance(other, Metadata) and self.entries == other.entries

    def __repr__(self):
        return f"Metadata({self.entries!r})"


def encode_lnurl(url: str) -> str:
    data = bech32.convertbits(url.encode("utf-8"), 8, 5, True)
    assert data is not None, "could not convert url to 5 bit groups"
    return bech32.bech32_encode(LNURL_HRP, data).upper()


def decode_lnurl(lnurl: str) -> Optional[str]:
    hrp, data = bech32.bech32_decode(lnurl.lower())
    if not hrp or hrp != LNURL_HRP:
        return None
    if data is None:
        return None
    decoded_data = bech32.convertbits(data, 5, 8, False)
    if decoded_data is None:
        return None
    return bytes(decoded_data).decode("utf-8")
