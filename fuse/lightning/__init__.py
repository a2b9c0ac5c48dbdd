# type: ignore
from .base import LightningProvider  # noqa: F401
from .fake import FakeLnd  # noqa: F401
from .lnd import LndClient, new_client  # noqa: F401
from .lndrest import LndRestNode  # noqa: F401
