from typing import Optional

import click
import uvicorn
from click import Context

from ..core.settings import settings


@click.command(
    context_settings=dict(
        ignore_unknown_options=True,
        allow_extra_args=True,
    )
)
@click.option("--port", default=settings.fuse_listen_port, help="Port to listen on")
@click.option("--host", default=settings.fuse_listen_host, help="Host to run fuse on")
@click.option("--ssl-keyfile", default=None, help="Path to SSL keyfile")
@click.option("--ssl-certfile", default=None, help="Path to SSL certificate")
@click.pass_context
def main(
    ctx: Context,
    port: int = settings.fuse_listen_port,
    host: str = settings.fuse_listen_host,
    ssl_keyfile: Optional[str] = None,
    ssl_certfile: Optional[str] = None,
):
    """Start the fuse server with uvicorn. Unknown `--key=value` options are
    passed through to uvicorn."""
    d = dict()
    for a in ctx.args:
        item = a.split("=")
        if len(item) > 1:  # argument like --key=value
            d[item[0].strip("-").replace("-", "_")] = (
                int(item[1]) if item[1].isdigit() else item[1]
            )
        else:
            d[a.strip("-").replace("-", "_")] = True  # argument like --key

    config = uvicorn.Config(
        "fuse.server.app:app",
        port=port,
        host=host,
        ssl_keyfile=ssl_keyfile,
        ssl_certfile=ssl_certfile,
        **d,
    )
    server = uvicorn.Server(config)
    server.run()


if __name__ == "__main__":
    main()
