"""Serve a wren Server with pounce.

Pounce's ``run()`` takes an import string (e.g., ``"myapp:server"``),
but we have a live ``Server`` object, so ``pounce.Server`` is driven
directly with the ASGI callable.
"""

from wren.config import ServerConfig


def run_server(app: object, config: ServerConfig) -> None:
    """Start a pounce server for the ASGI callable *app*.

    Debug mode runs a single worker; otherwise ``config.workers`` is
    passed through (0 lets pounce pick from the CPU count).
    """
    from pounce.config import ServerConfig as PounceConfig
    from pounce.server import Server

    pounce_config = PounceConfig(
        host=config.host,
        port=config.port,
        workers=1 if config.debug else config.workers,
        log_level=config.log_level,
        log_format=config.log_format,
    )
    server = Server(pounce_config, app)
    server.run()
