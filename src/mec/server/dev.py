"""Serve a mec App with the pounce ASGI server."""


def run_server(
    app: object,
    host: str,
    port: int,
    *,
    reload: bool = False,
    reload_dirs: tuple[str, ...] = (),
) -> None:
    """Start pounce with the live App object.

    Pounce's ``run()`` takes an import string, but we hold the ``App``
    itself, so ``pounce.Server`` is driven directly with the ASGI callable.
    ``mec dev`` restarts the whole process on change, so pounce's own
    reload is only used when ``AppConfig.debug`` asks for it.
    """
    from pounce.config import ServerConfig
    from pounce.server import Server

    config = ServerConfig(
        host=host,
        port=port,
        workers=1,
        reload=reload,
        reload_dirs=reload_dirs,
    )
    Server(config, app).run()
