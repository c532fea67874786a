"""Server configuration.

ServerConfig is a frozen dataclass: immutable after creation,
IDE-autocompletable, no string-key dict lookups.
"""

from dataclasses import dataclass

from wren.middleware.cors import PERMISSIVE_CORS, CORSConfig


@dataclass(frozen=True, slots=True)
class ServerConfig:
    """Server configuration. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = ServerConfig(port=3000, cors=CORSConfig(allow_origins=("https://example.com",)))
    """

    # Bind address
    host: str = "127.0.0.1"
    port: int = 8000

    # Single worker when True
    debug: bool = False
    workers: int = 0  # 0 = auto-detect from CPU count

    # Passed through to the ASGI server
    log_level: str = "info"
    log_format: str = "json"  # "json" or "text"

    # Cross-origin policy; None disables the CORS middleware
    cors: CORSConfig | None = PERMISSIVE_CORS
