"""lukkari_backend - caching proxy for the Lukkari schedule frontend.

The package shields the upstream iCalendar and realization sources from
direct client traffic. It keeps imports light at package level so the
entrypoint can report import-time failures clearly.
"""

__version__ = "0.1.0"

from typing import Optional


def run_server(args: Optional[object] = None) -> None:
    """Start the lukkari_backend server.

    Args:
        args: Optional command line arguments namespace containing --port

    Behavior:
    - Initialize console logging early using LUKKARI_LOG_LEVEL (env) if present.
    - Load .env defaults and environment configuration.
    - Apply command line argument overrides to configuration.
    - Delegate to ``lukkari_backend.api.server.start_server`` and block until shutdown.
    """
    import importlib
    import logging
    import os

    from lukkari_backend.core.logging_config import init_logging

    init_logging(os.environ.get("LUKKARI_LOG_LEVEL"))
    logger = logging.getLogger(__name__)

    from lukkari_backend.core.config_manager import ConfigManager

    cfg = ConfigManager().load_full_config()

    if args is not None:
        port = getattr(args, "port", None)
        if port is not None:
            try:
                cfg["server_port"] = int(port)
                logger.debug("Applied command line port override: %d", cfg["server_port"])
            except (ValueError, TypeError) as e:
                logger.warning("Invalid port value from command line '%s': %s", port, e)

    cfg_level = cfg.get("log_level")
    if isinstance(cfg_level, str):
        logging.getLogger().setLevel(getattr(logging, cfg_level.upper(), logging.INFO))

    server = importlib.import_module("lukkari_backend.api.server")

    # Only surface a small set of config keys to avoid leaking anything sensitive.
    logger.debug(
        "Resolved configuration (diagnostic): %s",
        {k: cfg.get(k) for k in ("server_bind", "server_port", "precache_enabled", "log_level")},
    )
    server.start_server(cfg)
