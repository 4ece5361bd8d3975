"""Process entry point: `python -m mcpdemo` or the `mcpdemo-server` script."""

import logging
import sys

from mcpdemo.server import MCPServer, MCPServerSettings
from mcpdemo.telemetry import init_otel

logger = logging.getLogger("mcpdemo")


def main() -> None:
    # stdout carries protocol frames; all human-readable output goes to stderr
    logging.basicConfig(
        level=logging.INFO,
        stream=sys.stderr,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        settings = MCPServerSettings()
        logging.getLogger().setLevel(settings.mcp_log_level.upper())
        init_otel(settings.mcp_server_name)

        if settings.mcp_server_variant == "fastmcp":
            from mcpdemo.fastmcp_server import run_fastmcp_server

            run_fastmcp_server(settings)
        else:
            MCPServer(settings).run()
    except KeyboardInterrupt:
        logger.info("Interrupted, shutting down")
    except Exception as e:
        logger.exception(f"Fatal error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
