import logging
import socket

import uvicorn

from flashdeck import app
from flashdeck.config import settings

logger = logging.getLogger("flashdeck")


def find_free_port() -> int:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(("", 0))
        return s.getsockname()[1]


def configure_logging() -> None:
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


if __name__ == "__main__":
    configure_logging()
    port = settings.port or find_free_port()
    if not settings.port:
        print(f"PORT={port}", flush=True)

    logger.info("FlashDeck server running")
    logger.info("Local:        http://localhost:%d", port)
    logger.info("Ollama proxy: /api/ollama/* -> %s/api/*", settings.ollama_base_url)
    logger.info("Health:       http://localhost:%d/health", port)

    uvicorn.run(app, host=settings.host, port=port, log_level="warning")
