"""Run the Orienta backend with uvicorn: ``python -m orienta``."""
import uvicorn

from orienta.config import get_config


def main() -> None:
    config = get_config()
    uvicorn.run(
        "orienta.main:app",
        host=config.server.host,
        port=config.server.port,
        log_level=config.logging.level.lower(),
    )


if __name__ == "__main__":
    main()
