"""Точка входа в приложение."""
import asyncio
import logging

from effect_preview.app import EffectPreviewApp
from effect_preview.config import AppConfig

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str) -> None:
    logging.basicConfig(level=getattr(logging, level, logging.INFO), format=LOG_FORMAT)


def main() -> None:
    """Создаёт главное окно и запускает цикл событий."""
    config = AppConfig.from_env()
    configure_logging(config.log_level)
    app = EffectPreviewApp(config)
    asyncio.run(app.run())


if __name__ == "__main__":
    main()
