"""
Run the messaging API with uvicorn.

Configuration is read from the environment (see 'messaging_toolkit.config'):

    JWT_SECRET=change-me ADMIN_EMAILS=admin@example.com \\
    KV_STORE_URL=sqlite+aiosqlite:///chat.db \\
    python -m messaging_toolkit.server

Clients see new messages by polling '/messages/{targetId}' and
'/conversations'; the polling interval is the upper bound on how stale a
conversation view can be. The server keeps no push channel.
"""

import uvicorn
from loguru import logger

from messaging_toolkit.api.app import create_app_from_settings
from messaging_toolkit.config import Settings
from messaging_toolkit.utils.logging import configure_logging


def main() -> None:
    settings = Settings.from_env()
    configure_logging(settings.log_level)
    logger.info(f"Starting messaging API on {settings.host}:{settings.port}")
    app = create_app_from_settings(settings)
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    main()
