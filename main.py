"""Run the product catalog API with uvicorn."""

import uvicorn

from catalog.api import create_app
from catalog.config import get_config
from catalog.logging_config import configure_logging

config = get_config()
configure_logging(config.logging)

app = create_app(config)


if __name__ == "__main__":
    uvicorn.run(app, host=config.server.host, port=config.server.port)
