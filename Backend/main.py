import logging
import uvicorn
from config.settings import Settings
from config.logging_config import setup_logging
from api.app import create_app

settings = Settings()
setup_logging(settings.log_level, settings.log_file or None)

logger = logging.getLogger(__name__)

app = create_app(settings)


def main():
    options = settings.server_options().with_defaults()
    logger.info(f"Serving on port {options.bind_port}")
    uvicorn.run(app, host="0.0.0.0", port=options.bind_port, log_config=None)


if __name__ == "__main__":
    main()
