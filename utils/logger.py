import logging
import logging.config
from pathlib import Path
from typing import Optional

from config import AppConfig, config as default_config

def setup_logger(app_config: Optional[AppConfig] = None) -> logging.Logger:
    """Console + rotating file logging (10MB x 5) from the app configuration."""
    app_config = app_config or default_config
    if app_config.log_to_file:
        Path(app_config.log_dir).mkdir(exist_ok=True, parents=True)
    logging.config.dictConfig(app_config.get_logging_config())
    return logging.getLogger()
