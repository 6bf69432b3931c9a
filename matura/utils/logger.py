import logging
import sys
from matura.utils.config import config

# Configure root logger - set to ERROR by default to suppress all non-Matura logs
logging.basicConfig(level=logging.ERROR, format=config.log_format, stream=sys.stdout)

# Configure only the Matura logger to show logs at the configured level
matura_logger = logging.getLogger('matura')
matura_logger.setLevel(config.log_level)

# Create a dedicated handler for Matura logs
matura_handler = logging.StreamHandler(sys.stdout)
matura_handler.setFormatter(logging.Formatter(config.log_format))

# Remove any existing handlers to avoid duplicate logs
for handler in list(matura_logger.handlers):
    matura_logger.removeHandler(handler)

matura_logger.addHandler(matura_handler)

# Prevent Matura logs from propagating to the root logger to avoid duplication
matura_logger.propagate = False

# Keep SDK transport chatter out of pipeline logs
logging.getLogger('httpx').setLevel(logging.WARNING)
logging.getLogger('httpcore').setLevel(logging.WARNING)

# Get our specific module logger
logger = logging.getLogger(__name__)
