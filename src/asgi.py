"""
ASGI entry point for uvicorn
This module exposes the FastAPI app for use with uvicorn command line
"""

import os
import logging
from pathlib import Path

from config_loader import load_config, setup_logging
from services.controller_server import create_components

# Ensure logs directory exists
Path("logs").mkdir(exist_ok=True)

# Load configuration
config = load_config(os.environ.get('CONFIG_FILE', 'config/config.yaml'))
setup_logging(config)

logger = logging.getLogger(__name__)

logger.info("Initializing application components...")
components = create_components(config)

# Expose the FastAPI app for uvicorn
app = components['api'].app

logger.info("ASGI app ready for uvicorn")
