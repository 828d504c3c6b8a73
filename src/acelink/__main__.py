"""Run the acelink connector: python -m acelink"""

import uvicorn

from acelink.config import load_config

config = load_config()
uvicorn.run(
    "acelink.app:create_app",
    host=config.host,
    port=config.port,
    log_level=config.log_level,
    factory=True,
)
