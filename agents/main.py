# main.py
import logging
import os
from typing import Any, Dict

from common.config_loader import cfg_get, load_config, load_env_files, load_settings, mask_key
from common.logging_config import configure_logging

# ----------------------------------------------------------------------------
# Bootstrapping
# ----------------------------------------------------------------------------
load_env_files()
configure_logging(getattr(logging, os.getenv("LOGLEVEL", "INFO").upper(), logging.INFO))

logger = logging.getLogger("trades-matching")

CONFIG: Dict[str, Any] = load_config()
SETTINGS = load_settings(CONFIG)

if not SETTINGS.openai_api_key:
    logger.warning("OPENAI_API_KEY is missing. Analysis, matching and pricing will be unavailable.")
else:
    logger.info("OpenAI key: %s", mask_key(SETTINGS.openai_api_key))

HOST = cfg_get(CONFIG, "server.host", "0.0.0.0")
PORT = int(cfg_get(CONFIG, "server.port", 8000))


def main():
    import uvicorn

    from api.main import create_app

    logger.info(
        "Starting %s on %s:%s model=%s roster=%s",
        SETTINGS.brand, HOST, PORT, SETTINGS.oracle_model, SETTINGS.roster_path or "built-in",
    )
    uvicorn.run(create_app(SETTINGS), host=HOST, port=PORT)


if __name__ == "__main__":
    main()
