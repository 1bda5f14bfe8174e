import logging
import os
import sys

from dotenv import load_dotenv

# --- Load environment variables ---
load_dotenv(dotenv_path=".env")

# --- Configure logging globally ---
logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)]  # ensures logs go to stdout for Docker
)

from brief_relay import create_app  # noqa: E402
from brief_relay.config import load_config  # noqa: E402
from brief_relay.errors import TLSConfigurationError  # noqa: E402
from brief_relay.server import listener_for  # noqa: E402

logger = logging.getLogger("brief_relay")


def main():
    config = load_config()
    app = create_app(config)
    try:
        listener_for(config).serve(app)
    except TLSConfigurationError as e:
        logger.critical(f"❌ {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
