# main.py
# Entry point for the FastAPI application

import logging
import os
from dotenv import load_dotenv

# Load environment variables before the app modules read them
load_dotenv()

from stylist.app_factory import create_app  # noqa: E402
from stylist.utils.config import Settings  # noqa: E402

# Configure logging
logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    handlers=[logging.FileHandler("backend.log"), logging.StreamHandler()],
)
logger = logging.getLogger(__name__)

# Suppress pymongo debug logs
logging.getLogger("pymongo").setLevel(logging.WARNING)

# Fails here when MONGO_URI or JWT_SECRET is missing
settings = Settings()
logger.info(f"Settings loaded for environment: {settings.environment}")

app = create_app(settings)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=int(os.getenv("PORT", "5000")))
