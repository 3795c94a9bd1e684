import os

from dotenv import load_dotenv

load_dotenv()

GEMINI_API_KEY = os.getenv("GEMINI_API_KEY")
GEMINI_MODEL = os.getenv("GEMINI_MODEL", "gemini-2.5-flash")
ANALYSIS_TIMEOUT = float(os.getenv("CORTEX_ANALYSIS_TIMEOUT", "20"))

DATABASE_PATH = os.getenv(
    "CORTEX_DATABASE_PATH",
    os.path.join(os.path.dirname(__file__), "cortex_data.db")
)
STORE_KEY = os.getenv("CORTEX_STORE_KEY", "cortex_topics")

LOG_LEVEL = os.getenv("CORTEX_LOG_LEVEL", "INFO")

CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv(
        "CORTEX_CORS_ORIGINS",
        "http://localhost:3000,http://127.0.0.1:3000,http://localhost,http://127.0.0.1"
    ).split(",")
    if origin.strip()
]
