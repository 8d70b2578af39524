import os
from dotenv import load_dotenv

load_dotenv()

# --- JWT Configuration ---
JWT_SECRET = os.getenv("JWT_SECRET", "change-this-secret-key")
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
JWT_EXPIRY_HOURS = int(os.getenv("JWT_EXPIRY_HOURS", "8760"))  # 365 days

# --- Database ---
# Default to local SQLite, but prefer environment variable (for hosted Postgres)
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./data/notegym.db")

# Fix for common SQLAlchemy issues with postgres:// vs postgresql://
if DATABASE_URL.startswith("postgres://"):
    DATABASE_URL = DATABASE_URL.replace("postgres://", "postgresql://", 1)

# --- Food analysis (OpenRouter) ---
OPENROUTER_API_KEY = os.getenv("OPENROUTER_API_KEY", "")
OPENROUTER_TEXT_MODELS = [
    m.strip()
    for m in os.getenv(
        "OPENROUTER_TEXT_MODELS",
        "deepseek/deepseek-r1-distill-llama-70b:free,"
        "google/gemini-2.0-flash-exp:free,"
        "qwen/qwen-2.5-vl-72b-instruct:free,"
        "meta-llama/llama-3.3-70b-instruct:free",
    ).split(",")
    if m.strip()
]

# --- App ---
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
STARTING_GAME_COINS = int(os.getenv("STARTING_GAME_COINS", "500"))
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]
