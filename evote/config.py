# evote/config.py
# Central place for settings and constants
import os
from dotenv import load_dotenv

load_dotenv()


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


# --- Security & JWT Config ---
# In production, set SECRET_KEY in the environment
SECRET_KEY = os.getenv("SECRET_KEY", "voting-system-secret")
ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "1440"))  # 24 hours

# bcrypt work factor; tests lower it to keep hashing fast
BCRYPT_ROUNDS = int(os.getenv("BCRYPT_ROUNDS", "12"))

# --- Storage Config ---
# "memory" keeps everything in process, "mongo" uses MONGO_URI
STORAGE_BACKEND = os.getenv("STORAGE_BACKEND", "memory")
MONGO_URI = os.getenv("MONGO_URI", "mongodb://localhost:27017")
MONGO_DB = os.getenv("MONGO_DB", "voting_system")
VOTERS_COLLECTION_NAME = "voters"
CANDIDATES_COLLECTION_NAME = "candidates"
ADMINS_COLLECTION_NAME = "admins"
COUNTERS_COLLECTION_NAME = "counters"

# Load the default admin, candidates and voters into an empty store
SEED_DEMO_DATA = _env_bool("SEED_DEMO_DATA", "true")

# --- Ledger Config ---
# "hash" keeps a simulated in-memory ledger, "none" disables it
LEDGER_BACKEND = os.getenv("LEDGER_BACKEND", "hash")
# Fernet key for vote payloads; a fresh key is generated per process if unset
LEDGER_KEY = os.getenv("LEDGER_KEY")
# Seconds each ledger call waits to imitate a chain round-trip
LEDGER_DELAY = float(os.getenv("LEDGER_DELAY", "0.1"))
LEDGER_AUTO_START = _env_bool("LEDGER_AUTO_START", "true")

# --- Biometric Config ---
# Seconds the simulated face/fingerprint checks take
BIOMETRIC_DELAY = float(os.getenv("BIOMETRIC_DELAY", "1.5"))
FACE_CONFIDENCE = 0.95
FINGERPRINT_CONFIDENCE = 0.92

# --- HTTP Config ---
CORS_ORIGINS = [
    o.strip()
    for o in os.getenv("CORS_ORIGINS", "http://localhost:3000,http://localhost:5173").split(",")
    if o.strip()
]
HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", "5000"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
