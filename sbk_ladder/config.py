# Ladder Configuration
# Centralized settings for projection, confirmation and storage

import os
from pathlib import Path

from dotenv import load_dotenv

# Cargar variables de entorno
load_dotenv()

BASE_DIR = Path(__file__).resolve().parents[1]

# Advisory cashout reminder threshold (currency units)
CASHOUT_LIMIT = 50.0

# Double-tap window for confirming a WIN
WIN_TIMEOUT_MS = 3000

# Hard ceiling on projected steps; a projection that hits it never reached the goal
MAX_LADDER_STEPS = int(os.getenv("LADDER_MAX_STEPS", 500))

# Storage backend: "sqlite" (local file) or "remote" (Supabase document table)
STORAGE_BACKEND = os.getenv("LADDER_STORAGE", "sqlite").lower().strip()

# Local store
LADDER_DB_PATH = Path(os.getenv("LADDER_DB_PATH", BASE_DIR / "Data" / "Ladders.sqlite"))

# Remote store (PostgREST)
SUPABASE_URL = os.getenv("SUPABASE_URL")
SUPABASE_KEY = os.getenv("SUPABASE_KEY")
LADDER_TABLE = os.getenv("LADDER_TABLE", "ladders")
REMOTE_TIMEOUT_SECONDS = float(os.getenv("REMOTE_TIMEOUT_SECONDS", 10))
