import os
import sys
import tempfile

# Run from the repository root: `pytest`
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))))

# db.py requires DATABASE_URL at import time; point it at a throwaway SQLite file
os.environ.setdefault("DATABASE_URL", f"sqlite:///{tempfile.mkdtemp()}/test.db")
os.environ.setdefault("JWT_SECRET", "test_secret")
os.environ.setdefault("JWT_REFRESH_SECRET", "test_refresh_secret")
