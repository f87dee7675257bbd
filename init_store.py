import logging
import os
import sys
from pathlib import Path

from dotenv import load_dotenv


# ======================================================
# ENV
# ======================================================

load_dotenv()

sys.path.insert(0, str(Path(__file__).resolve().parent / "backend"))

from carbook.database import SessionLocal  # noqa: E402
from carbook.services.seed import DEMO_OWNER_ID, DEMO_STORE_ID, seed_demo_store  # noqa: E402

STORE_ID = os.getenv("DEMO_STORE_ID", DEMO_STORE_ID)
OWNER_ID = os.getenv("DEMO_OWNER_ID", DEMO_OWNER_ID)


# ======================================================
# MAIN LOGIC
# ======================================================

def main():
    logging.basicConfig(level=logging.INFO, format="%(levelname)s [%(name)s] %(message)s")

    db = SessionLocal()
    try:
        store = seed_demo_store(db, store_id=STORE_ID, owner_id=OWNER_ID)
        print(f"[BOOTSTRAP] Store ready: {store.id} (owner={store.owner_id})")
    finally:
        db.close()


# ======================================================
# ENTRYPOINT
# ======================================================

if __name__ == "__main__":
    main()
