import os
import json
from datetime import datetime
from pymongo import MongoClient
from dotenv import load_dotenv

load_dotenv()

MONGO_URI = os.getenv("MONGO_URI", "mongodb://localhost:27017")
DATABASE_NAME = os.getenv("MONGO_DATABASE", "scholarmatch")
DATA_PATH = os.path.join(os.path.dirname(os.path.abspath(__file__)), "data", "scholarships.json")


def load_scholarships(path=DATA_PATH):
    with open(path, "r") as f:
        data = json.load(f)
    for entry in data:
        entry["deadline"] = datetime.fromisoformat(entry["deadline"])
        entry["updatedAt"] = datetime.utcnow()
    return data


def seed_scholarships(collection, scholarships):
    """Upsert by title so re-running the script does not create duplicates."""
    inserted = updated = 0
    for entry in scholarships:
        result = collection.update_one(
            {"title": entry["title"]},
            {"$set": entry, "$setOnInsert": {"createdAt": datetime.utcnow()}},
            upsert=True,
        )
        if result.upserted_id is not None:
            inserted += 1
        else:
            updated += 1
    return inserted, updated


if __name__ == "__main__":
    client = MongoClient(MONGO_URI)
    try:
        scholarships = load_scholarships()
        print(f"Seeding {len(scholarships)} scholarships into {DATABASE_NAME}.scholarships ...")
        inserted, updated = seed_scholarships(client[DATABASE_NAME]["scholarships"], scholarships)
        print(f"Done. Inserted {inserted}, updated {updated}.")
    finally:
        client.close()
