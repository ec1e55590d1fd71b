from motor.motor_asyncio import AsyncIOMotorClient
import os
from dotenv import load_dotenv

load_dotenv()

# MongoDB connection string
MONGO_DETAILS = os.getenv("MONGO_URI", "mongodb://localhost:27017")
DATABASE_NAME = os.getenv("MONGO_DATABASE", "scholarmatch")

# Create async client (connects lazily on first query)
client = AsyncIOMotorClient(MONGO_DETAILS, tz_aware=False)
db = client[DATABASE_NAME]

# Collections
profiles_collection = db["profiles"]                 # explicit academic profile, keyed by user_id
user_documents_collection = db["user_documents"]     # uploaded + parsed documents
scholarships_collection = db["scholarships"]         # admin-managed scholarship listings
