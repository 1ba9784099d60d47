from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from app.core.config import settings
from app.core.logging import get_logger

logger = get_logger(__name__)

class MongoDatabase:
    """MongoDB connection manager."""

    client: AsyncIOMotorClient = None
    db: AsyncIOMotorDatabase = None

mongodb = MongoDatabase()

async def connect_to_mongo():
    """Connect to MongoDB."""
    mongodb.client = AsyncIOMotorClient(settings.MONGODB_URL)
    mongodb.db = mongodb.client[settings.DATABASE_NAME]

    # Create indexes
    await create_indexes()
    logger.info("mongo_connected", database=settings.DATABASE_NAME)

async def close_mongo_connection():
    """Disconnect from MongoDB."""
    if mongodb.client is not None:
        mongodb.client.close()
    mongodb.client = None
    mongodb.db = None
    logger.info("mongo_disconnected")

async def create_indexes():
    """Create database indexes."""
    # Payments are grouped by event and filtered by date
    await mongodb.db["payments"].create_index("customer_event_id")
    await mongodb.db["payments"].create_index("payment_date")
    await mongodb.db["payments"].create_index("created_at")

def get_db() -> AsyncIOMotorDatabase:
    """Get database instance."""
    return mongodb.db
