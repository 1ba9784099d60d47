from app.db.mongo import close_mongo_connection, connect_to_mongo, mongodb

__all__ = ["connect_to_mongo", "close_mongo_connection", "get_database"]


async def get_database():
    """Return the active database connection."""
    return mongodb.db
