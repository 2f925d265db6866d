import motor.motor_asyncio

from ..config import MONGO_URI, MONGO_DB


def get_client(uri: str = MONGO_URI) -> motor.motor_asyncio.AsyncIOMotorClient:
    if not uri:
        raise ValueError("MONGO_URI not set. Check your .env file.")
    return motor.motor_asyncio.AsyncIOMotorClient(uri)


def get_database(client: motor.motor_asyncio.AsyncIOMotorClient, name: str = MONGO_DB):
    if not name:
        raise ValueError("MONGO_DB not set. Check your .env file.")
    return client[name]
