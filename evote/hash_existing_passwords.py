# One-off migration: hash voter and admin passwords that were stored as plaintext.
# Run with: python -m evote.hash_existing_passwords
import asyncio
import logging

from .security import hash_password, is_hashed
from .storage_mongo import MongoStorage

logger = logging.getLogger(__name__)


async def hash_collection(storage: MongoStorage, kind: str, collection, label: str) -> int:
    count = 0
    async for record in collection.find({}, {"password": 1, label: 1}):
        # skip anything passlib already recognises as a hash
        if record.get("password") and not is_hashed(record["password"]):
            await storage.update_password(kind, record["_id"], hash_password(record["password"]))
            logger.info(f"Hashed password for {kind} {record.get(label)}")
            count += 1
    return count


async def hash_existing_passwords(storage: MongoStorage) -> int:
    voters = await hash_collection(storage, "voter", storage.voters, "voter_id")
    admins = await hash_collection(storage, "admin", storage.admins, "username")
    return voters + admins


async def main() -> None:
    storage = MongoStorage(seed=False)
    try:
        total = await hash_existing_passwords(storage)
        logger.info(f"Hashed {total} plaintext passwords")
    finally:
        await storage.close()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    asyncio.run(main())
