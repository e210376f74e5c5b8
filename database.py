from motor.motor_asyncio import AsyncIOMotorClient
from beanie import init_beanie
from models.user import User
from models.doctor import Doctor
from models.appointment import Appointment
import logging
import config

logger = logging.getLogger(__name__)

DOCUMENT_MODELS = [User, Doctor, Appointment]

client = None


async def connect_to_mongo():
    global client
    client = AsyncIOMotorClient(config.MONGODB_URI)
    await init_beanie(
        database=client[config.MONGODB_DB_NAME], document_models=DOCUMENT_MODELS
    )
    logger.info("Successfully Connected to MongoDB")


async def close_mongo_connection():
    global client
    if client is not None:
        client.close()
        client = None
        logger.info("MongoDB connection closed")
