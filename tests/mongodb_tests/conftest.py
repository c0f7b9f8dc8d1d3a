import asyncio
import uuid

import async_timeout
import motor.motor_asyncio
import pytest
import pytest_asyncio

from mongosession import AsyncMongoSessionStore, MongoSessionStore

MONGODB_PORT = 27222


async def _check_mongodb_connection(connection_string):
    client = motor.motor_asyncio.AsyncIOMotorClient(connection_string)
    try:
        async with async_timeout.timeout(1.5):
            await client.admin.command({"ping": 1})
        return True
    except Exception:
        return False
    finally:
        client.close()


@pytest.fixture(scope="session")
def mongodb_server():
    if not asyncio.run(
        _check_mongodb_connection(f"mongodb://localhost:{MONGODB_PORT}")
    ):
        pytest.skip(
            "MongoDB is not running, no way to test this. \nPlease run"
            f" mongodb on port {MONGODB_PORT}: sudo docker run -p"
            f" {MONGODB_PORT}:27017 mongo"
        )


@pytest.fixture()
def db_name():
    return "test_database" + uuid.uuid4().hex


@pytest.fixture()
def store(mongodb_server, db_name):
    store = MongoSessionStore(db_name=db_name, port=MONGODB_PORT)
    yield store
    store.db.client.drop_database(db_name)
    store.close()


@pytest_asyncio.fixture()
async def async_store(mongodb_server, db_name):
    store = await AsyncMongoSessionStore.create(
        db_name=db_name, port=MONGODB_PORT
    )
    yield store
    await store.db.client.drop_database(db_name)
    store.close()
