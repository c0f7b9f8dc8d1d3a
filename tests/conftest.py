from unittest.mock import AsyncMock, MagicMock

import pytest
from pymongo.results import DeleteResult

from mongosession.settings import TestingSettings
from tests.utils import update_result


@pytest.fixture(scope="session")
def settings():
    return TestingSettings()


@pytest.fixture()
def mongo_client():
    client = MagicMock(name="MongoClient")
    collection = client.get_database.return_value.get_collection.return_value
    collection.find_one.return_value = None
    collection.replace_one.return_value = update_result()
    collection.delete_one.return_value = DeleteResult({"n": 1}, True)
    return client


@pytest.fixture()
def collection(mongo_client):
    return mongo_client.get_database.return_value.get_collection.return_value


@pytest.fixture()
def motor_client():
    client = MagicMock(name="AsyncIOMotorClient")
    client.admin.command = AsyncMock(return_value={"ok": 1.0})
    collection = client.get_database.return_value.get_collection.return_value
    collection.find_one = AsyncMock(return_value=None)
    collection.replace_one = AsyncMock(return_value=update_result())
    collection.delete_one = AsyncMock(
        return_value=DeleteResult({"n": 1}, True)
    )
    return client


@pytest.fixture()
def motor_collection(motor_client):
    return motor_client.get_database.return_value.get_collection.return_value
