import atexit

from flask import Flask
from pymongo import MongoClient
from pymongo.database import Database


def get_database(app: Flask) -> Database:
    """
    Returns the MongoDB database for this app.

    One client is shared per app via `app.extensions`; repositories
    receive the returned handle explicitly instead of reaching for a global.
    The database name is expected to be part of the MONGO_URI,
    e.g. mongodb://host:port/dbname
    """
    client = app.extensions.get('mongo_client')
    if client is None:
        client = MongoClient(app.config['MONGO_URI'], tz_aware=True)
        app.extensions['mongo_client'] = client
    return client.get_database()


def init_app(app: Flask) -> None:
    """Close the shared client when the process shuts the app down."""
    def close_client():
        client = app.extensions.pop('mongo_client', None)
        if client is not None:
            client.close()

    atexit.register(close_client)
