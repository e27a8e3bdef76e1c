"""
Database initialization helpers.

Builds the record store from settings and seeds the admin account the first
time the app boots against an empty file.
"""

import logging
from typing import Optional

from portfolio_api.core.config import Settings, settings as default_settings
from portfolio_api.core.security import hash_password
from portfolio_api.db.store import JsonRecordStore

logger = logging.getLogger(__name__)


def build_store(config: Optional[Settings] = None) -> JsonRecordStore:
    config = config or default_settings
    return JsonRecordStore(config.db_file)


def seed_initial_data(store: JsonRecordStore, config: Optional[Settings] = None) -> None:
    """
    Create the default admin user if no user with that username exists.
    """
    config = config or default_settings
    if store.get_user_by_username(config.admin_username):
        return

    store.add_user(
        {
            "username": config.admin_username,
            "password": hash_password(config.admin_password),
            "role": "admin",
        }
    )
    logger.info("Default admin user created: %s", config.admin_username)


def init_db(store: JsonRecordStore, config: Optional[Settings] = None) -> JsonRecordStore:
    store.init()
    seed_initial_data(store, config)
    return store
