from __future__ import annotations

import importlib
import logging
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from .config import get_settings_module
from .common.http import register_error_handlers
from .container import Container, build_container
from .database.bootstrap import apply_schema, ensure_demo_users, list_tables

from .attendance.controller import register as register_attendance
from .categories.controller import register as register_categories
from .lectures.controller import register as register_lectures
from .nfc.controller import register as register_nfc
from .users.controller import register as register_users

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def create_app(container: Optional[Container] = None, settings_module: Optional[str] = None) -> Flask:
    """Application factory.

    A prebuilt `container` skips database bootstrap entirely (used by the tests).
    """
    load_dotenv(override=False)

    settings_module = settings_module or get_settings_module()
    settings = importlib.import_module(settings_module)

    logging.basicConfig(format=LOG_FORMAT, level=getattr(settings, "LOG_LEVEL", "INFO"))

    app = Flask(__name__)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    app.config["MAX_CONTENT_LENGTH"] = getattr(settings, "MAX_CONTENT_LENGTH", None)
    app.config["UPLOAD_FOLDER"] = getattr(settings, "UPLOAD_FOLDER", "instance/uploads")
    db_config = getattr(settings, "DB_CONFIG")

    if container is None:
        logger.info(
            "settings=%s db=%s@%s:%s/%s",
            settings_module,
            db_config.get("user"),
            db_config.get("host"),
            db_config.get("port", 3306),
            db_config.get("database"),
        )

        if getattr(settings, "AUTO_INIT_DB", False):
            apply_schema(db_config)
            logger.info("Schema ready (tables=%d)", len(list_tables(db_config)))
        if getattr(settings, "AUTO_SEED_DB", False):
            ensure_demo_users(db_config)

        container = build_container(db_config=db_config, upload_folder=app.config["UPLOAD_FOLDER"])

    register_error_handlers(app)
    register_users(app, container)
    register_categories(app, container)
    register_lectures(app, container)
    register_nfc(app, container)
    register_attendance(app, container)

    return app
