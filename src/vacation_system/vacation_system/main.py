from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from config import load_settings

from .common.datetime_utils import parse_date_list
from .common.logging_config import setup_logging
from .database.bootstrap import apply_schema, apply_seed_sql, list_tables

from .container import Container, build_container
from .errors import register_error_handlers
from .approvals.controller import register as register_approvals
from .audit.controller import register as register_audit
from .balances.controller import register as register_balances
from .policies.controller import register as register_policies
from .requests.controller import register as register_requests

logger = logging.getLogger(__name__)


def _parse_id_list(value) -> list[int]:
    if isinstance(value, (list, tuple, set, frozenset)):
        return [int(v) for v in value]
    return [int(p.strip()) for p in str(value or "").split(",") if p.strip()]


def create_app(container: Optional[Container] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings = load_settings()
    setup_logging(getattr(settings, "LOG_LEVEL", "INFO"))
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))

    if container is None:
        db_config = getattr(settings, "DB_CONFIG")
        logger.info(
            "settings=%s db=%s@%s:%s/%s",
            settings.__name__,
            db_config.get("user"),
            db_config.get("host"),
            db_config.get("port", 3306),
            db_config.get("database"),
        )

        database_dir = Path(__file__).resolve().parents[3] / "database"
        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            apply_schema(db_config, schema_path=database_dir / "schema.sql")
            logger.info("schema ready (tables=%s)", len(list_tables(db_config)))
        if bool(getattr(settings, "AUTO_SEED_DB", False)):
            apply_seed_sql(db_config, seed_path=database_dir / "seed.sql")
            logger.info("demo seed ready")

        container = build_container(
            db_config=db_config,
            lock_backend=getattr(settings, "LOCK_BACKEND", "mysql"),
            lock_timeout=float(getattr(settings, "LOCK_TIMEOUT_SECONDS", 5.0)),
            holiday_source=getattr(settings, "HOLIDAY_SOURCE", "database"),
            holidays=parse_date_list(getattr(settings, "HOLIDAYS", "")),
            hr_approver_ids=_parse_id_list(getattr(settings, "HR_APPROVER_IDS", "")),
        )

    register_error_handlers(app)
    register_policies(app, container)
    register_balances(app, container)
    register_requests(app, container)
    register_approvals(app, container)
    register_audit(app, container)

    return app
