# app/config.py

import logging
import os

DB_URL = os.environ.get("BILLING_DB_URL", "sqlite:///db.sqlite")  # file in project root

# When set, aware billing timestamps are moved into this zone before taking
# the calendar date; otherwise the date is read in the timestamp's own offset
BILLING_TIMEZONE = os.environ.get("BILLING_TIMEZONE", "")

LOG_LEVEL = os.environ.get("BILLING_LOG_LEVEL", "INFO")

SQL_ECHO = os.environ.get("BILLING_SQL_ECHO", "").lower() in ("1", "true", "yes")


def configure_logging() -> None:
    logging.basicConfig(
        level=LOG_LEVEL,
        format="%(asctime)s [%(levelname)s] %(message)s",
    )
