"""Example: drive the service layer directly (no Flask).

Controllers stay thin; every rule lives in the services built by the container.
"""

import importlib
import os

from config import get_settings_module

from src.checkin_api.checkin_api.container import build_container
from src.checkin_api.checkin_api.logging import setup_logging


def main():
    settings = importlib.import_module(get_settings_module())
    container = build_container(
        db_config=settings.DB_CONFIG,
        jwt_secret=settings.JWT_SECRET,
        logger=setup_logging(settings.LOG_LEVEL),
    )

    tokens = container.auth_service.login(
        email=os.environ["EXAMPLE_EMAIL"],
        password=os.environ["EXAMPLE_PASSWORD"],
    )
    user_id = container.auth_service.authenticate(tokens.access_token)

    for org in container.organization_service.list_organizations(user_id):
        print(org.name, org.email)

    current = container.attendance_service.get_current_status(user_id)
    print("checked in since", current.check_in_time.isoformat() if current else "-")


if __name__ == "__main__":
    main()
