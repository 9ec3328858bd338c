"""Create a user account from the command line."""
import argparse
import logging

from config import settings, setup_logging
from database import get_db_context, init_db, InsertUser
from storage import DatabaseStorage, DuplicateError

logger = logging.getLogger(__name__)


def main(argv=None):
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("username")
    parser.add_argument("--password", default=settings.default_user_password)
    parser.add_argument("--admin", action="store_true", help="grant administrator rights")
    args = parser.parse_args(argv)

    setup_logging(settings.log_level)
    init_db()
    with get_db_context() as db:
        try:
            user = DatabaseStorage(db).create_user(
                InsertUser(username=args.username, password=args.password, is_admin=args.admin)
            )
        except DuplicateError as e:
            logger.error(e.message)
            return 1
        logger.info("Created user %s (id=%s, admin=%s)", user.username, user.id, user.is_admin)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
