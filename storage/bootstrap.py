"""
Startup reconciliation: make sure the baseline classes and the admin
account exist, and retire legacy classes.

Every step is idempotent, so running the bootstrap again converges to
the same state.
"""
import logging
from dataclasses import dataclass, field
from typing import Iterable, List

from config.settings import Settings
from database import InsertClass, InsertUser, get_db_context
from .exceptions import DuplicateError
from .repository import DatabaseStorage

logger = logging.getLogger(__name__)


@dataclass
class BootstrapResult:
    """What a bootstrap run changed."""
    created_classes: List[str] = field(default_factory=list)
    removed_classes: List[str] = field(default_factory=list)
    admin_created: bool = False

    @property
    def changed(self) -> bool:
        return bool(self.created_classes or self.removed_classes or self.admin_created)


def ensure_admin_user(storage: DatabaseStorage, username: str, password: str) -> bool:
    """Create the admin account if missing. Returns True when created."""
    if storage.get_user_by_username(username):
        return False
    try:
        storage.create_user(InsertUser(username=username, password=password, is_admin=True))
    except DuplicateError:
        # Created concurrently by another worker
        return False
    logger.info("Created admin user '%s'", username)
    return True


def reconcile_classes(
    storage: DatabaseStorage,
    required: Iterable[str],
    legacy: Iterable[str],
) -> BootstrapResult:
    """
    Remove legacy classes (with their students and reports), then create
    any missing required class.
    """
    result = BootstrapResult()

    for name in legacy:
        legacy_class = storage.get_class_by_name(name)
        if not legacy_class:
            continue
        try:
            storage.delete_class(legacy_class.id)
        except Exception:
            logger.exception("Failed to remove legacy class %s", name)
            continue
        result.removed_classes.append(name)
        logger.info("Removed legacy class %s", name)

    for name in required:
        if storage.get_class_by_name(name):
            continue
        try:
            storage.create_class(InsertClass(name=name))
        except DuplicateError:
            continue
        result.created_classes.append(name)

    if result.created_classes:
        logger.info(
            "Created classes %s; students are added manually by an administrator",
            ", ".join(result.created_classes),
        )
    return result


def run_bootstrap(settings: Settings, session_factory=None) -> BootstrapResult:
    """Run the whole reconciliation in its own session."""
    with get_db_context(session_factory) as db:
        storage = DatabaseStorage(db)
        admin_created = ensure_admin_user(storage, settings.admin_username, settings.admin_password)
        result = reconcile_classes(storage, settings.required_classes, settings.legacy_classes)
        result.admin_created = admin_created

    if result.changed:
        logger.info("Bootstrap finished: %s", result)
    else:
        logger.info("Bootstrap finished: nothing to change")
    return result
