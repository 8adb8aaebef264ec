from cardbinder.db.database import get_session, init_db
from cardbinder.db.operations import (
    binder_to_model,
    delete_binder,
    get_binder,
    get_binder_record,
    list_user_binders,
    pages_from_document,
    pages_to_document,
    save_binder,
)

__all__ = [
    "binder_to_model",
    "delete_binder",
    "get_binder",
    "get_binder_record",
    "get_session",
    "init_db",
    "list_user_binders",
    "pages_from_document",
    "pages_to_document",
    "save_binder",
]
