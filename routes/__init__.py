from flask import current_app

from feedback.services.sheets_store import get_store


def store_for(admin=False):
    """Store injected into the app config (tests, embedding) or the configured backend."""
    store = current_app.config.get('FEEDBACK_STORE')
    if store is not None:
        return store
    return get_store(admin=admin)
