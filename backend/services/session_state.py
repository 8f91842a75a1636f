# backend/services/session_state.py
import logging

logger = logging.getLogger(__name__)

SESSION_KEY = 'is_authenticated'


class SessionState:
    """
    Authentication flag kept in client-side session storage.

    ``storage`` is any mutable mapping; in requests it is ``flask.session``.
    """

    def __init__(self, storage):
        self.storage = storage

    @property
    def is_authenticated(self):
        return bool(self.storage.get(SESSION_KEY, False))

    def login(self, username, password, valid_username, valid_password):
        if username == valid_username and password == valid_password:
            self.storage[SESSION_KEY] = True
            logger.info(f"Login succeeded for '{username}'")
            return True
        logger.warning(f"Login failed for '{username}'")
        return False

    def logout(self):
        self.storage.pop(SESSION_KEY, None)
