"""Login users: salted password hashes and login timestamps."""

import hashlib
import logging
import re
import secrets
from datetime import datetime

from sqlalchemy import delete, insert, select, update

from hotel_portal.db.database import (
    Database,
    is_blank,
    login_users,
    returns_default,
    returns_status,
)
from hotel_portal.status import Status

logger = logging.getLogger(__name__)

LOGIN_DATE_FORMAT = "%I:%M %p on %a, %b %d, %Y"
MIN_PASSWORD_LENGTH = 5
MAX_PASSWORD_LENGTH = 10

_PASSWORD_CLASSES = re.compile(r"(?=.*\d)(?=.*[a-zA-Z])(?=.*[@$%#])")


def login_date(moment: datetime | None = None) -> str:
    return (moment or datetime.now()).strftime(LOGIN_DATE_FORMAT)


def generate_salt() -> str:
    return secrets.token_bytes(16).hex()


def hash_password(password: str, salt: str) -> str:
    return hashlib.sha256((salt + password).encode("utf-8")).hexdigest()


def check_password(password: str) -> Status:
    if not _PASSWORD_CLASSES.search(password):
        return Status.INVALID_PASSWORD
    if not MIN_PASSWORD_LENGTH <= len(password) <= MAX_PASSWORD_LENGTH:
        return Status.INVALID_PASSWORD_LENGTH
    return Status.OK


class UserStore:
    def __init__(self, db: Database):
        self._db = db

    @returns_status
    def register_user(self, username: str, password: str) -> Status:
        status = check_password(password or "")
        if status is not Status.OK:
            return status
        if is_blank(username):
            return Status.INVALID_LOGIN

        logger.info("Registering %s", username)
        with self._db.transaction() as conn:
            found = conn.execute(
                select(login_users.c.username).where(login_users.c.username == username)
            ).first()
            if found is not None:
                return Status.DUPLICATE_USER
            salt = generate_salt()
            conn.execute(
                insert(login_users).values(
                    username=username,
                    password=hash_password(password, salt),
                    usersalt=salt,
                )
            )
        return Status.OK

    def _authenticate(self, conn, username: str, password: str) -> Status:
        row = conn.execute(
            select(login_users.c.password, login_users.c.usersalt).where(
                login_users.c.username == username
            )
        ).first()
        if row is None:
            return Status.INVALID_LOGIN
        if not secrets.compare_digest(hash_password(password, row.usersalt), row.password):
            return Status.INVALID_LOGIN
        return Status.OK

    @returns_status
    def authenticate_user(self, username: str, password: str) -> Status:
        if is_blank(username) or password is None:
            return Status.INVALID_LOGIN
        with self._db.transaction() as conn:
            return self._authenticate(conn, username, password)

    @returns_status
    def remove_user(self, username: str, password: str) -> Status:
        if is_blank(username) or password is None:
            return Status.INVALID_LOGIN
        logger.info("Removing user %s", username)
        with self._db.transaction() as conn:
            status = self._authenticate(conn, username, password)
            if status is not Status.OK:
                return status
            result = conn.execute(delete(login_users).where(login_users.c.username == username))
        return Status.OK if result.rowcount == 1 else Status.INVALID_USER

    @returns_status
    def update_last_login(self, username: str, current_login: str | None = None) -> Status:
        """Move the stored current login to ``lastlogin`` and record a new one."""
        current_login = current_login or login_date()
        with self._db.transaction() as conn:
            previous = conn.execute(
                select(login_users.c.currentlogin).where(login_users.c.username == username)
            ).scalar()
            result = conn.execute(
                update(login_users)
                .where(login_users.c.username == username)
                .values(lastlogin=previous, currentlogin=current_login)
            )
        return Status.OK if result.rowcount == 1 else Status.INVALID_USER

    @returns_default(lambda: None)
    def get_last_login(self, username: str) -> str | None:
        with self._db.transaction() as conn:
            last = conn.execute(
                select(login_users.c.lastlogin).where(login_users.c.username == username)
            ).scalar()
        if last is None:
            return f"First login at {login_date()}"
        return f"Last logged in at {last}"
