# src/stores/auth.py
from __future__ import annotations

import time
from typing import List, Optional

from db.database import LocalStorage
from db.models import Account, Session, parse_many
from stores.errors import (
    AuthError,
    ConflictError,
    NotFoundError,
    Result,
    ValidationError,
)
from utils.logger import get_logger

_logger = get_logger(__name__)

USERS_KEY = "users_v1"
SESSION_KEY = "session_v1"

MIN_PASSWORD_LENGTH = 6


def _validate_new_password(new_password: str, confirm_password: str) -> Optional[str]:
    if len(new_password or "") < MIN_PASSWORD_LENGTH:
        return f"Password must be at least {MIN_PASSWORD_LENGTH} characters."
    if new_password != confirm_password:
        return "Passwords do not match."
    return None


class AccountStore:
    """
    Registered accounts plus the single active session.

    Accounts live under one key as a list; the session is a password-free
    projection of one of them. Every fallible operation returns a Result.
    """

    def __init__(self, storage: LocalStorage) -> None:
        self._storage = storage

    # ---------------------------
    # Internal helpers
    # ---------------------------

    async def _load_accounts(self) -> List[Account]:
        return parse_many(await self._storage.read(USERS_KEY, []), Account.from_dict)

    async def _save_accounts(self, accounts: List[Account]) -> bool:
        return await self._storage.write(USERS_KEY, [a.to_dict() for a in accounts])

    async def _save_session(self, account: Account) -> None:
        await self._storage.write(SESSION_KEY, account.to_session().to_dict())

    @staticmethod
    def _new_account_id(accounts: List[Account]) -> str:
        taken = {a.id for a in accounts}
        stamp = int(time.time() * 1000)
        while f"user-{stamp}" in taken:
            stamp += 1
        return f"user-{stamp}"

    async def _set_password(
        self, accounts: List[Account], account_id: str, password: str
    ) -> None:
        updated = [
            Account(a.id, a.username, a.email, password) if a.id == account_id else a
            for a in accounts
        ]
        await self._save_accounts(updated)

    # ---------------------------
    # Session
    # ---------------------------

    async def get_current_user(self) -> Optional[Session]:
        """Return the logged-in user's public projection, or None."""
        raw = await self._storage.read(SESSION_KEY, {})
        if not raw:
            return None
        try:
            return Session.from_dict(raw)
        except (KeyError, TypeError):
            _logger.warning("Stored session is malformed, treating as logged out.")
            return None

    async def is_logged_in(self) -> bool:
        return await self.get_current_user() is not None

    async def current_user_id(self) -> Optional[str]:
        user = await self.get_current_user()
        return user.id if user else None

    async def logout(self) -> None:
        """Clear the session only; accounts are kept."""
        await self._storage.remove(SESSION_KEY)
        _logger.info("User logged out.")

    # ---------------------------
    # Registration & login
    # ---------------------------

    async def get_accounts(self) -> List[Account]:
        return await self._load_accounts()

    async def register(
        self,
        username: str,
        email: str,
        password: str,
        confirm_password: Optional[str] = None,
    ) -> Result[Account]:
        """
        Create an account and log it in.
        Password rules are checked before duplicates; email is checked for
        duplicates before username, both case-insensitively. Without a
        confirm_password only the length rule applies.
        """
        username = (username or "").strip()
        email = (email or "").strip()
        if not username or not email or not password:
            return Result.fail(ValidationError("All fields are required."))
        if confirm_password is None:
            confirm_password = password
        problem = _validate_new_password(password, confirm_password)
        if problem:
            return Result.fail(ValidationError(problem))

        async with self._storage.lock:
            accounts = await self._load_accounts()

            if any(a.email.lower() == email.lower() for a in accounts):
                return Result.fail(
                    ConflictError("An account with this email already exists.")
                )
            if any(a.username.lower() == username.lower() for a in accounts):
                return Result.fail(ConflictError("This username is already taken."))

            account = Account(
                id=self._new_account_id(accounts),
                username=username,
                email=email.lower(),
                password=password,
            )
            accounts.append(account)
            await self._save_accounts(accounts)
            await self._save_session(account)

        _logger.info(f"Registered account {account.id} ({account.username}).")
        return Result.ok(account)

    async def login(self, identifier: str, password: str) -> Result[Account]:
        """Log in by email or username (case-insensitive)."""
        identifier = (identifier or "").strip().lower()
        if not identifier or not password:
            return Result.fail(ValidationError("Please fill in all fields."))

        accounts = await self._load_accounts()
        account = next(
            (
                a
                for a in accounts
                if a.email == identifier or a.username.lower() == identifier
            ),
            None,
        )
        if account is None:
            return Result.fail(
                NotFoundError("No account found with that email or username.")
            )
        if account.password != password:
            return Result.fail(AuthError("Incorrect password. Please try again."))

        await self._save_session(account)
        _logger.info(f"User {account.id} logged in.")
        return Result.ok(account)

    # ---------------------------
    # Passwords
    # ---------------------------

    async def change_password(
        self, current_password: str, new_password: str, confirm_password: str
    ) -> Result[Session]:
        """In-session change; the current password must be re-entered."""
        user = await self.get_current_user()
        if user is None:
            return Result.fail(AuthError("You need to be signed in."))

        problem = _validate_new_password(new_password, confirm_password)
        if problem:
            return Result.fail(ValidationError(problem))

        async with self._storage.lock:
            accounts = await self._load_accounts()
            stored = next((a for a in accounts if a.id == user.id), None)
            if stored is None or stored.password != current_password:
                return Result.fail(AuthError("Current password is incorrect."))
            await self._set_password(accounts, stored.id, new_password)

        _logger.info(f"Password changed for {user.id}.")
        return Result.ok(user)

    async def find_account_by_email(self, email: str) -> Result[Session]:
        """First step of password recovery: does this email have an account?"""
        email = (email or "").strip().lower()
        if not email:
            return Result.fail(ValidationError("Please enter your email address."))

        for account in await self._load_accounts():
            if account.email.lower() == email:
                return Result.ok(account.to_session())
        return Result.fail(NotFoundError("No account found with that email address."))

    async def reset_password(
        self, email: str, new_password: str, confirm_password: str
    ) -> Result[Session]:
        """
        Second step of password recovery. Overwrites the password of the
        account with this email without asking for the old one.
        """
        problem = _validate_new_password(new_password, confirm_password)
        if problem:
            return Result.fail(ValidationError(problem))

        email = (email or "").strip().lower()
        async with self._storage.lock:
            accounts = await self._load_accounts()
            account = next((a for a in accounts if a.email.lower() == email), None)
            if account is None:
                return Result.fail(
                    NotFoundError("No account found with that email address.")
                )
            await self._set_password(accounts, account.id, new_password)

        _logger.info(f"Password reset for {account.id}.")
        return Result.ok(account.to_session())
