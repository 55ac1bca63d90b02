"""User repository for persistence and credential utilities."""

from __future__ import annotations

from typing import cast

from sqlalchemy import or_, select, update

from vidtube.models.user import User
from vidtube.repositories.base import BaseRepository


def _fold(value: str) -> str:
    return value.strip().lower()


class UserRepository(BaseRepository[User]):
    """Persistence-only repository for :class:`User`.

    Lookups are case-insensitive on ``email`` and ``username`` because both are
    stored folded. The refresh-token column is written with single-row
    ``UPDATE`` statements that bypass model validation.
    """

    model = User

    # ---------------------------- Whitelists ----------------------------

    def _updatable_fields(self):
        """Publicly allowed updatable fields (not including password or token)."""
        return {"email", "username", "full_name", "avatar", "cover_image"}

    # ---------------------------- Lookup helpers ----------------------------

    def find_by_email_or_username(
        self, *, email: str | None = None, username: str | None = None
    ) -> User | None:
        """Return the first user matching either identifier.

        Blank identifiers are ignored; ``None`` is returned when both are blank.
        """
        clauses = []
        if email and email.strip():
            clauses.append(User.email == _fold(email))
        if username and username.strip():
            clauses.append(User.username == _fold(username))
        if not clauses:
            return None
        stmt = select(User).where(or_(*clauses)).order_by(User.id)
        return cast(User | None, self.session.execute(stmt).scalars().first())

    def exists_by_email_or_username(
        self, *, email: str, username: str, exclude_id: int | None = None
    ) -> bool:
        """Return ``True`` when another user already holds the email or handle.

        :param exclude_id: Ignore this user (used when updating one's own profile).
        """
        stmt = select(User.id).where(
            or_(User.email == _fold(email), User.username == _fold(username))
        )
        if exclude_id is not None:
            stmt = stmt.where(User.id != exclude_id)
        return self.session.execute(stmt.limit(1)).first() is not None

    # ---------------------------- Password ops ----------------------------

    def update_password(self, user: User, new_password: str) -> None:
        """Hash and store a new password, flushing the change.

        :param user: Persistent user row.
        :param new_password: Raw password to assign; model handles hashing.
        """
        user.password = new_password  # invokes setter → hash
        self.flush()

    # ---------------------------- Refresh token ----------------------------

    def swap_refresh_token(
        self,
        user_id: int,
        new_token: str | None,
        *,
        expected: str | None = None,
        unconditional: bool = False,
    ) -> bool:
        """Replace the stored refresh token with a single ``UPDATE``.

        When ``unconditional`` is false the row is only touched while it still
        holds ``expected`` (compare-and-swap), so two concurrent rotations of the
        same token cannot both succeed.

        :param user_id: Target user id.
        :param new_token: Token to store, or ``None`` to clear.
        :param expected: Token the caller believes is currently stored.
        :param unconditional: Skip the compare step (login/logout).
        :returns: ``True`` if exactly one row was updated.
        :rtype: bool
        """
        stmt = update(User).where(User.id == user_id)
        if not unconditional:
            if expected is None:
                stmt = stmt.where(User.refresh_token.is_(None))
            else:
                stmt = stmt.where(User.refresh_token == expected)
        result = self.session.execute(
            stmt.values(refresh_token=new_token).execution_options(synchronize_session="fetch")
        )
        return int(result.rowcount or 0) == 1

    def clear_refresh_token(self, user_id: int) -> bool:
        """Clear the stored refresh token; idempotent."""
        return self.swap_refresh_token(user_id, None, unconditional=True)
