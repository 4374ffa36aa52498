from dataclasses import dataclass

from lab_booking.db.models.user import UserRole


@dataclass(frozen=True)
class Actor:
    """Who is performing an operation.

    Resolved once per request from either credential path and passed
    explicitly to every service call.
    """

    id: str
    role: str
    email: str | None = None
    name: str | None = None

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN.value

    def owns_or_admin(self, owner_id: str) -> bool:
        return self.is_admin or self.id == owner_id
