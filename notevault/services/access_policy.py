"""Note authorization: admins may act on any note, users only on their own."""

ADMIN = "admin"
USER = "user"
ROLES = (ADMIN, USER)


def can_access(role: str, owner: str | None, requester: str | None) -> bool:
    if role == ADMIN:
        return True
    return owner is not None and owner == requester


def can_modify(role: str, owner: str | None, requester: str | None) -> bool:
    if role == ADMIN:
        return True
    return owner is not None and owner == requester
