from .provider import UserRoleProvider

__all__ = ["UserRoleProvider"]
