from crm_access.models.user import User

__all__ = ["User"]
