from inkpress.auth.permissions import Actor, UserRole, can_manage


__all__ = ["Actor", "UserRole", "can_manage"]
