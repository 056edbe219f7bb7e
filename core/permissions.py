"""
Capability check, independent of HTTP.

can_act_for(caller, target_email, required_role):
- acting for yourself needs required_role (admins always pass)
- acting for someone else needs the admin role (impersonation)
"""
from typing import Optional

from models import User
from database import get_settings


def can_act_for(caller: Optional[User], target_email: Optional[str], required_role: str) -> bool:
    if caller is None:
        return False

    if target_email and target_email != caller.email:
        return caller.is_admin or caller.has_role(get_settings().admin_role)

    return caller.is_admin or caller.has_role(required_role)
