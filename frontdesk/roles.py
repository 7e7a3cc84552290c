"""Admin roles, the five-flag permission record and who may create whom."""

from dataclasses import asdict, dataclass, fields

SUPER_ADMIN = "SUPER_ADMIN"
ADMIN = "ADMIN"
SECURITY = "SECURITY"
RECEPTIONIST = "RECEPTIONIST"

ROLE_CHOICES = [
    (SUPER_ADMIN, "Super Admin"),
    (ADMIN, "Admin"),
    (SECURITY, "Security"),
    (RECEPTIONIST, "Receptionist"),
]
ROLE_LABELS = dict(ROLE_CHOICES)

# Roles that Admins (and Super Admins) may hand out.
STAFF_ROLES = (SECURITY, RECEPTIONIST)
# Roles only a Super Admin may hand out.
PRIVILEGED_ROLES = (SUPER_ADMIN, ADMIN)


@dataclass(frozen=True)
class Permissions:
    can_view_analytics: bool = False
    can_manage_visitors: bool = False
    can_manage_admins: bool = False
    can_export_data: bool = False
    can_view_reports: bool = False

    @classmethod
    def names(cls):
        return [f.name for f in fields(cls)]

    @classmethod
    def for_role(cls, role):
        """Default permission set for ``role``; unknown roles get nothing."""
        if role == SUPER_ADMIN:
            return cls(True, True, True, True, True)
        if role == ADMIN:
            return cls(
                can_view_analytics=True,
                can_manage_visitors=True,
                can_manage_admins=False,
                can_export_data=True,
                can_view_reports=True,
            )
        if role in STAFF_ROLES:
            return cls(can_manage_visitors=True, can_view_reports=True)
        return cls()

    @classmethod
    def from_mapping(cls, data):
        """Explicit permissions supplied by a caller. Missing flags are False."""
        return cls(**{name: bool(data.get(name, False)) for name in cls.names()})

    def as_dict(self):
        return asdict(self)


def can_create_role(actor_role, target_role):
    if target_role in PRIVILEGED_ROLES:
        return actor_role == SUPER_ADMIN
    if target_role in STAFF_ROLES:
        return actor_role in PRIVILEGED_ROLES
    return False


def list_roles():
    return [{"value": value, "label": label} for value, label in ROLE_CHOICES]
