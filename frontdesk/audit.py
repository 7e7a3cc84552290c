from .models import Admin, AuditLog


def log_action(actor, action, model_name, object_id, description, changes=None, request=None):
    """Write to the immutable AuditLog."""
    return AuditLog.objects.create(
        actor=actor if isinstance(actor, Admin) else None,
        action=action,
        model_name=model_name,
        object_id=str(object_id),
        description=description,
        changes=changes or [],
        ip_address=request.META.get("REMOTE_ADDR") if request else None,
    )
