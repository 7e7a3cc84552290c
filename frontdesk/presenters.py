"""
Plain-dict renderings of the front desk models. Used for API responses and
for realtime payloads, so nothing here may touch the request.
"""


def admin_dict(a, detail=False):
    if not a:
        return None
    d = {
        "id": str(a.id),
        "username": a.username,
        "email": a.email,
        "first_name": a.first_name,
        "last_name": a.last_name,
        "role": a.role,
        "department": a.department,
        "permissions": a.permissions.as_dict(),
    }
    if detail:
        d.update({
            "is_active": a.is_active,
            "last_login": a.last_login,
            "login_attempts": a.login_attempts,
            "lock_until": a.lock_until,
            "is_locked": a.is_locked,
            "created_at": a.created_at,
        })
    return d


def visitor_dict(v, detail=False):
    if not v:
        return None
    d = {
        "id": str(v.id),
        "first_name": v.first_name,
        "last_name": v.last_name,
        "full_name": f"{v.first_name} {v.last_name}",
        "email": v.email,
        "phone": v.phone,
        "company": v.company,
        "purpose": v.purpose,
        "location": v.location,
        "status": v.status,
        "badge_id": v.badge_id,
        "check_in_time": v.check_in_time,
        "check_out_time": v.check_out_time,
        "expected_duration": v.expected_duration,
        "is_vip": v.is_vip,
        "security_level": v.security_level,
    }
    if detail:
        d.update({
            "qr_code": v.qr_code,
            "aadhaar_id": v.aadhaar_id,
            "pan_id": v.pan_id,
            "passport_id": v.passport_id,
            "driving_license_id": v.driving_license_id,
            "photo": v.photo or None,
            "temperature": str(v.temperature) if v.temperature is not None else None,
            "health_declaration": v.health_declaration,
            "notes": v.notes,
            "expected_departure": v.expected_departure,
            "duration_minutes": v.duration_minutes(),
            "created_at": v.created_at,
        })
    return d


def emergency_dict(e, detail=False):
    if not e:
        return None
    d = {
        "id": str(e.id),
        "type": e.type,
        "incident_code": e.incident_code,
        "status": e.status,
        "location": e.location,
        "created_at": e.created_at,
        "resolved_at": e.resolved_at,
    }
    if detail:
        d.update({
            "notes": e.notes,
            "reason": e.reason,
            "department_name": e.department_name,
            "group_name": e.group_name,
            "poc_name": e.poc_name,
            "poc_phone": e.poc_phone,
            "visitor_first_name": e.visitor_first_name,
            "visitor_last_name": e.visitor_last_name,
            "visitor_phone": e.visitor_phone,
            "representative_id_document": e.representative_id_document,
            "representative_id_number": e.representative_id_number,
            "headcount": e.headcount,
            "is_minor": e.is_minor,
            "guardian_contact": e.guardian_contact,
            "created_by": str(e.created_by_id) if e.created_by_id else None,
            "resolved_by": str(e.resolved_by_id) if e.resolved_by_id else None,
        })
    return d
