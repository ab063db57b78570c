import json
from flask import request, has_request_context
from models import db
from models.audit_log import AuditLog

def log_event(action: str, telegram_id=None, entity=None, entity_id=None, metadata=None, commit=True):
    ip = None
    user_agent = None
    if has_request_context():
        ip = request.headers.get("X-Forwarded-For", request.remote_addr)
        user_agent = request.headers.get("User-Agent", "")

    row = AuditLog(
        telegram_id=str(telegram_id) if telegram_id is not None else None,
        action=action,
        entity=entity,
        entity_id=str(entity_id) if entity_id is not None else None,
        ip=ip,
        user_agent=user_agent[:255] if user_agent else None,
        metadata_json=json.dumps(metadata) if metadata else None
    )
    db.session.add(row)
    if commit:
        db.session.commit()
