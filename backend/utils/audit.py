from sqlalchemy.orm import Session
from models.log import Log

def write_log(db: Session, *, user_id, action, resource, status="SUCCESS", ip=None, meta=None, commit=True):
    entry = Log(user_id=user_id, action=action, resource=resource, status=status, ip=ip, meta=meta or {})
    db.add(entry)
    # commit=False lets the entry share the caller's transaction
    if commit:
        db.commit()

def client_ip(request) -> str:
    return request.client.host if request and request.client else None
