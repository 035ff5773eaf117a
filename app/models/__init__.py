# app/models/__init__.py
# importa todos los modelos para poblar Base.metadata
from app.models.auth import User, Logbook, LogbookMember, MemberRole, InviteCode  # noqa: F401
from app.models.audit import ContentAuditLog, ContentAction  # noqa: F401
