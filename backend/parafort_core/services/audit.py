import uuid
from datetime import UTC, datetime

from sqlalchemy.ext.asyncio import AsyncSession

from parafort_core.models.audit_log import AuditLog

SENSITIVE_AUDIT_FIELDS = {"password", "ein", "ssn", "client_secret", "code"}


def sanitize_field_names(changed_field_names: list[str]) -> list[str]:
    sanitized: list[str] = []
    for field_name in changed_field_names:
        lowered = field_name.lower()
        if any(sensitive_key in lowered for sensitive_key in SENSITIVE_AUDIT_FIELDS):
            sanitized.append(f"{field_name}_redacted")
        else:
            sanitized.append(field_name)
    return sanitized


async def write_audit_log(
    db: AsyncSession,
    *,
    actor_user_id: uuid.UUID | None,
    entity_name: str,
    entity_id: uuid.UUID,
    action: str,
    changed_field_names: list[str],
    metadata: dict,
    correlation_id: str | None,
) -> None:
    audit_entry = AuditLog(
        actor_user_id=actor_user_id,
        action=action,
        entity_name=entity_name,
        entity_id=entity_id,
        field_changes={
            "changed_fields": sanitize_field_names(changed_field_names),
            "metadata": metadata,
        },
        correlation_id=correlation_id,
        created_at=datetime.now(UTC),
    )
    db.add(audit_entry)
    await db.flush()
