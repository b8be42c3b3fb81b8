"""
signature.py - Append-only CAF signature records.

GUARANTEES:
1. Signatures are never updated or deleted once written
2. signed_at is assigned by the server, never by the client
3. On PostgreSQL the guarantee is also enforced by a table trigger
"""

import uuid

from sqlalchemy import DDL, Column, DateTime, ForeignKey, String, Text, event
from sqlalchemy.orm import relationship

from fleetcaf.database import Base


class SignatureImmutableError(Exception):
    """Raised when code attempts to modify or remove a persisted signature."""

    pass


class CafSignature(Base):
    __tablename__ = "caf_signatures"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    caf_id = Column(
        String(36), ForeignKey("corrective_action_forms.id"), nullable=False, index=True
    )
    staff_id = Column(String(36), ForeignKey("staff.id"), nullable=False, index=True)
    signature_type = Column(String(20), nullable=False)  # SignatureType value
    digital_signature = Column(Text, nullable=False)  # Opaque payload
    ip_address = Column(String(64), nullable=True)
    notes = Column(Text, nullable=True)
    signed_at = Column(DateTime, nullable=False, index=True)

    caf = relationship("CorrectiveActionForm", back_populates="signatures")
    staff = relationship("Staff")


def _reject_mutation(mapper, connection, target):
    raise SignatureImmutableError(
        f"Signature {target.id} is append-only and cannot be modified or deleted"
    )


event.listen(CafSignature, "before_update", _reject_mutation)
event.listen(CafSignature, "before_delete", _reject_mutation)


prevent_mutation_trigger = DDL("""
    CREATE OR REPLACE FUNCTION reject_signature_mutation()
    RETURNS TRIGGER AS $$
    BEGIN
        RAISE EXCEPTION 'CAF signatures are append-only. Operation % is forbidden on caf_signatures.', TG_OP;
    END;
    $$ LANGUAGE plpgsql;

    CREATE TRIGGER prevent_signature_mutation
    BEFORE UPDATE OR DELETE ON caf_signatures
    FOR EACH ROW EXECUTE FUNCTION reject_signature_mutation();
""")

event.listen(
    CafSignature.__table__,
    "after_create",
    prevent_mutation_trigger.execute_if(dialect="postgresql"),
)
