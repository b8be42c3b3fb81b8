from pydantic import BaseModel


class CafPermissionsRead(BaseModel):
    """Capabilities of the calling staff member, independent of any CAF."""

    staff_id: str
    organization_id: str | None = None
    user_type: str
    can_sign_cafs: bool
    can_approve_cafs: bool
    can_create_cafs: bool
    is_master: bool
