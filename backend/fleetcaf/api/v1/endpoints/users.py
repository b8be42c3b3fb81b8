from fastapi import APIRouter, Depends

from fleetcaf.api.deps import get_current_actor
from fleetcaf.schemas.user import CafPermissionsRead
from fleetcaf.workflow import Actor

router = APIRouter()


@router.get("/me/caf-permissions", response_model=CafPermissionsRead)
def get_my_caf_permissions(actor: Actor = Depends(get_current_actor)):
    return CafPermissionsRead(
        staff_id=actor.staff_id,
        organization_id=actor.organization_id,
        user_type=actor.user_type,
        can_sign_cafs=actor.may_sign,
        can_approve_cafs=actor.may_approve,
        can_create_cafs=actor.may_create_cafs,
        is_master=actor.is_master,
    )
