# storefront/backend/routers/admin_sync.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from storefront.backend.database import get_db
from storefront.backend.routers.deps import log_admin_call
from storefront.backend.services.user_service import ServerUserService
from storefront.domain.schemas import RoleSync, RoleUpdate, User

router = APIRouter(
    prefix="/api/admin-sync",
    tags=["admin-sync"],
    dependencies=[Depends(log_admin_call)],
)


def get_service(db: Session):
    return ServerUserService(db)


@router.put("/users/{user_id}/role", response_model=User)
def update_user_role(user_id: str, payload: RoleUpdate, db: Session = Depends(get_db)):
    return get_service(db).update_role(user_id, payload)


@router.post("/sync-role", response_model=User)
def sync_role(payload: RoleSync, db: Session = Depends(get_db)):
    return get_service(db).sync_role(payload)


@router.get("/users/{user_id}", response_model=User)
def get_user(user_id: str, db: Session = Depends(get_db)):
    return get_service(db).get_user(user_id)
