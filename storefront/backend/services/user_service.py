from sqlalchemy.orm import Session

from storefront.backend.models.user import UserModel
from storefront.backend.repos.user_repo import UserRepo
from storefront.domain.schemas import RoleSync, RoleUpdate, User
from storefront.exceptions import NotFoundError
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


def to_user(user: UserModel) -> User:
    return User(
        id=user.id,
        email=user.email or "",
        first_name=user.first_name,
        last_name=user.last_name,
        role=user.role,
    )


class ServerUserService:
    def __init__(self, db: Session):
        self.repo = UserRepo(db)

    def update_role(self, user_id: str, payload: RoleUpdate) -> User:
        user = self.repo.get_user(user_id) or UserModel(id=user_id)
        user.role = payload.role
        user.role_source = payload.source
        logger.info(f"Role of {user_id} set to {payload.role} ({payload.source})")
        return to_user(self.repo.save(user))

    def sync_role(self, payload: RoleSync) -> User:
        user = self.repo.get_user(payload.clerk_id) or UserModel(id=payload.clerk_id)
        if payload.email:
            user.email = payload.email
        user.role = payload.role
        user.role_source = payload.source
        return to_user(self.repo.save(user))

    def get_user(self, user_id: str) -> User:
        user = self.repo.get_user(user_id)
        if not user:
            raise NotFoundError("User", user_id)
        return to_user(user)
