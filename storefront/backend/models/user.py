from sqlalchemy import Column, String

from storefront.backend.database import Base


class UserModel(Base):
    __tablename__ = "users"

    id = Column(String, primary_key=True)
    email = Column(String, nullable=True)
    first_name = Column(String, nullable=True)
    last_name = Column(String, nullable=True)
    role = Column(String, nullable=False, default="customer")
    role_source = Column(String, nullable=False, default="manual")
