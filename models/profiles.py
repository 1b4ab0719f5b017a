from core.database import Base
from sqlalchemy import Column, String
from .mixins import CreatedAtMixin


class Profile(Base, CreatedAtMixin):
    """
    Customer profile mirrored from the hosted auth backend.

    Guest checkouts have no profile row; their customer record is derived
    from orders instead (see OrderQueryService.list_customers).
    """
    __tablename__ = "profiles"

    #pk (auth backend user id)
    id = Column(String, primary_key=True)

    name = Column(String)
    email = Column(String)
    phone = Column(String)
