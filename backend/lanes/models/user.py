from datetime import datetime
from sqlmodel import SQLModel, Field


class User(SQLModel, table=True):
    """
    Local record of an authenticated identity.

    The primary key is the uid from the verified identity token. Rows are
    written the first time a uid shows up, so invitations can find users
    by email and member lists can show names.
    """

    __tablename__ = "users"

    id: str = Field(primary_key=True)
    email: str | None = Field(default=None, index=True, unique=True)
    display_name: str
    created_at: datetime = Field(default_factory=datetime.utcnow)
