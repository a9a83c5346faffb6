from __future__ import annotations

from ..extensions import db
from distrack.time_utils import to_utc_z

class Company(db.Model):
    """
    Multi-tenant root: every tenant is a Company.

    All users, products and distributions belong to exactly one company.
    No data may cross company boundaries.

    DESIGN:
    - Companies are created implicitly by the first registration that names them
    - Company names are globally unique (they are the login handle)
    - There is no update or delete path
    """
    __tablename__ = "companies"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False, unique=True, index=True)

    created_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
    )

    def __repr__(self) -> str:
        return f"<Company id={self.id} name={self.name!r}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "created_at": to_utc_z(self.created_at),
        }
