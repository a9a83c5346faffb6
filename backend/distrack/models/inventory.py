from __future__ import annotations

from ..extensions import db
from distrack.time_utils import to_utc_z

class Product(db.Model):
    """
    Product master data.

    MULTI-TENANT: Products are scoped to companies via company_id.

    STOCK DESIGN DECISION:
    initial_quantity is fixed at creation and never mutated. There is no
    stored "remaining" column: remaining stock is always derived as

        initial_quantity - SUM(distributions.quantity)

    (see services/ledger_service.py). Keeping a running counter would need
    to be kept in sync with the distribution log; deriving it cannot drift.
    """
    __tablename__ = "products"
    __table_args__ = (
        db.Index("ix_products_company_name", "company_id", "name"),
        db.CheckConstraint("initial_quantity >= 0", name="ck_products_initial_quantity"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    company_id = db.Column(db.Integer, db.ForeignKey("companies.id"), nullable=False, index=True)

    name = db.Column(db.String(255), nullable=False)
    category = db.Column(db.String(120), nullable=True, index=True)
    description = db.Column(db.Text, nullable=True)

    initial_quantity = db.Column(db.Integer, nullable=False)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    company = db.relationship("Company", backref=db.backref("products", lazy=True))

    def __repr__(self) -> str:
        return f"<Product id={self.id} name={self.name!r} company_id={self.company_id}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "company_id": self.company_id,
            "name": self.name,
            "category": self.category,
            "description": self.description,
            "initial_quantity": self.initial_quantity,
            "created_at": to_utc_z(self.created_at),
        }


class Distribution(db.Model):
    """
    One immutable record of a quantity of one product handed to one worker.

    Append-only: no edit, delete or reversal path exists. The worker is free
    text (name/gender/mobile), not a normalized entity; reporting groups by
    exact worker_name string.
    """
    __tablename__ = "distributions"
    __table_args__ = (
        db.Index("ix_distributions_company_distributed", "company_id", "distributed_at"),
        db.Index("ix_distributions_company_worker", "company_id", "worker_name"),
        db.CheckConstraint("quantity > 0", name="ck_distributions_quantity"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    company_id = db.Column(db.Integer, db.ForeignKey("companies.id"), nullable=False, index=True)
    product_id = db.Column(db.Integer, db.ForeignKey("products.id"), nullable=False, index=True)

    worker_name = db.Column(db.String(255), nullable=False)
    worker_gender = db.Column(db.String(16), nullable=True)
    worker_mobile = db.Column(db.String(32), nullable=True)

    quantity = db.Column(db.Integer, nullable=False)

    distributed_by_user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)

    # Set by the writer at insert time; shared by every row of one submission
    distributed_at = db.Column(db.DateTime(timezone=True), nullable=False, index=True)

    product = db.relationship("Product", backref=db.backref("distributions", lazy=True))
    distributed_by = db.relationship("User", backref=db.backref("distributions", lazy=True))

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "company_id": self.company_id,
            "product_id": self.product_id,
            "worker_name": self.worker_name,
            "worker_gender": self.worker_gender,
            "worker_mobile": self.worker_mobile,
            "quantity": self.quantity,
            "distributed_by_user_id": self.distributed_by_user_id,
            "distributed_at": to_utc_z(self.distributed_at),
        }
