from __future__ import annotations

from ..extensions import db
from app.time_utils import to_utc_z


class Profile(db.Model):
    """
    Application-level account record, one per identity-provider user.

    The id is the identity provider's user id; credentials, confirmation and
    sign-in timestamps live with the provider, not here.

    Lifecycle: created "inactive" by the admin gateway, flipped to "active"
    once the provider reports the email as confirmed.
    """
    __tablename__ = "profiles"
    __table_args__ = (
        db.CheckConstraint("role IN ('admin', 'staff')", name="role"),
        db.CheckConstraint("status IN ('active', 'inactive')", name="status"),
        db.Index("ix_profiles_role_status", "role", "status"),
    )

    id = db.Column(db.String(36), primary_key=True)
    full_name = db.Column(db.String(255), nullable=False)
    email = db.Column(db.String(255), nullable=False, unique=True)
    contact_number = db.Column(db.String(32), nullable=True)

    role = db.Column(db.String(16), nullable=False, default="staff")
    status = db.Column(db.String(16), nullable=False, default="inactive")

    stall_id = db.Column(db.Integer, db.ForeignKey("stalls.stall_id"), nullable=True, index=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    stall = db.relationship("Stall", backref=db.backref("staff", lazy=True))

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"

    def __repr__(self) -> str:
        return f"<Profile id={self.id} role={self.role!r}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "full_name": self.full_name,
            "email": self.email,
            "contact_number": self.contact_number,
            "role": self.role,
            "status": self.status,
            "stall_id": self.stall_id,
            "created_at": to_utc_z(self.created_at),
        }
