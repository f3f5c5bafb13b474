import uuid

from extensions import db


class Doctor(db.Model):
    __tablename__ = "doctors"

    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = db.Column(db.String(100), nullable=False)
    specialization = db.Column(db.String(100))
    phone = db.Column(db.String(20))

    # HAS_WORK_SHIFT
    work_shifts = db.relationship(
        "WorkShift", backref="doctor", lazy=True, cascade="all, delete-orphan"
    )
    # WORK_AT
    clinic_links = db.relationship(
        "WorkAt", backref="doctor", lazy=True, cascade="all, delete-orphan"
    )

    def to_record(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "specialization": self.specialization,
            "phone": self.phone,
        }
