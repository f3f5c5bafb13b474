import uuid

from extensions import db


class Clinic(db.Model):
    __tablename__ = "clinics"

    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = db.Column(db.String(120), nullable=False)
    address = db.Column(db.String(255))
    phone_number = db.Column(db.String(20))
    open_time = db.Column(db.String(5), nullable=False)   # HH:mm
    close_time = db.Column(db.String(5), nullable=False)  # HH:mm

    doctor_links = db.relationship(
        "WorkAt", backref="clinic", lazy=True, cascade="all, delete-orphan"
    )

    def to_record(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "address": self.address,
            "phoneNumber": self.phone_number,
            "openTime": self.open_time,
            "closeTime": self.close_time,
        }


class WorkAt(db.Model):
    """Doctor -[WORK_AT {startDate}]-> Clinic."""
    __tablename__ = "work_at"

    doctor_id = db.Column(db.String(36), db.ForeignKey("doctors.id"), primary_key=True)
    clinic_id = db.Column(db.String(36), db.ForeignKey("clinics.id"), primary_key=True)
    start_date = db.Column(db.Date, nullable=False)

    def formatted_start_date(self) -> str | None:
        if not self.start_date:
            return None
        return self.start_date.strftime("%d-%m-%Y")
