import uuid

from extensions import db

STATUS_SCHEDULED = "Scheduled"
STATUS_CANCELLED = "Cancelled"
STATUS_COMPLETED = "Completed"
VALID_STATUSES = (STATUS_SCHEDULED, STATUS_CANCELLED, STATUS_COMPLETED)

# Doctor -[ATTENDS]-> Appointment, one row per attending doctor
appointment_attendees = db.Table(
    "appointment_attendees",
    db.Column("doctor_id", db.String(36), db.ForeignKey("doctors.id"), primary_key=True),
    db.Column("appointment_id", db.String(36), db.ForeignKey("appointments.id"), primary_key=True),
)


class Appointment(db.Model):
    __tablename__ = "appointments"

    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    patient_id = db.Column(db.String(36), db.ForeignKey("patients.id"), nullable=False, index=True)
    clinic_id = db.Column(db.String(36), db.ForeignKey("clinics.id"), nullable=False)

    # ISO-8601 string exactly as booked
    appointment_date = db.Column(db.String(40), nullable=False)
    duration = db.Column(db.Integer, nullable=False)
    status = db.Column(db.String(20), nullable=False, default=STATUS_SCHEDULED)
    created_at = db.Column(db.String(40), nullable=False)
    updated_at = db.Column(db.String(40), nullable=False)

    # Naive UTC bounds of [AppointmentDate, AppointmentDate + duration)
    starts_at = db.Column(db.DateTime, nullable=False, index=True)
    ends_at = db.Column(db.DateTime, nullable=False)

    # Patient -[HAS_APPOINTMENT]-> Appointment
    patient = db.relationship("Patient", backref=db.backref("appointments", lazy=True))
    # Appointment -[OCCURS_AT]-> Clinic
    clinic = db.relationship("Clinic", backref=db.backref("appointments", lazy=True))
    doctors = db.relationship(
        "Doctor",
        secondary=appointment_attendees,
        backref=db.backref("appointments", lazy=True),
        lazy=True,
    )

    def to_record(self) -> dict:
        return {
            "id": self.id,
            "AppointmentDate": self.appointment_date,
            "duration": self.duration,
            "Status": self.status,
            "CreatedAt": self.created_at,
            "UpdatedAt": self.updated_at,
        }
