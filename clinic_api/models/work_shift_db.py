import uuid

from extensions import db

DAYS_OF_WEEK = (
    "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday",
)


class WorkShift(db.Model):
    __tablename__ = "work_shifts"

    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    doctor_id = db.Column(db.String(36), db.ForeignKey("doctors.id"), nullable=False, index=True)
    day = db.Column(db.String(10), nullable=False)
    start_time = db.Column(db.String(5), nullable=False)  # HH:mm
    end_time = db.Column(db.String(5), nullable=False)    # HH:mm

    def to_record(self) -> dict:
        return {
            "id": self.id,
            "doctorId": self.doctor_id,
            "day": self.day,
            "startTime": self.start_time,
            "endTime": self.end_time,
        }
