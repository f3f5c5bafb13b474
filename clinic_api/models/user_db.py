import uuid

from extensions import db

ROLES = ("admin", "Doctors", "Patients")


class User(db.Model):
    __tablename__ = "users"

    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    username = db.Column(db.String(80), unique=True, nullable=False)
    password = db.Column(db.String(255), nullable=False)  # passlib hash
    role = db.Column(db.String(20), nullable=False, default="Patients")

    def to_record(self) -> dict:
        # never expose the hash
        return {"id": self.id, "username": self.username, "role": self.role}
