from extensions import db


class Medicine(db.Model):
    __tablename__ = "medicines"

    medication_id = db.Column(db.String(64), primary_key=True)
    name = db.Column(db.String(120), nullable=False)
    dosage = db.Column(db.String(120))
    administration = db.Column(db.String(120))
    side_effects = db.Column(db.Text)
    quantity = db.Column(db.Integer, nullable=False, default=0)

    def to_record(self) -> dict:
        return {
            "MedicationID": self.medication_id,
            "Name": self.name,
            "Dosage": self.dosage,
            "Administration": self.administration,
            "SideEffects": self.side_effects,
            "Quantity": self.quantity,
        }
