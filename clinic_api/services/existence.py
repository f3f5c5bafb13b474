from clinic_api.services.graph_store import node_exists


def doctor_exists(doctor_id: str) -> bool:
    return node_exists("Doctor", doctor_id)


def patient_exists(patient_id: str) -> bool:
    return node_exists("Patient", patient_id)


def clinic_exists(clinic_id: str) -> bool:
    return node_exists("Clinic", clinic_id)


def appointment_exists(appointment_id: str) -> bool:
    return node_exists("Appointment", appointment_id)


def missing_entities(doctor_id: str, patient_id: str, clinic_id: str) -> list[str]:
    """Labels of the referenced records that do not resolve, in request order."""
    checks = (
        ("Doctor", doctor_exists, doctor_id),
        ("Patient", patient_exists, patient_id),
        ("Clinic", clinic_exists, clinic_id),
    )
    return [label for label, exists, node_id in checks if not exists(node_id)]
