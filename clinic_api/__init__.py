"""Clinic scheduling API: appointments, doctors, clinics and work shifts."""

__version__ = "0.1.0"
