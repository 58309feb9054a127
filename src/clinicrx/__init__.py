"""
Clinic-Rx: prescription authoring and clinic management backend

Handles patient registration, hand-drawn prescriptions composed with the
clinic's header/footer template, payment tracking and role-based access.
"""

__version__ = "0.1.0"
__author__ = "Clinic-Rx Team"
__description__ = "Prescription authoring and clinic management backend"
