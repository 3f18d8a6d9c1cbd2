"""Onboarding package - Registers students and teachers."""

from academia.onboarding.models import StudentInput, TeacherInput
from academia.onboarding.service import OnboardingService, generate_registration_code

__all__ = [
    "OnboardingService",
    "StudentInput",
    "TeacherInput",
    "generate_registration_code",
]
