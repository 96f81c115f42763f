"""
Templates component - Maintenance template management.
"""

from ._impl import TemplateService, validate_template_data
from .models import TemplateValidationError, TemplateView
from .ports import ClockPort, RequestCountPort, TemplateRepoPort

__all__ = [
    "ClockPort",
    "RequestCountPort",
    "TemplateRepoPort",
    "TemplateService",
    "TemplateValidationError",
    "TemplateView",
    "validate_template_data",
]
