"""CI/CD platform integration: detection, output adapters and pipeline templates."""

from rhodibot.ci.platform import CIPlatform, detect_platform
from rhodibot.ci.templates import PipelineValidation, render_workflow, validate_pipeline

__all__ = [
    "CIPlatform",
    "PipelineValidation",
    "detect_platform",
    "render_workflow",
    "validate_pipeline",
]
