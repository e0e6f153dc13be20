"""Container environment validation pipeline."""

from envcheck.container.pipeline import ContainerPipeline, derive_image_tag
from envcheck.stages import Criticality, StageDescriptor, run_stages

__all__ = [
    "ContainerPipeline",
    "Criticality",
    "StageDescriptor",
    "derive_image_tag",
    "run_stages",
]
