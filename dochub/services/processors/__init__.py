from dochub.services.processors.base import (
    AggregateItem,
    AggregateRequest,
    AnnotatedRequest,
    BaseProcessor,
    MergeRequest,
    ProcessorOutput,
    SingleRequest,
    ToolFamily,
)
from dochub.services.processors.registry import ProcessorRegistry, ToolId, registry

__all__ = [
    "AggregateItem",
    "AggregateRequest",
    "AnnotatedRequest",
    "BaseProcessor",
    "MergeRequest",
    "ProcessorOutput",
    "ProcessorRegistry",
    "SingleRequest",
    "ToolFamily",
    "ToolId",
    "registry",
]
