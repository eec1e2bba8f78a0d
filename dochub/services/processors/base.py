from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar, Dict, List, Optional, Type, Union

from dochub.schemas.processing import ToolOptions


class ToolFamily(str, Enum):
    """How a tool consumes the files of one request."""

    SINGLE = "single"
    MERGE = "merge"
    AGGREGATE = "aggregate"
    ANNOTATED = "annotated"


@dataclass
class SingleRequest:
    data: bytes
    name: str
    content_type: str


@dataclass
class MergeRequest:
    primary: bytes
    additional: List[bytes]


@dataclass
class AggregateItem:
    data: bytes
    content_type: str


@dataclass
class AggregateRequest:
    items: List[AggregateItem]


@dataclass
class AnnotatedRequest:
    primary: bytes
    name: str


ProcessorRequest = Union[SingleRequest, MergeRequest, AggregateRequest, AnnotatedRequest]


@dataclass
class ProcessorOutput:
    name: str
    mime_type: str
    data: bytes
    # Shown to the user as the source name; defaults to the input file name
    original_name: Optional[str] = field(default=None)


class BaseProcessor(ABC):
    """Contract for every tool processor.

    Options are validated once, when the processor is built; ``process`` only
    sees bytes. Processors raise ``ProcessingError`` (or let library errors
    escape) and never catch them.
    """

    family: ClassVar[ToolFamily] = ToolFamily.SINGLE
    options_model: ClassVar[Type[ToolOptions]] = ToolOptions

    def __init__(self, options: Optional[Dict[str, Any]] = None):
        self.options = self.options_model.model_validate(options or {})

    @abstractmethod
    def process(self, request: ProcessorRequest) -> Union[ProcessorOutput, List[ProcessorOutput]]:
        """Transform the request bytes.

        Args:
            request: the request variant matching ``family``.

        Returns:
            One output, or an ordered list for multi-output tools.
        """
