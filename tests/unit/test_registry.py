import pytest

from dochub.core.errors import InvalidToolError
from dochub.services.processors import ToolFamily, ToolId, registry
from dochub.services.processors.pdf_tools import RotateProcessor, WatermarkProcessor


class TestProcessorRegistry:
    def test_every_tool_id_is_registered(self) -> None:
        assert sorted(registry.tool_ids()) == sorted(tool.value for tool in ToolId)

    def test_unknown_tool_is_rejected(self) -> None:
        with pytest.raises(InvalidToolError, match="Invalid tool ID: pdf-teleport"):
            registry.create("pdf-teleport", {})

    @pytest.mark.parametrize("tool_id, family", [
        ("pdf-merge", ToolFamily.MERGE),
        ("images-to-pdf", ToolFamily.AGGREGATE),
        ("pdf-annotate", ToolFamily.ANNOTATED),
        ("pdf-split", ToolFamily.SINGLE),
        ("image-compress", ToolFamily.SINGLE),
    ])
    def test_families(self, tool_id: str, family: ToolFamily) -> None:
        assert registry.family(tool_id) is family

    def test_creates_processor_with_validated_options(self) -> None:
        processor = registry.create("pdf-rotate", {"rotation": 180})
        assert isinstance(processor, RotateProcessor)
        assert processor.options.rotation == 180

    def test_missing_options_use_defaults(self) -> None:
        processor = registry.create("pdf-watermark", None)
        assert isinstance(processor, WatermarkProcessor)
        assert processor.options.watermark_text == "UPSA DocHub"

    def test_invalid_options_fail_construction(self) -> None:
        with pytest.raises(InvalidToolError, match=r"Invalid tool ID: pdf-rotate\. Error: .*rotation"):
            registry.create("pdf-rotate", {"rotation": 45})

    def test_table_is_read_only(self) -> None:
        with pytest.raises(TypeError):
            registry._processors[ToolId.PDF_MERGE] = RotateProcessor
