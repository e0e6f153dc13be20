"""Editor configuration (launch/tasks/settings/extensions) validation."""

from envcheck.editor.pipeline import EditorConfigPipeline

__all__ = ["EditorConfigPipeline"]
