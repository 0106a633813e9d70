"""Audio concatenation components."""

from .merger import AudioMerger, merged_segment_path

__all__ = ["AudioMerger", "merged_segment_path"]
