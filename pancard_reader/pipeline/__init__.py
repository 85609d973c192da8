"""Pipeline package tying acquisition to recognition and extraction."""

from .controller import PipelineController

__all__ = ["PipelineController"]
