"""Local model inference for the content filter."""

from .backend import InferenceBackend, OnnxRuntimeBackend, get_backend
from .engine import InferenceEngine, InferenceOutput

__all__ = ["InferenceBackend", "InferenceEngine", "InferenceOutput", "OnnxRuntimeBackend", "get_backend"]
