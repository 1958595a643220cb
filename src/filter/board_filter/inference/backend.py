from __future__ import annotations

import logging
import threading
from importlib import resources
from importlib.abc import Traversable
from pathlib import Path
from typing import Protocol

import numpy as np
import onnxruntime as ort

from board_filter.errors import InferenceError

logger = logging.getLogger(__name__)

_DEFAULT_MODEL = resources.files("board_filter.assets").joinpath("model.onnx")


class InferenceBackend(Protocol):
    """Executes the classifier graph on one ``(1, L)`` batch."""

    def run(self, input_ids: np.ndarray, attention_mask: np.ndarray) -> np.ndarray:
        """Return the first graph output. Raises ``InferenceError`` on any failure."""
        ...


class OnnxRuntimeBackend:
    """ONNX Runtime session over a serialized graph, parsed at most once."""

    def __init__(self, model_source: Path | Traversable | None = None) -> None:
        self.model_source = model_source or _DEFAULT_MODEL
        self._session: ort.InferenceSession | None = None
        self._load_error: InferenceError | None = None
        self._lock = threading.Lock()

    def _load_session(self) -> ort.InferenceSession:
        try:
            model_bytes = self.model_source.read_bytes()
        except OSError as exc:
            raise InferenceError(f"Unable to read model graph from {self.model_source}: {exc}") from exc

        try:
            session = ort.InferenceSession(model_bytes, providers=["CPUExecutionProvider"])
        except Exception as exc:  # onnxruntime raises untyped errors for bad graphs
            raise InferenceError(f"Failed to parse model graph: {exc}") from exc

        logger.info("Loaded model graph from %s (%d bytes)", self.model_source, len(model_bytes))
        return session

    @property
    def session(self) -> ort.InferenceSession:
        if self._session is None and self._load_error is None:
            with self._lock:
                if self._session is None and self._load_error is None:
                    try:
                        self._session = self._load_session()
                    except InferenceError as exc:
                        self._load_error = exc
        if self._load_error is not None:
            raise self._load_error
        return self._session

    def run(self, input_ids: np.ndarray, attention_mask: np.ndarray) -> np.ndarray:
        session = self.session
        inputs = session.get_inputs()
        if len(inputs) < 2:
            raise InferenceError(f"Model graph declares {len(inputs)} inputs; expected 2")

        feeds = {inputs[0].name: input_ids, inputs[1].name: attention_mask}
        try:
            outputs = session.run(None, feeds)
        except Exception as exc:
            raise InferenceError(f"Model execution failed: {exc}") from exc

        if not outputs:
            raise InferenceError("Model produced no outputs")
        return np.asarray(outputs[0])


_BACKEND: OnnxRuntimeBackend | None = None
_BACKEND_LOCK = threading.Lock()


def get_backend(model_path: Path | None = None) -> OnnxRuntimeBackend:
    """Process-wide backend; the graph itself is parsed on the first ``run``."""
    global _BACKEND
    with _BACKEND_LOCK:
        if _BACKEND is None:
            _BACKEND = OnnxRuntimeBackend(model_path)
    return _BACKEND


def reset_backend() -> None:
    global _BACKEND
    with _BACKEND_LOCK:
        _BACKEND = None
