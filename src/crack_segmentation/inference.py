"""Segmentation model adapters."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Callable, Optional, Protocol

import numpy as np

from .config import ModelConfig
from .errors import InferenceFailureError, MissingModelError

logger = logging.getLogger(__name__)


class SegmentationModel(Protocol):
    """Black-box network mapping a [1, 3, H, W] tensor to [1, 2, H, W] logits."""

    def predict(self, tensor: np.ndarray) -> np.ndarray:
        ...


class CallableSegmentationModel:
    """Adapt a plain function to the `SegmentationModel` protocol."""

    def __init__(self, func: Callable[[np.ndarray], np.ndarray]) -> None:
        self._func = func

    def predict(self, tensor: np.ndarray) -> np.ndarray:
        return np.asarray(self._func(tensor), dtype=np.float32)


class OnnxSegmentationModel:
    """Run the exported network with ONNX Runtime.

    The session is created on first use so a pipeline can be built (and its
    configuration checked) on machines that do not have the model yet.
    """

    def __init__(self, config: ModelConfig) -> None:
        self._config = config
        self._session: Any = None
        self._input_name: Optional[str] = None

    @property
    def model_path(self) -> Optional[Path]:
        return self._config.model_path

    def _load(self) -> Any:
        if self._session is not None:
            return self._session
        path = self._config.model_path
        if path is None or not Path(path).is_file():
            raise MissingModelError(path)
        try:
            import onnxruntime as ort  # Imported lazily so tests never need the runtime.
        except ImportError as exc:
            raise MissingModelError(path, reason="onnxruntime is not installed") from exc

        options = ort.SessionOptions()
        options.intra_op_num_threads = self._config.intra_op_threads or os.cpu_count() or 1
        options.execution_mode = ort.ExecutionMode.ORT_PARALLEL
        try:
            session = ort.InferenceSession(str(path), sess_options=options, providers=["CPUExecutionProvider"])
        except Exception as exc:
            raise MissingModelError(path, reason=f"failed to load: {exc}") from exc

        self._input_name = session.get_inputs()[0].name
        logger.info("ONNX model loaded from %s", path)
        logger.info("Input: %s, output: %s", self._input_name, session.get_outputs()[0].name)
        self._session = session
        return session

    def predict(self, tensor: np.ndarray) -> np.ndarray:
        session = self._load()
        outputs = session.run(None, {self._input_name: np.ascontiguousarray(tensor, dtype=np.float32)})
        return np.asarray(outputs[0], dtype=np.float32)


def as_logit_map(output: np.ndarray, padded_size: tuple[int, int]) -> np.ndarray:
    """Validate raw model output and drop the batch axis, returning [2, H, W]."""

    logits = np.asarray(output)
    if logits.ndim == 4 and logits.shape[0] == 1:
        logits = logits[0]
    expected = (2, *padded_size)
    if logits.shape != expected:
        raise InferenceFailureError("inference", f"expected logits of shape {expected}, got {np.shape(output)}")
    return logits.astype(np.float32, copy=False)
