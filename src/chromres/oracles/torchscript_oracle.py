import logging
from pathlib import Path
from typing import Sequence

import numpy as np

from chromres.errors import InferenceError, OracleLoadError
from chromres.oracles.base import (
    DEFAULT_OUTPUT_KEYS,
    DEFAULT_WINDOW_LENGTH,
    PredictionOracle,
    RawPrediction,
)

logger = logging.getLogger(__name__)


class TorchScriptOracle(PredictionOracle):
    """Oracle backed by a traced or scripted PyTorch peak-picking network.

    The model takes a ``(batch, window_length)`` float32 tensor and returns either a
    dict of ``(batch, K)`` tensors keyed by ``output_keys`` or a tuple of three such
    tensors in (probability, left, right) order.
    """

    def __init__(
        self,
        model_path: Path | str,
        window_length: int = DEFAULT_WINDOW_LENGTH,
        device: str = "cpu",
        output_keys: tuple[str, str, str] = DEFAULT_OUTPUT_KEYS,
    ):
        super().__init__(window_length)
        self.model_path = Path(model_path)
        self.device = device
        self.output_keys = output_keys
        self._model = None

        if not self.model_path.is_file():
            raise OracleLoadError(f"Model file not found: {self.model_path}")

        import torch

        try:
            model = torch.jit.load(str(self.model_path), map_location=device)
        except (RuntimeError, ValueError) as e:
            raise OracleLoadError(f"Could not load model from {self.model_path}") from e
        model.eval()
        self._model = model
        logger.info("Loaded peak-picking model from %s on %s", self.model_path, device)

    @property
    def is_closed(self) -> bool:
        return self._model is None

    def batch_predict(self, windows: Sequence[np.ndarray]) -> list[RawPrediction]:
        import torch

        if self._model is None:
            raise InferenceError("Model has been closed")
        if len(windows) == 0:
            return []

        batch = np.stack([np.asarray(w, dtype=np.float32) for w in windows])
        if batch.shape[1] != self.window_length:
            raise InferenceError(
                f"Expected windows of length {self.window_length}, got {batch.shape[1]}"
            )

        try:
            with torch.no_grad():
                outputs = self._model(torch.from_numpy(batch).to(self.device))
        except RuntimeError as e:
            raise InferenceError(f"Inference failed for a batch of {len(windows)} windows") from e

        probability, left, right = self._unpack_outputs(outputs)
        if not probability.shape[0] == left.shape[0] == right.shape[0] == len(windows):
            raise InferenceError(
                f"Model returned {probability.shape[0]} predictions for {len(windows)} windows"
            )

        return [
            RawPrediction.from_arrays(probability[i], left[i], right[i])
            for i in range(len(windows))
        ]

    def _unpack_outputs(self, outputs) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
        if isinstance(outputs, dict):
            missing = [key for key in self.output_keys if key not in outputs]
            if missing:
                raise InferenceError(f"Model output is missing {missing}")
            tensors = [outputs[key] for key in self.output_keys]
        elif isinstance(outputs, (tuple, list)) and len(outputs) == 3:
            tensors = list(outputs)
        else:
            raise InferenceError(f"Unsupported model output type: {type(outputs).__name__}")

        arrays = []
        for tensor in tensors:
            array = tensor.detach().cpu().numpy().astype(float)
            if array.ndim == 1:
                array = array[:, np.newaxis]
            if array.ndim != 2:
                raise InferenceError(f"Model output must be (batch, K), got shape {array.shape}")
            arrays.append(array)
        return arrays[0], arrays[1], arrays[2]

    def close(self) -> None:
        if self._model is None:
            return
        self._model = None
        if self.device.startswith("cuda"):
            import torch

            torch.cuda.empty_cache()
        logger.info("Released peak-picking model %s", self.model_path)
