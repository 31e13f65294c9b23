from pathlib import Path
from typing import Dict

import numpy as np
import pytest

from chromres.errors import InferenceError, OracleLoadError
from chromres.oracles.torchscript_oracle import TorchScriptOracle
from chromres.processing.resolver import PeakResolver, ResolverConfig

torch = pytest.importorskip("torch")


class _ConstantPeakNet(torch.nn.Module):
    """Proposes the same two candidates for every window."""

    def forward(self, x: torch.Tensor) -> Dict[str, torch.Tensor]:
        n = x.size(0)
        probs = torch.tensor([[0.9, 0.1]]).repeat(n, 1)
        left = torch.tensor([[10.2, 0.0]]).repeat(n, 1)
        right = torch.tensor([[19.8, 3.0]]).repeat(n, 1)
        return {"probs": probs, "left": left, "right": right}


class _TupleNet(torch.nn.Module):
    def forward(self, x: torch.Tensor):
        n = x.size(0)
        return (torch.full([n, 1], 0.8), torch.full([n, 1], 2.0), torch.full([n, 1], 6.0))


class _FailingNet(torch.nn.Module):
    def forward(self, x: torch.Tensor) -> torch.Tensor:
        # Fails for any input that is not (batch, 7)
        return x.view(-1, 7)


def _save(module: torch.nn.Module, path: Path) -> Path:
    torch.jit.save(torch.jit.script(module), str(path))
    return path


@pytest.fixture
def model_path(tmp_path: Path) -> Path:
    return _save(_ConstantPeakNet(), tmp_path / "peak_picking.pt")


class TestTorchScriptOracle:
    def test_batch_predict(self, model_path: Path) -> None:
        oracle = TorchScriptOracle(model_path)

        predictions = oracle.batch_predict([np.zeros(128), np.ones(128)])

        assert len(predictions) == 2
        for prediction in predictions:
            assert prediction.n_candidates == 2
            np.testing.assert_allclose(prediction.probability, [0.9, 0.1], rtol=1e-6)
            np.testing.assert_allclose(prediction.left, [10.2, 0.0], rtol=1e-6)
            np.testing.assert_allclose(prediction.right, [19.8, 3.0], rtol=1e-6)

    def test_tuple_outputs(self, tmp_path: Path) -> None:
        oracle = TorchScriptOracle(_save(_TupleNet(), tmp_path / "tuple.pt"))

        prediction = oracle.predict(np.zeros(128))

        assert prediction.n_candidates == 1
        assert prediction.right[0] == pytest.approx(6.0)

    def test_custom_output_keys(self, model_path: Path) -> None:
        oracle = TorchScriptOracle(model_path, output_keys=("probability", "left", "right"))

        with pytest.raises(InferenceError):
            oracle.predict(np.zeros(128))

    def test_wrong_window_length(self, model_path: Path) -> None:
        oracle = TorchScriptOracle(model_path, window_length=128)

        with pytest.raises(InferenceError):
            oracle.batch_predict([np.zeros(64)])

    def test_runtime_failure(self, tmp_path: Path) -> None:
        """Test that errors inside the model surface as InferenceError."""
        oracle = TorchScriptOracle(_save(_FailingNet(), tmp_path / "failing.pt"))

        with pytest.raises(InferenceError) as exc_info:
            oracle.batch_predict([np.zeros(128)])

        assert isinstance(exc_info.value.__cause__, RuntimeError)

    def test_empty_batch(self, model_path: Path) -> None:
        assert TorchScriptOracle(model_path).batch_predict([]) == []

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(OracleLoadError):
            TorchScriptOracle(tmp_path / "missing.pt")

    def test_corrupt_file(self, tmp_path: Path) -> None:
        path = tmp_path / "corrupt.pt"
        path.write_bytes(b"not a torchscript archive")

        with pytest.raises(OracleLoadError):
            TorchScriptOracle(path)

    def test_close_is_idempotent(self, model_path: Path) -> None:
        oracle = TorchScriptOracle(model_path)

        oracle.close()
        oracle.close()

        assert oracle.is_closed is True
        with pytest.raises(InferenceError):
            oracle.predict(np.zeros(128))


class TestFromTorchScript:
    def test_resolve(self, model_path: Path) -> None:
        time = np.arange(300, dtype=float) * 0.1

        with PeakResolver.from_torchscript(model_path) as resolver:
            peaks = resolver.resolve(np.zeros(300), time)

        # Every window proposes indices 10-20; all three windows are kept
        np.testing.assert_allclose(
            [(p.start, p.end) for p in peaks], [(1.0, 2.0), (13.8, 14.8), (26.6, 27.6)]
        )

    def test_closes_model(self, model_path: Path) -> None:
        resolver = PeakResolver.from_torchscript(model_path)
        oracle = resolver._oracle

        resolver.close()

        assert oracle.is_closed is True

    def test_window_length_from_config(self, model_path: Path) -> None:
        resolver = PeakResolver.from_torchscript(model_path, ResolverConfig(window_length=32))

        peaks = resolver.resolve(np.zeros(32), np.arange(32, dtype=float))

        assert resolver.window_length == 32
        assert [(p.start, p.end) for p in peaks] == [(10.0, 20.0)]
