from chromres.oracles.base import DEFAULT_WINDOW_LENGTH, PredictionOracle, RawPrediction
from chromres.oracles.profile_oracle import ProfileOracle, ProfileOracleConfig
from chromres.oracles.torchscript_oracle import TorchScriptOracle

__all__ = [
    "DEFAULT_WINDOW_LENGTH",
    "PredictionOracle",
    "ProfileOracle",
    "ProfileOracleConfig",
    "RawPrediction",
    "TorchScriptOracle",
]
