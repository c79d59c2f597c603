"""Python bridge to the native citadel wallet core."""

from .bridge import OwnedBuffer, ResponseBridge
from .categories import Category, DecoderRegistry, default_registry
from .classified import ClassificationResult, ClassifiedData, DataKind
from .classifier import UniversalClassifier, classify
from .config import BridgeConfig, ConfigurationError, load_bridge_config
from .errors import CitadelError, ForeignKind, ParseReport, ParseStatus, format_error_hint
from .ffi import Bech32Info, ForeignLayer, ForeignResult, LastError, Outcome, TransferResult
from .structured import decode_structured
from .wallet import WalletClient

__all__ = [
    "Bech32Info",
    "BridgeConfig",
    "Category",
    "CitadelError",
    "ClassificationResult",
    "ClassifiedData",
    "ConfigurationError",
    "DataKind",
    "DecoderRegistry",
    "ForeignKind",
    "ForeignLayer",
    "ForeignResult",
    "LastError",
    "Outcome",
    "OwnedBuffer",
    "ParseReport",
    "ParseStatus",
    "ResponseBridge",
    "TransferResult",
    "UniversalClassifier",
    "WalletClient",
    "classify",
    "decode_structured",
    "default_registry",
    "format_error_hint",
    "load_bridge_config",
]
