"""pillscale - telemetry decoding and slot state engine for Hive pill-slot load cells."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("pillscale")
except PackageNotFoundError:
    __version__ = "0+local"
from pillscale._codec import command_payload, decode_packet, encode_packet
from pillscale.catalog import MedicationCatalog
from pillscale.config import EngineConfig
from pillscale.engine import IngestResult, SlotEngine
from pillscale.exceptions import (
    BadMagicError,
    PacketDecodeError,
    PersistenceError,
    PillScaleConfigError,
    PillScaleError,
    TooShortError,
)
from pillscale.ingestion.notifications import NotificationQueue
from pillscale.models import (
    EventCategory,
    EventRecord,
    FirmwareEvent,
    HistoryPoint,
    Medication,
    SlotConfig,
    SlotFlag,
    SlotIdentity,
    SlotSnapshot,
    SlotState,
    TelemetryPacket,
)
from pillscale.persistence import KeyValueStore, MemoryStore

__all__ = [
    "__version__",
    "BadMagicError",
    "EngineConfig",
    "EventCategory",
    "EventRecord",
    "FirmwareEvent",
    "HistoryPoint",
    "IngestResult",
    "KeyValueStore",
    "Medication",
    "MedicationCatalog",
    "MemoryStore",
    "NotificationQueue",
    "PacketDecodeError",
    "PersistenceError",
    "PillScaleConfigError",
    "PillScaleError",
    "SlotConfig",
    "SlotEngine",
    "SlotFlag",
    "SlotIdentity",
    "SlotSnapshot",
    "SlotState",
    "TelemetryPacket",
    "TooShortError",
    "command_payload",
    "decode_packet",
    "encode_packet",
]
