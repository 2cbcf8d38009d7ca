"""Internal constants shared across the library."""

from datetime import timedelta

# ------------------------------------------------------------------
# Device wire format
# ------------------------------------------------------------------

PACKET_MAGIC = b"\xca\xfe"
PACKET_LENGTH = 12
WEIGHT_SCALE = 10.0  # weights travel as grams x10 in a u16

# ------------------------------------------------------------------
# BLE GATT layout of the Hive load-cell firmware
# ------------------------------------------------------------------

SERVICE_UUID = "7d2a0a5d-7c7a-4e8b-8cb4-2f2cf6b5b201"
NOTIFY_CHAR_UUID = "7d2a0a5d-7c7a-4e8b-8cb4-2f2cf6b5b202"
CONTROL_CHAR_UUID = "7d2a0a5d-7c7a-4e8b-8cb4-2f2cf6b5b203"
CONFIG_CHAR_UUID = "7d2a0a5d-7c7a-4e8b-8cb4-2f2cf6b5b204"
DEVICE_NAME_PREFIX = "Hive"

COMMAND_TARE = "TARE"
COMMAND_ZERO = "ZERO"
VALID_COMMANDS: tuple[str, ...] = (COMMAND_TARE, COMMAND_ZERO)

# ------------------------------------------------------------------
# Engine invariants
# ------------------------------------------------------------------

EMA_ALPHA = 0.20
HISTORY_MAX_POINTS = 3000
HISTORY_MAX_AGE = timedelta(minutes=30)
EVENT_LOG_LIMIT = 30

MIN_SLOT_ID = 1
MAX_SLOT_ID = 255

# Upper bounds applied when slot targets are edited.
MAX_TARGET_DOSE_MG = 999_999.0
MAX_TARGET_PILL_COUNT = 9_999

DEFAULT_DEVICE_LABEL = "pillLoadCell"
UNKNOWN_MEDICATION = "Unknown med"
DEFAULT_SLOT_NAME_TEMPLATE = "Slot {slot_id}"

# ------------------------------------------------------------------
# Persistence key layout
# ------------------------------------------------------------------

KEY_SLOT_ADDRESS_PREFIX = "slot_mac_"
KEY_ADDRESS_LABEL_PREFIX = "mac_label_"
KEY_SLOT_CONFIG_PREFIX = "slot_cfg_"
