import logging
from enum import Enum, IntEnum
from typing import Optional

logger = logging.getLogger(__name__)


class IdentifierType(str, Enum):
    """
    The kind of identifier a partner uses to name a user in the 'user' object
    of a session-start or session-stop request.

    The enum values are the texts used on the wire, e.g. "evco-id".
    """

    UNKNOWN = "unknown"
    EVCO_ID = "evco-id"
    RFID = "rfid"
    USERNAME = "username"
    TOKEN = "token"

    @classmethod
    def parse(cls, text: Optional[str]) -> "IdentifierType":
        """Case-insensitive lookup; anything unrecognised maps to UNKNOWN."""
        if not text:
            return cls.UNKNOWN
        try:
            return cls(text.strip().lower())
        except ValueError:
            return cls.UNKNOWN

    def as_text(self) -> str:
        return self.value


class ConnectorType(str, Enum):
    """The plug types known to OIOI. The enum value is the wire text."""

    UNKNOWN = "UNKNOWN"
    TYPE2 = "Type2"
    COMBO = "Combo"
    CHADEMO = "Chademo"
    SCHUKO = "Schuko"
    TYPE3 = "Type3"
    CEE_BLUE = "CeeBlue"
    THREE_PIN_SQUARE = "ThreePinSquare"
    TYPE1 = "Type1"
    CEE_RED = "CeeRed"
    CEE_2_POLES = "Cee2Poles"
    TESLA = "Tesla"
    SCAME = "Scame"
    NEMA5 = "Nema5"
    CEE_PLUS = "CeePlus"
    T13 = "T13"
    T15 = "T15"
    T23 = "T23"
    MARECHAL = "Marechal"
    TYPE_E = "TypeE"

    @classmethod
    def parse(cls, text: Optional[str]) -> "ConnectorType":
        if not text:
            return cls.UNKNOWN
        lowered = text.strip().lower()
        for member in cls:
            if member.value.lower() == lowered:
                return member
        return cls.UNKNOWN

    def as_text(self) -> str:
        return self.value


class ConnectorStatusType(str, Enum):
    UNKNOWN = "Unknown"
    AVAILABLE = "Available"
    OCCUPIED = "Occupied"
    OFFLINE = "Offline"
    RESERVED = "Reserved"

    @classmethod
    def parse(cls, text: Optional[str]) -> "ConnectorStatusType":
        if not text:
            return cls.UNKNOWN
        lowered = text.strip().lower()
        for member in cls:
            if member.value.lower() == lowered:
                return member
        return cls.UNKNOWN

    def as_text(self) -> str:
        return self.value


class ResponseCode(IntEnum):
    """
    The numeric OIOI result codes. These are protocol codes, not HTTP status
    codes; see RESPONSE_CODE_HTTP_STATUS in result.py for the transport mapping.
    """

    # 0xx - Success
    SUCCESS = 0
    # The customer is charging at the EVSE
    SUCCESSFULLY_STARTED_A_CHARGING_SESSION = 11
    # The customer must now plug in the cable to start
    SUCCESSFULLY_AUTHORIZED_A_CHARGING_SESSION = 12

    # 1xx - Hub errors
    SYSTEM_ERROR = 100
    DATABASE_ERROR = 101
    SYSTEM_TIMEOUT = 102
    AUTHENTICATION_FAILED_NO_POSITIVE_AUTHENTICATION_RESPONSE = 140
    AUTHENTICATION_FAILED_INVALID_EMAIL_OR_PASSWORD = 141
    AUTHENTICATION_FAILED_INVALID_EMAIL = 142
    AUTHENTICATION_FAILED_EMAIL_ALREADY_EXISTS = 143
    AUTHENTICATION_FAILED_EMAIL_DOES_NOT_EXIST = 144
    AUTHENTICATION_FAILED_USER_TOKEN_NOT_VALID = 145
    ENTITY_NOT_FOUND = 180
    EVSE_NOT_FOUND = 181
    SESSION_NOT_FOUND = 182
    COMPANY_NOT_FOUND = 183
    VEHICLE_NOT_FOUND = 184
    SUBSCRIPTION_PLAN_NOT_FOUND = 185
    GROUP_NOT_FOUND = 186
    EVSE_ID_DOES_NOT_SUPPORT_DIRECT_PAY = 187
    EVSE_ID_DOES_NOT_SUPPORT_REMOTE_STOP = 188
    EVCO_ID_ERROR = 190
    EVCO_ID_NOT_FOUND = 191
    EVCO_ID_LOCKED = 192
    EVCO_ID_HAS_NO_VALID_PAYMENT_METHOD = 193

    # 2xx - Client errors
    CLIENT_REQUEST_ERROR = 200
    INVALID_API_KEY = 210
    INVALID_PARTNER_IDENTIFIER = 211
    API_KEY_NOT_ALLOWED_TO_ACCESS_THE_REQUESTED_RESOURCE = 220
    INVALID_REQUEST_FORMAT = 230

    # 3xx - Operator and EVSE errors
    CPO_SYSTEM_ERROR = 300
    CPO_SYSTEM_TIMEOUT = 302
    EVSE_ERROR = 310
    EVSE_TIMEOUT = 312
    EVSE_ALREADY_IN_USE = 320
    EVSE_NO_EV_CONNECTED = 321
    EVSE_UNAVAILABLE = 323

    # 4xx - Hub errors
    HUB_SYSTEM_ERROR = 400
    HUB_SYSTEM_TIMEOUT = 402

    # 8xx - Payment provider errors
    PAYMENT_SYSTEM_ERROR = 800
    PAYMENT_SYSTEM_TIMEOUT = 802
    PAYMENT_USER_NOT_ALLOWED_TO_USE_THIS_METHOD = 805
    PAYMENT_INVALID_FORMAT = 830
    PAYMENT_INVALID_PAYMENT_METHOD = 850
    PAYMENT_BANK_TRANSFER_ERROR = 860
    PAYMENT_BANK_ACCOUNT_NOT_VALID = 861
    PAYMENT_INVALID_NAME = 862
    PAYMENT_INVALID_IBAN = 863
    PAYMENT_INVALID_BIC = 864
    PAYMENT_CREDIT_CARD_ERROR = 870
    PAYMENT_CREDIT_CARD_NOT_VALID = 871
    PAYMENT_INVALID_CARD_HOLDER_NAME = 872
    PAYMENT_INVALID_CREDIT_CARD_NUMBER = 874
    PAYMENT_INVALID_EXPIRATION_DATE = 875
    PAYMENT_INVALID_CVC = 876
    PAYMENT_PAYPAL_ERROR = 880

    # Client side only, never sent by a partner
    INVALID_HTTP_RESPONSE = 1240
    INVALID_RESPONSE_FORMAT = 1241


class ChargeOutcome(str, Enum):
    """
    What a charging handler reports back after it was asked to remotely start
    or stop a charging session. UNSPECIFIED means "this handler has no opinion",
    e.g. because the connector belongs to another operator backend.
    """

    UNSPECIFIED = "Unspecified"
    SUCCESS = "Success"
    STARTED = "Started"
    AUTHORIZED = "Authorized"
    UNKNOWN_OPERATOR = "UnknownOperator"
    UNKNOWN_EVSE = "UnknownEVSE"
    ALREADY_IN_USE = "AlreadyInUse"
    NO_EV_CONNECTED = "NoEVConnected"
    TIMEOUT = "Timeout"
    EVSE_ERROR = "EVSEError"
