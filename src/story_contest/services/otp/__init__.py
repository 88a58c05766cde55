from .service import OtpDispatch, OtpService, generate_code, normalize_phone
from .sms import (
    FakeSmsSender,
    SentMessage,
    SmsSender,
    TwilioSmsSender,
    create_sms_sender,
)

__all__ = [
    "FakeSmsSender",
    "OtpDispatch",
    "OtpService",
    "SentMessage",
    "SmsSender",
    "TwilioSmsSender",
    "create_sms_sender",
    "generate_code",
    "normalize_phone",
]
