from .decoder import decode_envelope
from .models import ChangeEnvelope, ChangePayload, Operation

__all__ = [
    "ChangeEnvelope",
    "ChangePayload",
    "Operation",
    "decode_envelope",
]
