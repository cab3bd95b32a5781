from .models import ZERO_ADDRESS, Identity, SignedTransaction, TransactionIntent
from .signer import SigningError, generate_identity, identity_from_key, recover_sender, sign_intent

__all__ = [
    "Identity",
    "SignedTransaction",
    "SigningError",
    "TransactionIntent",
    "ZERO_ADDRESS",
    "generate_identity",
    "identity_from_key",
    "recover_sender",
    "sign_intent",
]
