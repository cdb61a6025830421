"""Signs unsigned transactions with wallet key material."""

from __future__ import annotations

import logging

from ledger_client.errors import SigningError
from ledger_client.models.transactions import SignedTransaction, UnsignedTransaction
from ledger_client.wallet.keys import KeyMaterial

log = logging.getLogger(__name__)


class TransactionSigner:
    """Encodes a transaction once and signs exactly those bytes."""

    def sign(self, unsigned: UnsignedTransaction, key: KeyMaterial) -> SignedTransaction:
        if key.address != unsigned.sender:
            raise SigningError(
                f"key {key.address.short()} cannot sign for sender {unsigned.sender.short()}"
            )
        message = unsigned.signing_message()
        signature = key.sign(message)
        log.debug(
            "Signed tx sender=%s seq=%d",
            unsigned.sender.short(), unsigned.sequence_number,
        )
        return SignedTransaction(
            unsigned=unsigned,
            public_key=key.public_key,
            signature=signature,
            message=message,
        )
