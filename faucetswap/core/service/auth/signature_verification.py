import re
from eth_account.messages import encode_defunct
from eth_account import Account
from eth_typing import ChecksumAddress
from hexbytes import HexBytes
from typing import Optional, Tuple
from web3 import Web3

from faucetswap.core.logger.logger import logger

EVM_ADDRESS_PATTERN = re.compile(r'^0x[a-fA-F0-9]{40}$')


def is_evm_address(address: str) -> bool:
    return bool(address) and bool(EVM_ADDRESS_PATTERN.match(address.strip()))


class SignatureVerificationService:
    """Service for verifying Ethereum wallet signatures"""

    @staticmethod
    def _to_checksum_address(address: str) -> ChecksumAddress:
        """Convert address to checksum format"""
        if not is_evm_address(address):
            raise ValueError("Invalid Ethereum address format")
        return Web3.to_checksum_address(address.strip().lower())

    @staticmethod
    def _to_signature_bytes(signature: str) -> HexBytes:
        if signature.startswith("0x"):
            return HexBytes(signature)
        return HexBytes("0x" + signature)

    def verify_signature(self, claimed_address: str, signature: str, message: str) -> Tuple[bool, Optional[str]]:
        """
        Verify an Ethereum personal_sign signature

        Args:
            claimed_address: The address that claims to have signed the message
            signature: The signature to verify (hex)
            message: The original message that was signed

        Returns:
            Tuple[bool, Optional[str]]: (is_valid, error_message)
        """
        try:
            checksum_address = self._to_checksum_address(claimed_address)
        except ValueError as e:
            logger.warning("Invalid Ethereum address format", extra={"wallet_address": claimed_address, "error": str(e)})
            return False, "Invalid Ethereum address format"

        try:
            signature_bytes = self._to_signature_bytes(signature)
            recovered_address = Account.recover_message(encode_defunct(text=message), signature=signature_bytes)
        except Exception as e:
            logger.warning("Invalid signature format", extra={"wallet_address": claimed_address, "error": str(e)})
            return False, "Invalid signature format"

        if recovered_address.lower() != checksum_address.lower():
            logger.warning(
                "Recovered address does not match claimed address",
                extra={"wallet_address": claimed_address, "recovered_address": recovered_address}
            )
            return False, "Recovered address does not match claimed address"

        logger.info("Signature verified successfully", extra={"wallet_address": claimed_address})
        return True, None
