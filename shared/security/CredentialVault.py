"""AES-256-CBC encryption for user provider API keys at rest.

Serialized format: "<hex iv>:<hex ciphertext>", with a fresh 16-byte IV per
call to encrypt() so that equal keys never produce equal ciphertexts.
"""

import os

from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from shared.errors.app_errors import CredentialError, InvalidFormatError
from shared.helper.HelperConfig import HelperConfig

KEY_LENGTH = 32
IV_LENGTH = 16
_BLOCK_SIZE_BITS = 128


class CredentialVault:
    """Encrypts and decrypts secrets with the process-wide ENCRYPTION_KEY.

    The key is loaded once on construction; a missing or malformed key raises
    ValueError so that the application refuses to start.
    """

    def __init__(self, helper_config: HelperConfig, key: bytes | None = None) -> None:
        self.logging = helper_config.get_logger()
        self._key = key if key is not None else helper_config.get_hex_bytes_val("ENCRYPTION_KEY", KEY_LENGTH)
        if len(self._key) != KEY_LENGTH:
            raise ValueError(f"Encryption key must be exactly {KEY_LENGTH} bytes (got {len(self._key)}).")
        self.logging.debug("Encryption key loaded (%d bits).", KEY_LENGTH * 8)

    def encrypt(self, plaintext: str) -> str:
        """Encrypt a UTF-8 string.

        Args:
            plaintext (str): The secret to encrypt.

        Returns:
            str: "<hex iv>:<hex ciphertext>".
        """
        iv = os.urandom(IV_LENGTH)
        padder = padding.PKCS7(_BLOCK_SIZE_BITS).padder()
        padded = padder.update(plaintext.encode("utf-8")) + padder.finalize()

        encryptor = Cipher(algorithms.AES(self._key), modes.CBC(iv)).encryptor()
        ciphertext = encryptor.update(padded) + encryptor.finalize()
        return f"{iv.hex()}:{ciphertext.hex()}"

    def decrypt(self, serialized: str) -> str:
        """Decrypt a value produced by encrypt().

        Args:
            serialized (str): "<hex iv>:<hex ciphertext>".

        Returns:
            str: The original plaintext.

        Raises:
            InvalidFormatError: If the value is not two colon-separated hex fields.
            CredentialError: If decryption fails (wrong key or corrupted data).
        """
        iv, ciphertext = self._split(serialized)

        decryptor = Cipher(algorithms.AES(self._key), modes.CBC(iv)).decryptor()
        unpadder = padding.PKCS7(_BLOCK_SIZE_BITS).unpadder()
        try:
            padded = decryptor.update(ciphertext) + decryptor.finalize()
            plaintext = unpadder.update(padded) + unpadder.finalize()
            return plaintext.decode("utf-8")
        except ValueError as e:
            # UnicodeDecodeError is a ValueError as well
            raise CredentialError("Failed to decrypt stored API key.") from e

    ##########################################
    ############### HELPERS ##################
    ##########################################

    def _split(self, serialized: str) -> tuple[bytes, bytes]:
        parts = serialized.split(":") if isinstance(serialized, str) else []
        if len(parts) != 2:
            raise InvalidFormatError("Invalid encrypted key format.")
        try:
            iv = bytes.fromhex(parts[0])
            ciphertext = bytes.fromhex(parts[1])
        except ValueError as e:
            raise InvalidFormatError("Invalid encrypted key format.") from e
        if len(iv) != IV_LENGTH or not ciphertext:
            raise InvalidFormatError("Invalid encrypted key format.")
        return iv, ciphertext
