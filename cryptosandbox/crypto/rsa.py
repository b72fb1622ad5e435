"""
Textbook RSA

Key generation from two ~63-bit probable primes and block encryption of
short text chunks. The modulus is around 125 bits, far too small for real
confidentiality.
"""

import logging
import random
import secrets
from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from ..common.exceptions import KeyFormatError, KeyGenerationError, MessageEncodingError
from .base import EncryptionProtocol
from .modmath import gcd, mod_inverse, modexp
from .primes import DEFAULT_MAX_ATTEMPTS, DEFAULT_ROUNDS, generate_prime, generate_small_primes

logger = logging.getLogger(__name__)

PRIME_LOWER_BOUND = 2 ** 62 + 1
PRIME_UPPER_BOUND = 2 ** 63 - 1
SMALL_PRIME_LIMIT = 100
DEFAULT_PUBLIC_EXPONENT = 65537

_SMALL_PRIMES = generate_small_primes(SMALL_PRIME_LIMIT)


class PublicKey(BaseModel):
    """RSA public key (n, e)."""
    model_config = ConfigDict(frozen=True)

    modulus: int = Field(..., gt=0)
    public_exponent: int = Field(..., gt=0)


class PrivateKey(BaseModel):
    """RSA private key (n, d)."""
    model_config = ConfigDict(frozen=True)

    modulus: int = Field(..., gt=0)
    private_exponent: int = Field(..., gt=0, repr=False)


def encode_chunk(text: str) -> int:
    """
    Pack text into an integer, little-endian, one byte per character.
    
    Raises:
        MessageEncodingError: If a character does not fit into one byte
    """
    try:
        data = text.encode('latin-1')
    except UnicodeEncodeError as e:
        raise MessageEncodingError(f"Character {text[e.start]!r} does not fit into one byte")
    
    return int.from_bytes(data, byteorder='little')


def decode_chunk(value: int) -> str:
    """
    Unpack an integer produced by encode_chunk.
    
    Unpacking stops when the value reaches zero, so NUL characters at the
    end of the original chunk do not come back.
    """
    chars = []
    while value > 0:
        value, byte = divmod(value, 256)
        chars.append(chr(byte))
    return "".join(chars)


class RSA(EncryptionProtocol[PublicKey, PrivateKey]):
    """RSA over hand-rolled modular arithmetic."""

    def __init__(
        self,
        rounds: int = DEFAULT_ROUNDS,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        rng: Optional[random.Random] = None
    ):
        """
        Args:
            rounds: Rabin-Miller rounds per prime candidate
            max_attempts: Retry cap for the prime and exponent searches
            rng: Random source (defaults to the system CSPRNG)
        """
        self.rounds = rounds
        self.max_attempts = max_attempts
        self.rng = rng or secrets.SystemRandom()

    def encrypt(self, text: str, public_key: PublicKey) -> str:
        """m -> m^e mod n, with m the packed chunk."""
        m = encode_chunk(text)
        if m >= public_key.modulus:
            raise MessageEncodingError(
                f"Chunk of {len(text)} characters does not fit under a "
                f"{public_key.modulus.bit_length()}-bit modulus"
            )
        return str(modexp(m, public_key.public_exponent, public_key.modulus))

    def decrypt(self, ciphertext: str, private_key: PrivateKey) -> str:
        """c -> c^d mod n, unpacked back to text."""
        if not ciphertext.isdecimal():
            raise MessageEncodingError(f"Ciphertext token is not a decimal number: {ciphertext!r}")
        
        c = int(ciphertext)
        return decode_chunk(modexp(c, private_key.private_exponent, private_key.modulus))

    def create_key_pair(self) -> Tuple[PublicKey, PrivateKey]:
        """
        Generate an RSA key pair.
        
        Two primes are drawn from [2^62 + 1, 2^63 - 1], the public exponent
        starts at 65537 and is resampled until it is coprime to phi(n), and
        the private exponent is its inverse modulo phi(n).
        
        Returns:
            Tuple of (public_key, private_key)
        
        Raises:
            KeyGenerationError: If a search exceeds max_attempts
        """
        p = self._generate_prime()
        q = self._generate_prime()
        
        n = p * q
        phi = (p - 1) * (q - 1)
        e = self._choose_public_exponent(phi)
        d = mod_inverse(e, phi)
        
        logger.debug("Generated %d-bit RSA modulus (e=%d)", n.bit_length(), e)
        
        return PublicKey(modulus=n, public_exponent=e), PrivateKey(modulus=n, private_exponent=d)

    def public_key_from_string(self, text: str) -> PublicKey:
        """Parse "<modulus> <exponent>"."""
        modulus, sep, exponent = text.partition(' ')
        if not sep or not modulus.isdecimal() or not exponent.isdecimal():
            raise KeyFormatError(f"Expected '<modulus> <exponent>', got {text!r}")
        
        try:
            return PublicKey(modulus=int(modulus), public_exponent=int(exponent))
        except ValueError as e:
            raise KeyFormatError(f"Invalid public key {text!r}: {e}")

    def public_key_to_string(self, public_key: PublicKey) -> str:
        return f"{public_key.modulus} {public_key.public_exponent}"

    # Private methods
    # --------------

    def _generate_prime(self) -> int:
        return generate_prime(
            PRIME_LOWER_BOUND,
            PRIME_UPPER_BOUND,
            _SMALL_PRIMES,
            rounds=self.rounds,
            rng=self.rng,
            max_attempts=self.max_attempts,
        )

    def _choose_public_exponent(self, phi: int) -> int:
        e = DEFAULT_PUBLIC_EXPONENT
        for _ in range(self.max_attempts):
            if gcd(e, phi) == 1:
                return e
            e = self.rng.randrange(DEFAULT_PUBLIC_EXPONENT, phi)
        
        raise KeyGenerationError(f"No public exponent coprime to phi found after {self.max_attempts} draws")
