"""
Cryptographic primitives for the crypto sandbox.

This package provides:
- Modular exponentiation and inverses
- Small-prime sieve and Rabin-Miller prime generation
- The EncryptionProtocol interface
- A textbook RSA implementation of that interface
"""

from .modmath import modexp, gcd, extended_gcd, mod_inverse
from .primes import generate_small_primes, is_probably_prime, generate_prime
from .base import EncryptionProtocol
from .rsa import RSA, PublicKey, PrivateKey

__all__ = [
    'modexp',
    'gcd',
    'extended_gcd',
    'mod_inverse',
    'generate_small_primes',
    'is_probably_prime',
    'generate_prime',
    'EncryptionProtocol',
    'RSA',
    'PublicKey',
    'PrivateKey',
]
