"""
Prime Generation

A small-prime sieve for cheap rejection of composite candidates and the
Rabin-Miller probabilistic test for everything that survives it.
"""

import logging
import random
import secrets
from typing import List, Optional

from ..common.exceptions import KeyGenerationError
from .modmath import modexp

logger = logging.getLogger(__name__)

DEFAULT_ROUNDS = 20
DEFAULT_MAX_ATTEMPTS = 100_000

_system_random = secrets.SystemRandom()


def generate_small_primes(limit: int) -> List[int]:
    """
    Sieve of Eratosthenes.
    
    Args:
        limit: Exclusive upper bound
    
    Returns:
        Ascending list of all primes below limit
    """
    if limit < 3:
        return []
    
    is_candidate = [True] * limit
    is_candidate[0] = is_candidate[1] = False
    
    for i in range(2, int(limit ** 0.5) + 1):
        if is_candidate[i]:
            for k in range(i * i, limit, i):
                is_candidate[k] = False
    
    return [i for i, flag in enumerate(is_candidate) if flag]


def _decompose(n: int):
    """Write n as d * 2^s with d odd."""
    d, s = n, 0
    while d % 2 == 0:
        d //= 2
        s += 1
    return d, s


def _is_witness(a: int, d: int, s: int, candidate: int) -> bool:
    """True if a proves candidate composite."""
    x = modexp(a, d, candidate)
    if x == 1 or x == candidate - 1:
        return False
    
    for _ in range(s - 1):
        x = (x * x) % candidate
        if x == candidate - 1:
            return False
    
    return True


def is_probably_prime(
    candidate: int,
    rounds: int = DEFAULT_ROUNDS,
    rng: Optional[random.Random] = None
) -> bool:
    """
    Rabin-Miller probabilistic primality test.
    
    With candidate - 1 = d * 2^s, each round picks a random witness a and
    declares the candidate composite unless a^d == 1 or a^(d * 2^r) == -1
    (mod candidate) for some r in [0, s). One failing round is a proof of
    compositeness; passing every round means "probably prime".
    
    Args:
        candidate: Number to test
        rounds: Number of independent witnesses
        rng: Random source (defaults to the system CSPRNG)
    
    Returns:
        False if candidate is certainly composite, True otherwise
    """
    if candidate < 2:
        return False
    if candidate in (2, 3):
        return True
    if candidate % 2 == 0:
        return False
    
    rng = rng or _system_random
    d, s = _decompose(candidate - 1)
    
    for _ in range(rounds):
        # 1 and candidate - 1 never witness compositeness; candidate itself would reject primes
        a = rng.randint(2, candidate - 2)
        if _is_witness(a, d, s, candidate):
            return False
    
    return True


def generate_prime(
    lower_bound: int,
    upper_bound: int,
    small_primes: List[int],
    rounds: int = DEFAULT_ROUNDS,
    rng: Optional[random.Random] = None,
    max_attempts: int = DEFAULT_MAX_ATTEMPTS
) -> int:
    """
    Draw a random probable prime from [lower_bound, upper_bound].
    
    Candidates divisible by any of small_primes are discarded before the
    Rabin-Miller test is run.
    
    Args:
        lower_bound: Smallest acceptable value
        upper_bound: Largest acceptable value
        small_primes: Primes used for trial division
        rounds: Rabin-Miller rounds per candidate
        rng: Random source (defaults to the system CSPRNG)
        max_attempts: Number of candidates to draw before giving up
    
    Returns:
        A probable prime in range
    
    Raises:
        ValueError: If the range is empty
        KeyGenerationError: If no prime was found within max_attempts
    """
    if lower_bound > upper_bound:
        raise ValueError(f"Empty range [{lower_bound}, {upper_bound}]")
    
    rng = rng or _system_random
    
    for attempt in range(1, max_attempts + 1):
        candidate = rng.randint(lower_bound, upper_bound)
        
        if any(candidate % p == 0 and candidate != p for p in small_primes):
            continue
        
        if is_probably_prime(candidate, rounds, rng):
            logger.debug("Found %d-bit prime after %d candidates", candidate.bit_length(), attempt)
            return candidate
    
    raise KeyGenerationError(
        f"No prime found in [{lower_bound}, {upper_bound}] after {max_attempts} candidates"
    )
