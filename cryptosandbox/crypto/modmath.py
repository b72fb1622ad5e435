"""
Modular Arithmetic

Square-and-multiply exponentiation and the extended Euclidean algorithm.
Python integers are unbounded, so intermediate products never overflow and
are reduced modulo the modulus after every step.
"""

from typing import Tuple


def modexp(base: int, exponent: int, modulus: int) -> int:
    """
    Compute base^exponent mod modulus.
    
    The exponent is consumed bit by bit (square for each halving, multiply
    for each odd step), so the work is logarithmic in its magnitude.
    
    Args:
        base: Non-negative base
        exponent: Non-negative exponent
        modulus: Positive modulus
    
    Returns:
        base^exponent mod modulus; 1 whenever exponent is 0
    
    Raises:
        ValueError: If modulus is not positive or exponent is negative
    """
    if modulus <= 0:
        raise ValueError(f"Modulus must be positive, got {modulus}")
    if exponent < 0:
        raise ValueError(f"Exponent must be non-negative, got {exponent}")
    
    if exponent == 0:
        return 1
    
    result = 1
    base = base % modulus
    while exponent > 0:
        if exponent & 1:
            result = (result * base) % modulus
        exponent >>= 1
        base = (base * base) % modulus
    
    return result % modulus


def gcd(a: int, b: int) -> int:
    """Greatest common divisor (Euclid)."""
    while b:
        a, b = b, a % b
    return abs(a)


def extended_gcd(a: int, b: int) -> Tuple[int, int, int]:
    """
    Extended Euclidean Algorithm (iterative).
    
    Returns:
        Tuple (g, x, y) with a*x + b*y == g == gcd(a, b)
    """
    old_r, r = a, b
    old_s, s = 1, 0
    old_t, t = 0, 1
    
    while r != 0:
        quotient = old_r // r
        old_r, r = r, old_r - quotient * r
        old_s, s = s, old_s - quotient * s
        old_t, t = t, old_t - quotient * t
    
    return old_r, old_s, old_t


def mod_inverse(a: int, m: int) -> int:
    """
    Modular inverse of a modulo m.
    
    The Bezout coefficient may be negative; it is reduced into [0, m).
    
    Raises:
        ValueError: If m is not positive or a and m are not coprime
    """
    if m <= 0:
        raise ValueError(f"Modulus must be positive, got {m}")
    
    g, x, _ = extended_gcd(a % m, m)
    if g != 1:
        raise ValueError(f"{a} has no inverse modulo {m} (gcd = {g})")
    
    return x % m
