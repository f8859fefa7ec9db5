# Vault - Credential Generator
#
# Random credentials drawn from up to four character classes.
# Every enabled class contributes at least one character, the rest is filled
# from the union pool, then the whole list is Fisher-Yates shuffled.
# All randomness comes from the `secrets` module.

import secrets
import string
from typing import List

from .exceptions import ConfigurationError

UPPERCASE = string.ascii_uppercase
LOWERCASE = string.ascii_lowercase
DIGITS = string.digits
SYMBOLS = "!@#$%^&*()_+-=[]{}|;:,.<>?"

# Glyphs dropped per class when exclude_ambiguous is set
AMBIGUOUS = {
    "upper": "IL",
    "lower": "lo",
    "digits": "10",
    "symbols": "",
}

DEFAULT_LENGTH = 16


class CredentialGenerator:
    """
    Generates random credentials with per-class guarantees.

    Usage::

        generator = CredentialGenerator()
        credential = generator.generate(20, use_symbols=False)

    If ``length`` is smaller than the number of enabled classes the result
    is one character per class, i.e. longer than requested.
    """

    @staticmethod
    def build_pools(
        use_upper: bool,
        use_lower: bool,
        use_digits: bool,
        use_symbols: bool,
        exclude_ambiguous: bool,
    ) -> List[str]:
        """Return the character pool for each enabled class, in class order."""
        classes = [
            ("upper", use_upper, UPPERCASE),
            ("lower", use_lower, LOWERCASE),
            ("digits", use_digits, DIGITS),
            ("symbols", use_symbols, SYMBOLS),
        ]

        pools = []
        for name, enabled, chars in classes:
            if not enabled:
                continue
            if exclude_ambiguous:
                chars = "".join(c for c in chars if c not in AMBIGUOUS[name])
            pools.append(chars)
        return pools

    @staticmethod
    def shuffle(chars: List[str]) -> None:
        """Unbiased in-place Fisher-Yates shuffle."""
        for i in range(len(chars) - 1, 0, -1):
            j = secrets.randbelow(i + 1)
            chars[i], chars[j] = chars[j], chars[i]

    def generate(
        self,
        length: int = DEFAULT_LENGTH,
        use_upper: bool = True,
        use_lower: bool = True,
        use_digits: bool = True,
        use_symbols: bool = True,
        exclude_ambiguous: bool = True,
    ) -> str:
        """
        Generate a credential.

        Args:
            length: Requested length (no bounds enforced here)
            use_upper: Include uppercase letters
            use_lower: Include lowercase letters
            use_digits: Include digits
            use_symbols: Include symbols from SYMBOLS
            exclude_ambiguous: Drop I, L, l, o, 1, 0 from their classes

        Returns:
            Credential of length max(length, number of enabled classes)

        Raises:
            ConfigurationError: If no character class is enabled
        """
        pools = self.build_pools(
            use_upper, use_lower, use_digits, use_symbols, exclude_ambiguous
        )
        if not pools:
            raise ConfigurationError("At least one character type must be selected")

        chars = [secrets.choice(pool) for pool in pools]

        charset = "".join(pools)
        while len(chars) < length:
            chars.append(secrets.choice(charset))

        self.shuffle(chars)
        return "".join(chars)
