"""Short code generation utilities."""

import secrets
import string
from typing import Optional


class ShortCodeGenerator:
    """Generate random short codes for URL records."""
    
    # URL-safe alphabet (a-zA-Z0-9_-), 64 symbols
    ALPHABET = string.ascii_letters + string.digits + "_-"
    
    def __init__(self, default_length: int = 6):
        """Initialize short code generator.
        
        Args:
            default_length: Default length for generated codes
        """
        if default_length < 1:
            raise ValueError("Short code length must be at least 1")
        self.default_length = default_length
    
    def generate(self, length: Optional[int] = None) -> str:
        """Generate a random short code.
        
        Codes are drawn from ``secrets`` so they are not predictable from
        previously issued ones. Uniqueness is not checked here.
        
        Args:
            length: Length of the code (uses default if not specified)
            
        Returns:
            Random short code
        """
        length = length or self.default_length
        return ''.join(secrets.choice(self.ALPHABET) for _ in range(length))
    
    def keyspace(self, length: Optional[int] = None) -> int:
        """Number of distinct codes of the given length."""
        return len(self.ALPHABET) ** (length or self.default_length)
    
    @classmethod
    def is_valid_format(cls, code: str, length: Optional[int] = None) -> bool:
        """Check if code only uses the generator alphabet.
        
        Args:
            code: Code to validate
            length: Expected length (not checked if not specified)
            
        Returns:
            True if valid format
        """
        if not code or not isinstance(code, str):
            return False
        if length is not None and len(code) != length:
            return False
        return all(c in cls.ALPHABET for c in code)
