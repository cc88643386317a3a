"""reclaimer - find and remove what eats your disk."""

__version__ = "0.1.0"
