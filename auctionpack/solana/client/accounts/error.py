"""
Solana account related errors
"""


class KeyStoreError(Exception):
    """
    Key store base exception
    """


class KeyNotFoundError(KeyStoreError):
    """
    Key does not exist in the key store
    """


class InvalidKeyError(KeyStoreError):
    """
    Key file exists but its contents cannot be decoded
    """
