"""Model fields for guest identity data stored encrypted at rest."""

import logging

from cryptography.fernet import InvalidToken
from django.db import models

from .encryption import decrypt_string, encrypt_string

logger = logging.getLogger(__name__)


class EncryptedCharField(models.TextField):
    """
    Text column holding a Fernet token; Python code only sees plaintext.

    Each write produces a different token, so the column cannot be
    filtered or indexed.
    """

    description = "Fernet-encrypted text"

    def __init__(self, *args, **kwargs):
        self.plaintext_max_length = kwargs.pop('max_length', None)
        kwargs.setdefault('blank', True)
        kwargs.setdefault('default', '')
        super().__init__(*args, **kwargs)

    def deconstruct(self):
        name, path, args, kwargs = super().deconstruct()
        if self.plaintext_max_length is not None:
            kwargs['max_length'] = self.plaintext_max_length
        return name, path, args, kwargs

    def from_db_value(self, value, expression, connection):
        if not value:
            return ''
        try:
            return decrypt_string(value)
        except InvalidToken:
            logger.error(f"Cannot decrypt {self.model.__name__}.{self.name}; was ENCRYPTION_KEY rotated?")
            return ''

    def get_prep_value(self, value):
        value = super().get_prep_value(value)
        return encrypt_string(str(value)) if value else ''

    def to_python(self, value):
        return '' if value is None else str(value)
