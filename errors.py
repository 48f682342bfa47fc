"""
Error types raised by the store layers.

Each error carries the HTTP status it maps to; main.py renders all of them as
``{"success": false, "error": message}``.
"""


class StoreError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(StoreError):
    status_code = 400


class UnsupportedMediaError(StoreError):
    status_code = 400


class Unauthorized(StoreError):
    status_code = 401


class Forbidden(StoreError):
    status_code = 403


class NotFound(StoreError):
    status_code = 404


class PayloadTooLarge(StoreError):
    status_code = 413


class StorageError(StoreError):
    status_code = 500
