import base64
import hashlib
import hmac
import secrets


class VisitorIdentityCodec:
    """Issues, signs and verifies the visitor id carried in the tracking cookie.

    A cookie value has the form ``<token>.<base64 HMAC-SHA256(secret, token)>``.
    Nothing is stored server-side; rotating the secret invalidates every
    outstanding cookie at once.
    """

    SEPARATOR = '.'
    TOKEN_BYTES = 16

    def __init__(self, secret):
        self._secret = secret.encode() if isinstance(secret, str) else secret

    def issue(self):
        """Return a new random, unsigned visitor token"""
        return secrets.token_hex(self.TOKEN_BYTES)

    def sign(self, token):
        return f"{token}{self.SEPARATOR}{self._signature(token)}"

    def verify(self, cookie_value):
        """Return the token if the cookie value carries a valid signature, else None"""
        if not cookie_value:
            return None

        parts = cookie_value.split(self.SEPARATOR)
        if len(parts) != 2:
            return None

        token, signature = parts
        if not token:
            return None

        expected = self._signature(token)
        if not hmac.compare_digest(signature.encode(), expected.encode()):
            return None

        return token

    def _signature(self, token):
        digest = hmac.new(self._secret, token.encode(), hashlib.sha256).digest()
        return base64.b64encode(digest).decode('ascii')
