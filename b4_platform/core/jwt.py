"""JWT verification for Supabase access tokens.

HS256 tokens are checked against the project's shared secret; RS256 and
ES256 tokens against the public key published in the project's JWKS.
"""

import base64

import jwt
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec, rsa

from b4_platform.core.config import settings
from b4_platform.core.jwks import JWKKey, jwks_service
from b4_platform.schemas.auth import JWTClaims
from b4_platform.utils.logging import get_logger

LOGGER = get_logger(__name__)

_REQUIRED_CLAIMS = ["sub", "email", "exp", "iat", "iss"]

_EC_CURVES = {
    "P-256": ec.SECP256R1,
    "P-384": ec.SECP384R1,
    "P-521": ec.SECP521R1,
}


def _b64url_int(value: str) -> int:
    padding = "=" * (-len(value) % 4)
    return int.from_bytes(base64.urlsafe_b64decode(value + padding), byteorder="big")


class JWTVerifier:
    """Verifier for Supabase access tokens."""

    def __init__(self, supabase_url: str, jwt_secret: str = ""):
        self.supabase_url = supabase_url.rstrip("/")
        self.expected_issuer = f"{self.supabase_url}/auth/v1"
        self.jwt_secret = jwt_secret

    async def verify_token(self, token: str) -> JWTClaims:
        """Verify and decode a Supabase JWT.

        Raises:
            jwt.InvalidTokenError: If the token is invalid, expired or
                signed by an unknown key
        """
        try:
            header = jwt.get_unverified_header(token)
            alg = header.get("alg")

            if alg == "HS256":
                if not self.jwt_secret:
                    raise jwt.InvalidTokenError(
                        "HS256 token received but SUPABASE_JWT_SECRET is not configured"
                    )
                return self._decode(token, self.jwt_secret, "HS256")

            if alg in ("RS256", "ES256"):
                kid = header.get("kid")
                if not kid:
                    raise jwt.InvalidTokenError("JWT header missing 'kid' (key ID)")
                jwk_key = await jwks_service.get_key(kid)
                if not jwk_key:
                    raise jwt.InvalidTokenError(f"No matching key found for kid: {kid}")
                return self._decode(token, self._jwk_to_pem(jwk_key), alg)

            raise jwt.InvalidTokenError(f"Unsupported algorithm: {alg}")

        except jwt.ExpiredSignatureError as e:
            LOGGER.warning(f"Token expired: {e}")
            raise jwt.InvalidTokenError("Token has expired") from e
        except jwt.InvalidTokenError as e:
            LOGGER.warning(f"Invalid token: {e}")
            raise
        except Exception as e:
            LOGGER.error(f"Unexpected error during token verification: {e}")
            raise jwt.InvalidTokenError("Token verification failed") from e

    def _decode(self, token: str, key: str, algorithm: str) -> JWTClaims:
        payload = jwt.decode(
            token,
            key,
            algorithms=[algorithm],
            audience="authenticated",
            options={"require": _REQUIRED_CLAIMS},
        )
        if payload.get("iss") != self.expected_issuer:
            raise jwt.InvalidIssuerError(f"Invalid issuer: {payload.get('iss')}")
        return JWTClaims(**payload)

    def _jwk_to_pem(self, jwk_key: JWKKey) -> str:
        """Convert an RSA or EC JWK to a PEM public key."""
        if jwk_key.kty == "RSA":
            public_key = rsa.RSAPublicNumbers(
                _b64url_int(jwk_key.e), _b64url_int(jwk_key.n)
            ).public_key()
        elif jwk_key.kty == "EC":
            curve = _EC_CURVES.get(jwk_key.crv)
            if curve is None:
                raise ValueError(f"Unsupported curve: {jwk_key.crv}")
            public_key = ec.EllipticCurvePublicNumbers(
                x=_b64url_int(jwk_key.x), y=_b64url_int(jwk_key.y), curve=curve()
            ).public_key()
        else:
            raise ValueError(f"Unsupported key type: {jwk_key.kty}")

        pem = public_key.public_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PublicFormat.SubjectPublicKeyInfo,
        )
        return pem.decode("utf-8")


jwt_verifier = JWTVerifier(
    supabase_url=settings.supabase_url,
    jwt_secret=settings.supabase_jwt_secret,
)
