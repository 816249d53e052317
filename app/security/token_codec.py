"""
JWT 토큰 코덱

subject(username) 클레임을 HMAC(기본 HS256)으로 서명된 시간 제한 토큰으로 인코딩하고,
토큰 문자열을 검증하여 다시 subject로 디코딩한다.

- 부수 효과 없음: now를 주입하면 결과가 결정적
- 폐기(블랙리스트) 없음: 발급된 토큰은 exp까지 유효
"""
from datetime import datetime, timedelta, timezone
from typing import Optional, Union

from jose import jws, jwt
from jose.exceptions import JOSEError
from jose.utils import base64url_decode, base64url_encode

ALGORITHM = "HS256"
SUPPORTED_ALGORITHMS = ("HS256", "HS384", "HS512")

Secret = Union[str, bytes]


class TokenError(Exception):
    """토큰 검증 실패의 공통 상위 클래스"""


class MalformedTokenError(TokenError):
    """헤더/클레임/서명 구성 요소로 분해할 수 없는 토큰"""


class InvalidSignatureError(TokenError):
    """서명이 서버 비밀키와 일치하지 않는 토큰"""


class ExpiredTokenError(TokenError):
    """현재 시각이 exp 이상인 토큰"""

    def __init__(self, message: str, expired_at: int):
        self.expired_at = expired_at
        super().__init__(message)


def _timestamp(now: Optional[datetime]) -> float:
    if now is None:
        now = datetime.now(timezone.utc)
    elif now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return now.timestamp()


def _check_algorithm(algorithm: str) -> None:
    if algorithm not in SUPPORTED_ALGORITHMS:
        raise ValueError(f"unsupported algorithm: {algorithm}")


def _is_canonical(segment: str) -> bool:
    """
    base64url 구간이 정규 인코딩인지 확인
    - 마지막 문자의 남는 비트가 0이 아니거나 알파벳 밖의 문자가 섞이면 False
    """
    try:
        raw = base64url_decode(segment.encode("ascii"))
    except (ValueError, TypeError, UnicodeEncodeError):
        return False
    return base64url_encode(raw).decode("ascii") == segment


def issue(
    subject: str,
    secret: Secret,
    ttl: timedelta,
    now: Optional[datetime] = None,
    algorithm: str = ALGORITHM,
) -> str:
    """
    subject 클레임을 담은 서명 토큰 발급
    - iat: 발급 시각(초), exp: iat + ttl
    """
    if not subject:
        raise ValueError("subject must be a non-empty string")
    _check_algorithm(algorithm)
    issued_at = int(_timestamp(now))
    claims = {
        "sub": subject,
        "iat": issued_at,
        "exp": issued_at + int(ttl.total_seconds()),
    }
    return jwt.encode(claims, secret, algorithm=algorithm)


def verify(
    token: str,
    secret: Secret,
    now: Optional[datetime] = None,
    algorithm: str = ALGORITHM,
) -> str:
    """
    토큰을 검증하고 subject를 반환
    1) 구조 분해 (header.claims.signature) 실패 → MalformedTokenError
    2) 서명 구간이 정규 base64url이 아님, HMAC 서명 불일치, 허용되지 않은 alg → InvalidSignatureError
    3) 클레임이 JSON 객체가 아니거나 sub/exp 누락 → MalformedTokenError
    4) now >= exp → ExpiredTokenError
    """
    _check_algorithm(algorithm)
    if not token or not isinstance(token, str):
        raise MalformedTokenError("Token is empty")

    try:
        jws.get_unverified_header(token)
    except (JOSEError, ValueError, TypeError) as e:
        raise MalformedTokenError(f"Token could not be parsed: {e}")

    # 서명 구간은 정규 base64url만 허용 (패딩 비트 변형 거부)
    if not _is_canonical(token.rsplit(".", 1)[-1]):
        raise InvalidSignatureError("Token signature is not canonical base64url")

    try:
        jws.verify(token, secret, algorithms=[algorithm])
    except JOSEError as e:
        raise InvalidSignatureError(f"Token signature is invalid: {e}")

    try:
        claims = jwt.get_unverified_claims(token)
    except JOSEError as e:
        raise MalformedTokenError(f"Token claims could not be parsed: {e}")

    subject = claims.get("sub")
    expires_at = claims.get("exp")
    if not isinstance(subject, str) or not subject:
        raise MalformedTokenError("Token has no subject claim")
    if not isinstance(expires_at, int) or isinstance(expires_at, bool):
        raise MalformedTokenError("Token has no expiry claim")

    if _timestamp(now) >= expires_at:
        raise ExpiredTokenError("Token has expired", expired_at=expires_at)
    return subject
