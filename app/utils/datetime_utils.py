from datetime import datetime, timezone


def utcnow() -> datetime:
    """
    DB 저장용 현재 UTC 시각 (tz 정보 없는 naive datetime)
    """
    return datetime.now(timezone.utc).replace(tzinfo=None)


def iso_timestamp() -> str:
    """
    응답 봉투(envelope)에 넣을 ISO-8601 UTC 타임스탬프
    """
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")
