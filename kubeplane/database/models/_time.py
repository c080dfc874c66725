from datetime import datetime, timezone


def utcnow() -> datetime:
    # SQLite의 DateTime 컬럼은 tzinfo를 보존하지 않으므로 naive UTC로 저장합니다.
    return datetime.now(timezone.utc).replace(tzinfo=None)
