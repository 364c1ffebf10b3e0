import re
from typing import Any, List, Optional

import pandas as pd

from netwatch_manager import schemas

# RouterOS 시간 표기: "1s", "500ms", "1m30s", "1d2h", "00:00:01", "1w2d03:04:05"
_UNIT_SECONDS = {"w": 604800, "d": 86400, "h": 3600, "m": 60, "s": 1, "ms": 0.001}
_UNIT_PATTERN = re.compile(r"(\d+(?:\.\d+)?)(ms|w|d|h|m|s)")
_CLOCK_PATTERN = re.compile(r"(\d+):(\d{2}):(\d{2}(?:\.\d+)?)$")


def parse_duration_seconds(value: Any) -> Optional[float]:
    """RouterOS 시간 문자열을 초 단위로 변환합니다. 해석할 수 없으면 None."""
    if value is None:
        return None
    if isinstance(value, (int, float)):
        return None if value != value else float(value)
    s = str(value).strip().lower()
    if not s:
        return None
    if re.fullmatch(r"\d+(?:\.\d+)?", s):
        return float(s)

    total = 0.0
    clock = _CLOCK_PATTERN.search(s)
    if clock:
        hours, minutes, seconds = clock.groups()
        total += int(hours) * 3600 + int(minutes) * 60 + float(seconds)
        s = s[:clock.start()]

    consumed = 0
    for match in _UNIT_PATTERN.finditer(s):
        if match.start() != consumed:
            return None
        total += float(match.group(1)) * _UNIT_SECONDS[match.group(2)]
        consumed = match.end()
    if consumed != len(s):
        return None
    return total


def _to_timeout_ms(value: Any) -> Optional[int]:
    seconds = parse_duration_seconds(value)
    if seconds is None:
        return None
    # 단위 없는 숫자는 ms로 취급 (mock 및 API 응답)
    if isinstance(value, (int, float)) or re.fullmatch(r"\s*\d+\s*", str(value)):
        return int(seconds)
    return int(round(seconds * 1000))


def _to_interval_s(value: Any) -> Optional[int]:
    seconds = parse_duration_seconds(value)
    return None if seconds is None else int(round(seconds))


def _clean_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, float) and value != value:
        return None
    s = str(value).strip()
    return s or None


def dataframe_to_watch_rules(df: pd.DataFrame | None) -> List[schemas.WatchRule]:
    """벤더가 반환한 DataFrame을 WatchRule 리스트로 변환합니다.

    - 컬럼명을 snake_case로 정규화
    - timeout은 ms, interval은 초 단위 정수로 변환
    - host가 없는 행은 제외
    """
    if df is None or df.empty:
        return []

    df = df.copy()
    df.columns = [str(col).strip().lstrip(".").lower().replace("-", "_").replace(" ", "_") for col in df.columns]
    df = df.rename(columns={"id": "remote_id"})

    rules: List[schemas.WatchRule] = []
    records = df.astype(object).where(pd.notna(df), None).to_dict(orient="records")
    for row in records:
        host = _clean_str(row.get("host"))
        remote_id = _clean_str(row.get("remote_id"))
        if not host or not remote_id:
            continue
        status = _clean_str(row.get("status"))
        rules.append(schemas.WatchRule(
            remote_id=remote_id,
            host=host,
            comment=_clean_str(row.get("comment")),
            timeout_ms=_to_timeout_ms(row.get("timeout")),
            interval_s=_to_interval_s(row.get("interval")),
            up_script=_clean_str(row.get("up_script")),
            down_script=_clean_str(row.get("down_script")),
            status=status.lower() if status else None,
        ))
    return rules
