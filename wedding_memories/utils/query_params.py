"""
Chuẩn hóa query param boolean cho các listing (?featured=true).
FastAPI nhận ?featured=false dưới dạng str "false"; `if featured:` sẽ thành True.
"""
from typing import Optional

TRUE_VALUES = frozenset({"true", "1", "yes", "on"})


def ensure_bool_query(value: Optional[bool | str], default: bool = False) -> bool:
    """
    Chuyển giá trị query (bool hoặc str) sang bool thật.
    True khi value là True hoặc "true" / "1" / "yes" / "on" (không phân biệt hoa thường).
    None hoặc chuỗi rỗng -> default; mọi chuỗi khác -> False.
    """
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    s = str(value).strip().lower()
    if not s:
        return default
    return s in TRUE_VALUES
