# fabtrack/domains/activity/values.py

"""
활동 로그의 old_value / new_value를 표현하는 태그드 유니온(tagged union) 모듈입니다.

외부 영속성 서비스에서 들어오는 값은 문자열, 숫자, 배열, 객체, null 등 타입이 느슨합니다.
데이터 수집 경계(classify_value)에서 한 번만 분류하고,
포맷터는 분류된 타입만 다루도록 합니다.
"""

import json
import math
from typing import Annotated, Any, Dict, List, Literal, Union

from pydantic import BaseModel, ConfigDict, Field


class EmptyValue(BaseModel):
    model_config = ConfigDict(frozen=True)
    kind: Literal["empty"] = "empty"


class NumberValue(BaseModel):
    model_config = ConfigDict(frozen=True)
    kind: Literal["number"] = "number"
    value: Union[int, float]


class BoolValue(BaseModel):
    model_config = ConfigDict(frozen=True)
    kind: Literal["bool"] = "bool"
    value: bool


class TextValue(BaseModel):
    model_config = ConfigDict(frozen=True)
    kind: Literal["text"] = "text"
    value: str


class ListValue(BaseModel):
    model_config = ConfigDict(frozen=True)
    kind: Literal["list"] = "list"
    items: List[Any] = Field(default_factory=list)


class RecordValue(BaseModel):
    model_config = ConfigDict(frozen=True)
    kind: Literal["record"] = "record"
    fields: Dict[str, Any] = Field(default_factory=dict)


ChangeValue = Annotated[
    Union[EmptyValue, NumberValue, BoolValue, TextValue, ListValue, RecordValue],
    Field(discriminator="kind"),
]

CHANGE_VALUE_TYPES = (EmptyValue, NumberValue, BoolValue, TextValue, ListValue, RecordValue)


def classify_value(raw: Any) -> ChangeValue:
    """
    느슨한 타입의 원시 값을 ChangeValue로 분류합니다.
    None과 빈 문자열은 EmptyValue가 됩니다.
    """
    if isinstance(raw, CHANGE_VALUE_TYPES):
        return raw
    if raw is None or raw == "":
        return EmptyValue()
    # bool은 int의 하위 클래스이므로 숫자보다 먼저 검사합니다.
    if isinstance(raw, bool):
        return BoolValue(value=raw)
    if isinstance(raw, (int, float)):
        return NumberValue(value=raw)
    if isinstance(raw, str):
        return TextValue(value=raw)
    if isinstance(raw, (list, tuple)):
        return ListValue(items=list(raw))
    if isinstance(raw, dict):
        return RecordValue(fields=dict(raw))
    return TextValue(value=str(raw))


def js_number(number: Union[int, float]) -> str:
    """정수값 float는 소수점 없이 표시합니다 (42.0 -> '42')."""
    if isinstance(number, float):
        if math.isnan(number):
            return "NaN"
        if math.isinf(number):
            return "Infinity" if number > 0 else "-Infinity"
        if number.is_integer():
            return str(int(number))
    return str(number)


def to_json(value: Any) -> str:
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False, default=str)


def js_string(value: Any) -> str:
    """대시보드 표시 규칙에 맞춘 문자열 변환."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return js_number(value)
    if isinstance(value, (dict, list, tuple)):
        return to_json(value)
    return str(value)
