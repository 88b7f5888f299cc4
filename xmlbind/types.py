"""
 * Copyright(c) 2021 ZettaScale Technology and others
 *
 * This program and the accompanying materials are made available under the
 * terms of the Eclipse Public License v. 2.0 which is available at
 * http://www.eclipse.org/legal/epl-2.0, or the Eclipse Distribution License
 * v. 1.0 which is available at
 * http://www.eclipse.org/org/documents/edl-v10.php.
 *
 * SPDX-License-Identifier: EPL-2.0 OR BSD-3-Clause
"""

from datetime import date, datetime, time, timedelta
from decimal import Decimal
from enum import Enum
from inspect import isclass
from typing import Any, Dict, Generic, NamedTuple, Optional, TypeVar

from . import _type_helper as _th


def _type_repr(obj):
    """Avoid printing <class 'int'>"""
    if type(obj) == str:
        return obj
    if isinstance(obj, type):
        if obj.__module__ == 'builtins':
            return obj.__qualname__
        return f'{obj.__module__}.{obj.__qualname__}'
    if _th.get_origin(obj) == _th.Annotated:
        return _th.get_args(obj)[1]
    return repr(obj)


class QName(NamedTuple):
    namespace_uri: str
    local_part: str
    prefix: str = ""

    def __str__(self) -> str:
        if self.namespace_uri:
            return f"{{{self.namespace_uri}}}{self.local_part}"
        return self.local_part


ValueType = TypeVar('ValueType')
BoundType = TypeVar('BoundType')


class XmlAdapter(Generic[ValueType, BoundType]):
    """Converts between a bound member value and the value written to XML.
    Adapters are attached to members with ``annotations.type_adapter``."""

    def unmarshal(self, value: ValueType) -> BoundType:
        raise NotImplementedError()

    def marshal(self, value: BoundType) -> ValueType:
        raise NotImplementedError()


class XmlSchemaType(Enum):
    ANY_SIMPLE_TYPE = "anySimpleType"
    DATE = "date"
    DATE_TIME = "dateTime"
    TIME = "time"

    @classmethod
    def from_string(cls, name: str) -> Optional['XmlSchemaType']:
        try:
            return cls(name)
        except ValueError:
            return None


int8 = _th.Annotated[int, "int8"]
int16 = _th.Annotated[int, "int16"]
int32 = _th.Annotated[int, "int32"]
int64 = _th.Annotated[int, "int64"]
uint8 = _th.Annotated[int, "uint8"]
uint16 = _th.Annotated[int, "uint16"]
uint32 = _th.Annotated[int, "uint32"]
uint64 = _th.Annotated[int, "uint64"]
float32 = _th.Annotated[float, "float32"]
float64 = _th.Annotated[float, "float64"]
NoneType = type(None)


class InvocationClassType(Enum):
    """Tag telling a marshaller which conversion to use for a value type.

    Each member lists the exact types it stands for. Width-specific
    integers and floats are the annotated aliases of this module; plain
    ``int`` is the unbounded XML ``integer``.
    """
    STRING = (str,)
    LONG = (int64,)
    XML_GREGORIAN_CALENDAR = (datetime, date, time)
    INT = (int32,)
    INTEGER = (int,)
    BOOLEAN = (bool,)
    DOUBLE = (float, float64)
    BYTE = (int8,)
    BYTE_ARRAY = (bytes, bytearray)
    FLOAT = (float32,)
    SHORT = (int16,)
    DECIMAL = (Decimal,)
    UNSIGNED_BYTE = (uint8,)
    UNSIGNED_SHORT = (uint16,)
    UNSIGNED_INT = (uint32,)
    UNSIGNED_LONG = (uint64,)
    ENUM = (Enum,)
    DURATION = (timedelta,)
    QNAME = (QName,)
    OBJECT = (object,)

    @classmethod
    def value_of(cls, _type: Any) -> 'InvocationClassType':
        found = _invocation_types.get(_type)
        if found is not None:
            return found
        if isclass(_type) and issubclass(_type, Enum):
            return cls.ENUM
        return cls.OBJECT


_invocation_types: Dict[Any, InvocationClassType] = {
    _type: kind for kind in InvocationClassType for _type in kind.value
}


__all__ = [
    "QName", "XmlAdapter", "XmlSchemaType", "InvocationClassType",
    "int8", "int16", "int32", "int64", "uint8", "uint16", "uint32", "uint64",
    "float32", "float64", "NoneType"
]
