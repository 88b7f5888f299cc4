"""
 * Copyright(c) 2021 to 2022 ZettaScale Technology and others
 *
 * This program and the accompanying materials are made available under the
 * terms of the Eclipse Public License v. 2.0 which is available at
 * http://www.eclipse.org/legal/epl-2.0, or the Eclipse Distribution License
 * v. 1.0 which is available at
 * http://www.eclipse.org/org/documents/edl-v10.php.
 *
 * SPDX-License-Identifier: EPL-2.0 OR BSD-3-Clause
"""

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Callable, Dict, Mapping, Optional, Tuple


class XmlBindingException(Exception):
    pass


class AnnotationException(XmlBindingException):
    pass


class MissingAccessor(XmlBindingException, AttributeError):
    def __init__(self, xml_name: str, method_name: Optional[str], declaring_type: type, argument_type: Any) -> None:
        self.xml_name = xml_name
        self.method_name = method_name
        self.declaring_type = declaring_type
        self.argument_type = argument_type
        super().__init__(
            f"Failed to Locate Method for Element, Name = {xml_name}, MethodName = {method_name}, "
            f"Type = {declaring_type}, Argument Type = {argument_type}"
        )


class MalformedGenericDeclaration(XmlBindingException, TypeError):
    pass


class CacheMode(Enum):
    READER = auto()
    WRITER = auto()


class XmlAccessType(Enum):
    FIELD = auto()
    PROPERTY = auto()
    PUBLIC_MEMBER = auto()
    NONE = auto()


class AccessorKind(Enum):
    GETTER = auto()
    PREDICATE = auto()
    SETTER = auto()


@dataclass(frozen=True)
class XmlRootElement:
    name: Optional[str] = None
    namespace: Optional[str] = None


@dataclass(frozen=True)
class XmlType:
    name: Optional[str] = None
    namespace: Optional[str] = None
    prop_order: Tuple[str, ...] = ()


@dataclass(frozen=True)
class XmlAttribute:
    name: Optional[str] = None
    required: bool = False
    namespace: Optional[str] = None


@dataclass(frozen=True)
class XmlElement:
    name: Optional[str] = None
    required: bool = False
    type: Any = None
    nillable: bool = False


@dataclass(frozen=True, eq=False)
class XmlField:
    """A structural member of a bound class: its name, the class that
    declares it, its resolved type hint and the metadata attached to it
    in the class body."""
    name: str
    owner: type
    type: Any
    annotations: Mapping[str, Any] = field(default_factory=dict)

    def __repr__(self) -> str:
        return f"XmlField({self.owner.__name__}.{self.name}: {self.type})"


@dataclass(frozen=True)
class Accessor:
    xml_name: str
    method_name: str
    kind: AccessorKind
    owner: type
    function: Callable[..., Any]
    argument_type: Any = None

    @property
    def is_getter(self) -> bool:
        return self.kind is not AccessorKind.SETTER

    def __call__(self, instance: Any, *args: Any) -> Any:
        return self.function(instance, *args)

    def __repr__(self) -> str:
        return f"Accessor({self.owner.__name__}.{self.method_name}, {self.kind.name})"


class XmlName(str):
    """Canonical token for a schema-local element or attribute name."""
    __slots__ = ()

    def __repr__(self) -> str:
        return f"XmlName({str.__repr__(self)})"


class NameInterner:
    def __init__(self) -> None:
        self._tokens: Dict[str, XmlName] = {}

    def intern(self, name: str) -> XmlName:
        token = self._tokens.get(name)
        if token is None:
            # dict.setdefault is a single atomic insert-if-absent: the
            # first inserted token is the one every caller gets back.
            token = self._tokens.setdefault(name, XmlName(name))
        return token

    def __contains__(self, name: object) -> bool:
        return name in self._tokens

    def __len__(self) -> int:
        return len(self._tokens)


__all__ = [
    "XmlBindingException", "AnnotationException", "MissingAccessor", "MalformedGenericDeclaration",
    "CacheMode", "XmlAccessType", "AccessorKind", "XmlRootElement", "XmlType", "XmlAttribute",
    "XmlElement", "XmlField", "Accessor", "XmlName", "NameInterner"
]
