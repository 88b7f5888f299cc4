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

from collections import deque
from enum import EnumMeta
from typing import Any, ClassVar, Dict, Mapping, Tuple

from ._support import AnnotationException, XmlType
from ._type_helper import get_annotations
from .types import XmlSchemaType


class XMLNamespaceScope:
    current = None
    stack = deque()

    @classmethod
    def enter(cls, scope):
        if cls.current is not None:
            cls.stack.append(cls.current)
        cls.current = scope

    @classmethod
    def exit(cls):
        if cls.stack:
            cls.current = cls.stack.pop()
        else:
            cls.current = None


def _check_field_annotations(cls, members) -> None:
    value_members = []
    for name, f_annot in cls.__xml_field_annotations__.items():
        if name not in members:
            raise AnnotationException(f"Member {name} of {cls.__name__} is annotated but not defined.")
        if f_annot.get("value"):
            value_members.append(name)
        if "elements" in f_annot and not f_annot["elements"]:
            raise AnnotationException(f"Choice member {name} of {cls.__name__} needs at least one alternative.")
        if "schema_type" in f_annot and XmlSchemaType.from_string(f_annot["schema_type"]) is None:
            raise AnnotationException(
                f"{f_annot['schema_type']} is not a supported schema type, use one of "
                f"{', '.join(t.value for t in XmlSchemaType)}."
            )

    if len(value_members) > 1:
        raise AnnotationException(
            f"{cls.__name__} declares more than one value member: {', '.join(value_members)}."
        )


class XmlMeta(type):
    __xml_annotations__: ClassVar[Dict[str, Any]]
    __xml_field_annotations__: ClassVar[Dict[str, Dict[str, Any]]]

    @classmethod
    def __prepare__(metacls, __name: str, __bases: Tuple[type, ...], **kwds: Any) -> Mapping[str, Any]:
        typename = kwds.pop("typename", None)
        namespace_uri = kwds.pop("namespace", None)

        namespace = super().__prepare__(__name, __bases, **kwds)
        namespace["__xml_annotations__"] = {}
        namespace["__xml_field_annotations__"] = {}
        if typename or namespace_uri:
            namespace["__xml_annotations__"]["type"] = XmlType(name=typename, namespace=namespace_uri)

        XMLNamespaceScope.enter(namespace)
        return namespace

    def __new__(metacls, name, bases, classdict, **kwds):
        XMLNamespaceScope.exit()
        new_cls = super().__new__(metacls, name, bases, dict(**classdict))

        _check_field_annotations(new_cls, get_annotations(new_cls))
        return new_cls

    def __repr__(cls):
        # Note, this is the _class_ repr
        if cls.__name__ == "XmlObject":
            return "XmlObject"
        xml_type = cls.__xml_annotations__.get("type")
        if xml_type is not None and xml_type.name:
            return f"{cls.__name__}(XmlObject, typename='{xml_type.name}')"
        return f"{cls.__name__}(XmlObject)"


class XmlEnumMeta(EnumMeta):
    __xml_annotations__: ClassVar[Dict[str, Any]]
    __xml_field_annotations__: ClassVar[Dict[str, Dict[str, Any]]]

    @classmethod
    def __prepare__(metacls, __name: str, __bases: Tuple[type, ...], **kwds: Any) -> Mapping[str, Any]:
        typename = kwds.pop("typename", None)
        namespace_uri = kwds.pop("namespace", None)

        namespace = super().__prepare__(__name, __bases, **kwds)
        namespace["__xml_annotations__"] = {}
        namespace["__xml_field_annotations__"] = {}
        if typename or namespace_uri:
            namespace["__xml_annotations__"]["type"] = XmlType(name=typename, namespace=namespace_uri)

        XMLNamespaceScope.enter(namespace)
        return namespace

    def __new__(metacls, name, bases, classdict, **kwds):
        XMLNamespaceScope.exit()
        new_cls = super().__new__(metacls, name, bases, classdict)

        _check_field_annotations(new_cls, new_cls.__members__)
        return new_cls

    def __repr__(cls):
        # Note, this is the _class_ repr
        if cls.__name__ == "XmlEnum":
            return "XmlEnum"
        return f"{cls.__name__}(XmlEnum)"
