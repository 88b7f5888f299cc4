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

from typing import Any, Callable, ClassVar, Iterable, Mapping, Optional, Type, TypeVar

from ._main import XMLNamespaceScope
from ._support import AnnotationException, XmlAccessType, XmlAttribute, XmlElement, XmlRootElement, XmlType
from ._type_helper import get_annotations, get_origin
from ._type_normalize import get_member_hints, is_boolean, xml_name_to_identifier
from .types import XmlAdapter


T = TypeVar('T', bound=type)


def __annotate(cls: T, annotation: str, value: Any) -> None:
    if "__xml_annotations__" not in cls.__dict__:
        cls.__xml_annotations__ = {}
    cls.__xml_annotations__[annotation] = value


def __field_annotate(pfield: str, annotation: str, value: Any) -> None:
    if not XMLNamespaceScope.current:
        raise AnnotationException("Cannot annotate fields while not in class scope")

    if pfield not in XMLNamespaceScope.current["__xml_field_annotations__"]:
        XMLNamespaceScope.current["__xml_field_annotations__"][pfield] = {}

    XMLNamespaceScope.current["__xml_field_annotations__"][pfield][annotation] = value


def root_element(name: Optional[str] = None, namespace: Optional[str] = None) -> Callable[[T], T]:
    def root_element_inner(cls: T) -> T:
        __annotate(cls, "root_element", XmlRootElement(name=name, namespace=namespace))
        return cls

    return root_element_inner


def xml_type(name: Optional[str] = None, namespace: Optional[str] = None,
             prop_order: Iterable[str] = ()) -> Callable[[T], T]:
    def xml_type_inner(cls: T) -> T:
        __annotate(cls, "type", XmlType(name=name, namespace=namespace, prop_order=tuple(prop_order)))
        return cls

    return xml_type_inner


def accessor_type(access_type: XmlAccessType) -> Callable[[T], T]:
    if not isinstance(access_type, XmlAccessType):
        raise AnnotationException(f"{access_type} is not an XmlAccessType.")

    def accessor_type_inner(cls: T) -> T:
        __annotate(cls, "accessor_type", access_type)
        return cls

    return accessor_type_inner


def see_also(*types: type) -> Callable[[T], T]:
    def see_also_inner(cls: T) -> T:
        __annotate(cls, "see_also", tuple(types))
        return cls

    return see_also_inner


def attribute(apply_to: str, name: Optional[str] = None, required: bool = False,
              namespace: Optional[str] = None) -> None:
    __field_annotate(apply_to, "attribute", XmlAttribute(name=name, required=required, namespace=namespace))


def element(apply_to: str, name: Optional[str] = None, required: bool = False, nillable: bool = False) -> None:
    __field_annotate(apply_to, "element", XmlElement(name=name, required=required, nillable=nillable))


def value(apply_to: str) -> None:
    __field_annotate(apply_to, "value", True)


def elements(apply_to: str, choices: Mapping[str, Any]) -> None:
    __field_annotate(apply_to, "elements", tuple(
        XmlElement(name=name, type=_type) for name, _type in choices.items()
    ))


def transient(apply_to: str) -> None:
    __field_annotate(apply_to, "transient", True)


def schema_type(apply_to: str, name: str) -> None:
    # Checked once the class is complete, see _main._check_field_annotations
    __field_annotate(apply_to, "schema_type", name)


def type_adapter(apply_to: str, adapter: Type[XmlAdapter]) -> None:
    __field_annotate(apply_to, "adapter", adapter)


def enum_value(apply_to: str, text: str) -> None:
    __field_annotate(apply_to, "enum_value", text)


def _schema_name(f_annot: Mapping[str, Any], member: str) -> str:
    if "attribute" in f_annot and f_annot["attribute"].name:
        return f_annot["attribute"].name
    if "element" in f_annot and f_annot["element"].name:
        return f_annot["element"].name
    if "value" in f_annot:
        return "value"
    return member


def generate_accessors(cls: T) -> T:
    """Add ``get_``/``is_``/``set_`` methods for every member of ``cls``,
    named after the member's schema name. Methods the class already
    defines are left alone."""
    field_annotations = cls.__dict__.get("__xml_field_annotations__", {})
    try:
        hints = get_member_hints(cls)
    except TypeError:
        # Forward references to classes defined further down the module,
        # the generated accessors stay unannotated.
        hints = {}

    for member, annotation in get_annotations(cls).items():
        if member.startswith("__") or get_origin(annotation) is ClassVar:
            continue
        hint = hints.get(member, annotation)
        identifier = xml_name_to_identifier(_schema_name(field_annotations.get(member, {}), member))
        getter = f"is_{identifier}" if is_boolean(hint) else f"get_{identifier}"
        setter = f"set_{identifier}"

        if getter not in cls.__dict__:
            setattr(cls, getter, _make_getter(member, getter, hints.get(member)))
        if setter not in cls.__dict__:
            setattr(cls, setter, _make_setter(member, setter, hints.get(member)))

    return cls


def _make_getter(member: str, method_name: str, hint: Any) -> Callable[[Any], Any]:
    def getter(self):
        return getattr(self, member)

    getter.__name__ = getter.__qualname__ = method_name
    if hint is not None:
        getter.__annotations__ = {"return": hint}
    return getter


def _make_setter(member: str, method_name: str, hint: Any) -> Callable[[Any, Any], None]:
    def setter(self, value):
        setattr(self, member, value)

    setter.__name__ = setter.__qualname__ = method_name
    if hint is not None:
        setter.__annotations__ = {"value": hint, "return": None}
    return setter


__all__ = [
    "root_element", "xml_type", "accessor_type", "see_also", "attribute", "element", "value",
    "elements", "transient", "schema_type", "type_adapter", "enum_value", "generate_accessors"
]
