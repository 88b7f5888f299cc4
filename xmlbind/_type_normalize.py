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

import re
import sys
import types as _pytypes
import collections.abc as cabc
from inspect import isclass
from typing import Any, ClassVar, Dict, Optional, Union

from ._support import MalformedGenericDeclaration
from ._type_helper import Annotated, get_origin, get_args, get_type_hints, get_annotations
from .types import NoneType


_union_origins = (Union, getattr(_pytypes, "UnionType", Union))


_container_origins = (
    list, set, frozenset, tuple,
    cabc.Sequence, cabc.MutableSequence, cabc.Set, cabc.MutableSet, cabc.Collection, cabc.Iterable
)


def get_xml_annotations(cls: Any) -> Dict[str, Any]:
    return getattr(cls, "__dict__", {}).get("__xml_annotations__", {})


def get_xml_field_annotations(cls: Any) -> Dict[str, Dict[str, Any]]:
    return getattr(cls, "__dict__", {}).get("__xml_field_annotations__", {})


def find_xml_annotation(cls: type, annotation: str) -> Any:
    """Class level metadata that subclasses inherit, looked up along the MRO."""
    for klass in cls.__mro__:
        annotations = get_xml_annotations(klass)
        if annotation in annotations:
            return annotations[annotation]
    return None


def is_schema_bound(_type: Any) -> bool:
    if not isclass(_type):
        return False
    annotations = get_xml_annotations(_type)
    return "root_element" in annotations or "type" in annotations


def get_member_hints(cls: type) -> Dict[str, Any]:
    """Resolved type hints of the members ``cls`` declares itself."""
    own = [name for name in get_annotations(cls) if not name.startswith("__")]
    if not own:
        return {}

    try:
        hints = get_type_hints(
            cls,
            localns={cls.__name__: cls},
            include_extras=True
        )
    except (NameError, TypeError) as e:
        raise TypeError(f"Members of {cls.__module__}.{cls.__qualname__} cannot be resolved: {e}") from e

    return {name: hints[name] for name in own if get_origin(hints[name]) is not ClassVar}


def _is_primitive_alias(_type: Any) -> bool:
    # Annotated[int, "int32"] and friends from .types
    return get_origin(_type) is Annotated and type(get_args(_type)[1]) == str


def normalize_type(_type: Any) -> Any:
    """Strip Optional and non-primitive Annotated wrappers, keep the rest."""
    while True:
        if get_origin(_type) is Annotated and not _is_primitive_alias(_type):
            _type = get_args(_type)[0]
            continue
        if get_origin(_type) in _union_origins:
            args = [a for a in get_args(_type) if a is not NoneType]
            if len(args) == 1:
                _type = args[0]
                continue
        return _type


def raw_type(_type: Any) -> Any:
    """The plain runtime class behind a type hint: ``List[int]`` is ``list``,
    ``int32`` is ``int``."""
    _type = normalize_type(_type)
    if _is_primitive_alias(_type):
        return get_args(_type)[0]
    ori = get_origin(_type)
    if ori is not None:
        return ori
    if _type is Any:
        return object
    return _type


def is_container(_type: Any) -> bool:
    rtype = raw_type(_type)
    return rtype in _container_origins


def is_boolean(_type: Any) -> bool:
    return raw_type(_type) is bool


def element_type_of(_type: Any, member: Any) -> Any:
    """The element type of a container hint, ``object`` for ``Any`` or ``object``."""
    _type = normalize_type(_type)
    if _type is object or _type is Any:
        return object

    args = get_args(_type)
    if not is_container(_type) or not args:
        raise MalformedGenericDeclaration(
            f"{member} is declared as {_type}, which is not a parameterized container."
        )

    element = normalize_type(args[0])
    if element is Any:
        return object
    return element


_camel_boundary = re.compile(r"([a-z\d])([A-Z])")
_acronym_boundary = re.compile(r"([A-Z]+)([A-Z][a-z])")
_separators = re.compile(r"[^0-9a-zA-Z_]+")


def xml_name_to_identifier(xml_name: str) -> str:
    """firstName -> first_name, HTTPServer -> http_server, first-name -> first_name"""
    identifier = _acronym_boundary.sub(r"\1_\2", xml_name)
    identifier = _camel_boundary.sub(r"\1_\2", identifier)
    return _separators.sub("_", identifier).lower()


def get_type_local_name(cls: type) -> str:
    """Schema name of a type: its xml_type name, else its root element
    name, else the class name with a lowercase first letter."""
    annotations = get_xml_annotations(cls)
    xml_type = annotations.get("type")
    if xml_type is not None and xml_type.name:
        return xml_type.name

    root_element = annotations.get("root_element")
    if root_element is not None and root_element.name:
        return root_element.name

    return cls.__name__[:1].lower() + cls.__name__[1:]


def get_root_element_name(cls: type) -> str:
    annotations = get_xml_annotations(cls)
    root_element = annotations.get("root_element")
    if root_element is not None:
        return root_element.name or cls.__name__[:1].lower() + cls.__name__[1:]
    return get_type_local_name(cls)


def get_module_namespace(module_name: str) -> Optional[str]:
    """``__xml_namespace__`` of a module or, failing that, of the closest
    enclosing package that declares one."""
    while module_name:
        module = sys.modules.get(module_name)
        namespace = getattr(module, "__xml_namespace__", None)
        if namespace is not None:
            return namespace
        module_name = module_name.rpartition(".")[0]
    return None


def resolve_namespace(cls: type) -> str:
    annotations = get_xml_annotations(cls)

    xml_type = annotations.get("type")
    if xml_type is not None and xml_type.namespace is not None:
        return xml_type.namespace

    root_element = annotations.get("root_element")
    if root_element is not None and root_element.namespace is not None:
        return root_element.namespace

    return get_module_namespace(cls.__module__) or ""


__all__ = [
    "get_xml_annotations", "get_xml_field_annotations", "find_xml_annotation", "is_schema_bound",
    "get_member_hints", "normalize_type", "raw_type", "is_container", "is_boolean", "element_type_of",
    "xml_name_to_identifier", "get_type_local_name", "get_root_element_name", "get_module_namespace",
    "resolve_namespace"
]
