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
from enum import Enum

from ._main import XmlMeta, XmlEnumMeta
from ._support import (
    Accessor, AccessorKind, AnnotationException, CacheMode, MalformedGenericDeclaration, MissingAccessor,
    NameInterner, XmlAccessType, XmlBindingException, XmlField, XmlName
)
from ._caches import Caches, CacheData
from .parser import AnnotatedObjectParser


class XmlObject(metaclass=XmlMeta):
    pass


class XmlEnum(Enum, metaclass=XmlEnumMeta):
    pass


__all__ = [
    "XmlObject", "XmlEnum", "Caches", "CacheData", "CacheMode", "AnnotatedObjectParser",
    "Accessor", "AccessorKind", "XmlAccessType", "XmlField", "XmlName", "NameInterner",
    "XmlBindingException", "AnnotationException", "MissingAccessor", "MalformedGenericDeclaration"
]
