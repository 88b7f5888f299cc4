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

from typing import Any, Iterator, Optional, Union

from ._caches import Caches, CacheData
from ._support import Accessor, CacheMode, XmlField, XmlName
from .types import InvocationClassType


class AnnotatedObjectParser:
    """Base for readers and writers of bound objects.

    A parser owns the caches for one root class in one mode. The caches
    are filled the first time ``registered_caches`` is asked for, after
    that lookups never rescan a class.
    """

    def __init__(self, input_class: type, cache_mode: CacheMode, **caches_options: Any) -> None:
        self.caches = Caches(input_class, cache_mode, **caches_options)

    @property
    def registered_caches(self) -> Caches:
        self.caches.register()
        return self.caches

    def get_cache_data(self, cls: type) -> Optional[CacheData]:
        return self.registered_caches.get_cache_data(cls)

    def get_generic_type(self, member: Union[XmlField, Accessor]) -> Any:
        return self.caches.get_generic_type(member)

    def get_xml_prop_order(self, cls: type) -> Optional[Iterator[XmlName]]:
        prop_order = self.caches.get_xml_prop_order(cls)
        return None if prop_order is None else iter(prop_order)

    def get_xml_element_name(self, name: str) -> XmlName:
        return self.caches.get_xml_element_name(name)

    @staticmethod
    def get_invocation_class_type(_type: Any) -> InvocationClassType:
        return InvocationClassType.value_of(_type)


__all__ = ["AnnotatedObjectParser"]
