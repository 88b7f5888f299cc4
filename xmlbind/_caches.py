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

import logging
import threading
from enum import Enum
from inspect import Parameter, isclass, isfunction, signature
from typing import Any, Callable, Dict, Mapping, Optional, Set, Tuple, Type, Union

from ._support import (
    Accessor, AccessorKind, CacheMode, MalformedGenericDeclaration, MissingAccessor, NameInterner,
    XmlAccessType, XmlBindingException, XmlElement, XmlField, XmlName
)
from ._type_helper import get_type_hints
from ._type_normalize import (
    element_type_of, find_xml_annotation, get_member_hints, get_root_element_name, get_type_local_name,
    get_xml_annotations, get_xml_field_annotations, is_container, is_schema_bound, normalize_type, raw_type,
    resolve_namespace, xml_name_to_identifier
)
from .module_helper import module_object_factory
from .types import InvocationClassType, XmlAdapter, XmlSchemaType, _type_repr


VALUE = "value"

FactoryResolver = Callable[[type, str], Optional[Any]]


def _function_hints(function: Callable[..., Any], owner: type) -> Dict[str, Any]:
    try:
        return get_type_hints(function, localns={owner.__name__: owner}, include_extras=True)
    except (NameError, TypeError) as e:
        raise TypeError(f"Annotations of {owner.__qualname__}.{function.__name__} cannot be resolved: {e}") from e


def _positional_parameters(function: Callable[..., Any]) -> Tuple[Parameter, ...]:
    # Skip self, count what a caller has to pass
    parameters = list(signature(function).parameters.values())[1:]
    return tuple(
        p for p in parameters
        if p.kind in (Parameter.POSITIONAL_ONLY, Parameter.POSITIONAL_OR_KEYWORD) and p.default is Parameter.empty
    )


class CacheData:
    """Everything the marshaller needs to know about one bound class."""

    def __init__(self, cache_mode: CacheMode) -> None:
        if cache_mode == CacheMode.READER:
            self.attribute_accessors: Optional[Dict[XmlName, Accessor]] = {}
            self.attribute_accessor_set: Optional[Set[Accessor]] = None
        else:
            self.attribute_accessors = None
            self.attribute_accessor_set = set()

        self.element_fields: Dict[XmlName, XmlField] = {}
        self.element_accessors: Dict[XmlName, Accessor] = {}
        self.enum_values: Dict[XmlName, Enum] = {}
        self.prop_order_accessors: Dict[XmlName, Accessor] = {}
        self.mapped_elements: Dict[XmlName, Set[XmlName]] = {}
        self.choice_groups: Dict[XmlField, Set[XmlName]] = {}
        self.required: Set[XmlName] = set()
        self.nillable: Set[XmlName] = set()
        # Only attributes qualified with a namespace of their own
        self.attribute_namespaces: Dict[XmlName, str] = {}
        self.value_accessor: Optional[Accessor] = None

    def __repr__(self) -> str:
        return (f"CacheData(elements={list(self.element_accessors)}, required={sorted(self.required)}, "
                f"value={self.value_accessor})")


class Caches:
    def __init__(self, input_class: type, cache_mode: CacheMode, *,
                 object_factories: Optional[Mapping[str, Any]] = None,
                 factory_resolver: FactoryResolver = module_object_factory) -> None:
        self.cache_mode: CacheMode = cache_mode
        self.root_class: type = input_class

        self._lock = threading.Lock()
        self._scan_events: Dict[type, threading.Event] = {}
        self._failures: Dict[type, Exception] = {}
        self._interner = NameInterner()
        self._factory_resolver: FactoryResolver = factory_resolver

        self._accessor_cache: Dict[Tuple[str, type, Any], Accessor] = {}
        self._basic_instance_cache: Dict[Any, bool] = {}
        self._class_cache_data: Dict[type, CacheData] = {}
        self._class_namespace_cache: Dict[type, str] = {}
        self._declared_fields_cache: Dict[type, Tuple[XmlField, ...]] = {}
        self._element_class_cache: Dict[XmlName, Any] = {}
        self._generic_field_type_cache: Dict[XmlField, Any] = {}
        self._generic_method_type_cache: Dict[Accessor, Any] = {}
        self._method_attribute_name_cache: Dict[Accessor, XmlName] = {}
        self._method_element_name_cache: Dict[Accessor, XmlName] = {}
        self._prop_order_cache: Dict[type, Tuple[XmlName, ...]] = {}
        self._registered_classes: Set[type] = set()
        self._xml_access_type_cache: Dict[type, Optional[XmlAccessType]] = {}
        self._xml_schema_type_cache: Dict[Accessor, XmlSchemaType] = {}
        self._xml_see_also_cache: Set[type] = set()
        self._xml_type_adapter_cache: Dict[Accessor, Type[XmlAdapter]] = {}

        if cache_mode == CacheMode.READER:
            self._class_element_name_cache: Optional[Dict[type, str]] = None
            self._class_object_factory_cache: Optional[Dict[Any, Any]] = {}
            self._namespace_object_factory_cache: Optional[Dict[str, Any]] = {}
            self._object_factory_cache: Optional[Dict[Any, Callable[[], Any]]] = {}
        else:
            self._class_element_name_cache = {}
            self._class_object_factory_cache = None
            self._namespace_object_factory_cache = None
            self._object_factory_cache = None

        self.root_element_name: XmlName = self.get_xml_element_name(get_root_element_name(input_class))
        self.root_namespace: str = self.scan_for_namespace(input_class)
        self._registered_classes.add(input_class)
        self._element_class_cache[self.root_element_name] = input_class

        for namespace, object_factory in (object_factories or {}).items():
            self.register_object_factory(object_factory, namespace)

    # Registration

    def register(self, cls: Optional[type] = None) -> None:
        """Make sure ``cls`` (the root class by default) and every bound
        class reachable from it are scanned. Safe to call repeatedly and
        from several threads: a caller that finds the scan running in
        another thread waits for it. A failed scan is raised again on
        every later call."""
        cls = self.root_class if cls is None else cls
        event, claimed = self._claim(cls)

        if claimed:
            self._scan_claimed(cls, event)
            return

        event.wait()
        failure = self._failures.get(cls)
        if failure is not None:
            raise failure

    def _claim(self, cls: type) -> Tuple[threading.Event, bool]:
        with self._lock:
            event = self._scan_events.get(cls)
            if event is not None:
                return event, False
            event = self._scan_events[cls] = threading.Event()
            self._registered_classes.add(cls)
            return event, True

    def _scan_claimed(self, cls: type, event: threading.Event) -> None:
        try:
            self.register_context_classes(cls)
        except Exception as e:
            self._failures.setdefault(cls, e)
            raise
        finally:
            event.set()

    def _register_nested(self, cls: type) -> None:
        # Called while another scan is running on this thread, never waits:
        # a class claimed further up the same scan would never finish.
        event, claimed = self._claim(cls)
        if claimed:
            self._scan_claimed(cls, event)

    def is_registered(self, cls: type) -> bool:
        return cls in self._registered_classes

    def register_context_classes(self, input_class: type) -> None:
        fields = self.get_declared_fields(input_class)

        for field in fields:
            if is_container(field.type):
                scan_class = self.get_generic_type(field)
            else:
                scan_class = normalize_type(field.type)

            if is_schema_bound(scan_class):
                self._register_nested(scan_class)

        self.scan_class(input_class, fields, self.cache_mode == CacheMode.WRITER)

    # Scanning

    def scan_class(self, scan_class: type, fields: Tuple[XmlField, ...], skip_factory: bool) -> None:
        # Published once the scan is complete, a failed scan leaves no descriptor
        cache_data = CacheData(self.cache_mode)

        logging.debug(f"Scanning {_type_repr(scan_class)} for {self.cache_mode.name.lower()}")

        namespace = self.scan_for_namespace(scan_class)

        if self.cache_mode == CacheMode.READER:
            if not skip_factory:
                self._resolve_object_factory(scan_class, namespace)
        else:
            self._class_element_name_cache[scan_class] = get_type_local_name(scan_class)

        xml_access_type = self.get_xml_access_type(scan_class)

        for field in fields:
            if self._is_skippable(field, xml_access_type):
                continue

            f_annot = field.annotations
            xml_attribute = f_annot.get("attribute")
            xml_elements = f_annot.get("elements")
            argument_type = raw_type(field.type)

            if xml_attribute is not None:
                xml_name = self.get_xml_element_name(xml_attribute.name or field.name)

                if xml_attribute.required:
                    cache_data.required.add(xml_name)
                if xml_attribute.namespace is not None:
                    cache_data.attribute_namespaces[xml_name] = xml_attribute.namespace

                accessor = self.get_method_by_xml_name(xml_name, scan_class, argument_type)
                self._method_attribute_name_cache[accessor] = xml_name

                if self.cache_mode == CacheMode.READER:
                    cache_data.attribute_accessors[xml_name] = accessor
                else:
                    cache_data.attribute_accessor_set.add(accessor)

                cache_data.element_accessors[xml_name] = accessor
            elif f_annot.get("value"):
                cache_data.value_accessor = self.get_method_by_xml_name(
                    self.get_xml_element_name(VALUE), scan_class, argument_type
                )
                continue
            elif xml_elements is None:
                xml_name = self.get_field_element_name(field)
                cache_data.element_fields[xml_name] = field

                accessor = self.get_method_by_xml_name(xml_name, scan_class, argument_type)
                self._method_element_name_cache[accessor] = xml_name
                cache_data.element_accessors[xml_name] = accessor
            else:
                xml_name = self._scan_mapped_elements(scan_class, field, xml_elements, cache_data)
                cache_data.element_fields[xml_name] = field
                accessor = cache_data.element_accessors[xml_name]

            adapter = f_annot.get("adapter")
            if adapter is not None:
                self._xml_type_adapter_cache[accessor] = adapter

            if "schema_type" in f_annot:
                # Only the types we enumerate get special handling later
                xml_schema_type = XmlSchemaType.from_string(f_annot["schema_type"])
                if xml_schema_type is not None:
                    self._xml_schema_type_cache[accessor] = xml_schema_type

            if xml_attribute is not None:
                continue

            cache_data.prop_order_accessors[self.get_xml_element_name(field.name)] = accessor

            if is_container(field.type):
                self._element_class_cache[xml_name] = self.get_generic_type(field)
            else:
                self._element_class_cache[xml_name] = normalize_type(field.type)

            xml_element = f_annot.get("element")
            if xml_element is not None:
                if xml_element.required:
                    cache_data.required.add(xml_name)
                if xml_element.nillable:
                    cache_data.nillable.add(xml_name)

        see_also = get_xml_annotations(scan_class).get("see_also")
        if see_also:
            self._xml_see_also_cache.add(scan_class)
            for see_also_class in see_also:
                self._register_nested(see_also_class)

        if isclass(scan_class) and issubclass(scan_class, Enum):
            field_annotations = get_xml_field_annotations(scan_class)
            for name, constant in scan_class.__members__.items():
                text = field_annotations.get(name, {}).get("enum_value", name)
                cache_data.enum_values[self.get_xml_element_name(text)] = constant

        self._class_cache_data.setdefault(scan_class, cache_data)

    @staticmethod
    def _is_skippable(field: XmlField, xml_access_type: Optional[XmlAccessType]) -> bool:
        if xml_access_type == XmlAccessType.FIELD:
            return bool(field.annotations.get("transient"))
        return not any(tag in field.annotations for tag in ("element", "attribute", "value", "elements"))

    def _scan_mapped_elements(self, scan_class: type, field: XmlField, xml_elements: Tuple[XmlElement, ...],
                              cache_data: CacheData) -> XmlName:
        this_xml_name = self.get_field_element_name(field)
        mapped_elements: Set[XmlName] = set()

        accessor = self.get_method_by_xml_name(this_xml_name, scan_class, raw_type(field.type))
        self._method_element_name_cache[accessor] = this_xml_name

        for xml_element in xml_elements:
            name = self.get_xml_element_name(xml_element.name)
            element_type = normalize_type(xml_element.type)
            self._element_class_cache[name] = element_type

            cache_data.element_fields[name] = field
            cache_data.element_accessors[name] = accessor

            # Choice alternatives need not be reachable through any member
            if is_schema_bound(element_type):
                self._register_nested(element_type)

            mapped_elements.add(name)
            cache_data.mapped_elements[name] = mapped_elements

        cache_data.choice_groups[field] = mapped_elements
        cache_data.element_accessors[this_xml_name] = accessor
        return this_xml_name

    def get_declared_fields(self, cls: type) -> Tuple[XmlField, ...]:
        fields = self._declared_fields_cache.get(cls)

        if fields is None:
            collected: Dict[str, XmlField] = {}
            for klass in cls.__mro__:
                if not is_schema_bound(klass):
                    continue

                field_annotations = get_xml_field_annotations(klass)
                for name, hint in get_member_hints(klass).items():
                    if name not in collected:
                        collected[name] = XmlField(name, klass, hint, field_annotations.get(name, {}))

            fields = self._declared_fields_cache.setdefault(cls, tuple(collected.values()))

        return fields

    def get_xml_access_type(self, cls: type) -> Optional[XmlAccessType]:
        if cls not in self._xml_access_type_cache:
            self._xml_access_type_cache.setdefault(cls, find_xml_annotation(cls, "accessor_type"))
        return self._xml_access_type_cache[cls]

    def scan_for_namespace(self, cls: type) -> str:
        namespace = self._class_namespace_cache.get(cls)
        if namespace is None:
            namespace = self._class_namespace_cache.setdefault(cls, resolve_namespace(cls))
        return namespace

    # Accessors

    def get_method_by_xml_name(self, xml_name: str, declaring_type: type, argument_type: Any) -> Accessor:
        key = (xml_name, declaring_type, argument_type)
        accessor = self._accessor_cache.get(key)
        if accessor is not None:
            return accessor

        identifier = xml_name_to_identifier(xml_name)

        if self.cache_mode == CacheMode.WRITER or is_container(argument_type):
            if argument_type is bool:
                method_name, kind = f"is_{identifier}", AccessorKind.PREDICATE
            else:
                method_name, kind = f"get_{identifier}", AccessorKind.GETTER
        else:
            method_name, kind = f"set_{identifier}", AccessorKind.SETTER

        for klass in declaring_type.__mro__:
            function = vars(klass).get(method_name)
            if isfunction(function) and self._accepts(function, klass, kind, argument_type):
                accessor = Accessor(xml_name, method_name, kind, klass, function, argument_type)
                return self._accessor_cache.setdefault(key, accessor)

        raise MissingAccessor(xml_name, method_name, declaring_type, argument_type)

    @staticmethod
    def _accepts(function: Callable[..., Any], owner: type, kind: AccessorKind, argument_type: Any) -> bool:
        parameters = _positional_parameters(function)

        if kind != AccessorKind.SETTER:
            return not parameters

        if len(parameters) != 1:
            return False

        hint = _function_hints(function, owner).get(parameters[0].name)
        return hint is None or raw_type(hint) == argument_type

    def _accessor_payload(self, accessor: Accessor) -> Any:
        hints = _function_hints(accessor.function, accessor.owner)
        if accessor.is_getter:
            hint = hints.get("return")
        else:
            hint = hints.get(_positional_parameters(accessor.function)[0].name)

        if hint is None:
            raise MalformedGenericDeclaration(f"{accessor} carries no type annotation to take an element type from.")
        return hint

    def get_generic_type(self, member: Union[XmlField, Accessor]) -> Any:
        """Element type of a container member or accessor, ``object`` when
        it is declared as ``Any``."""
        if isinstance(member, Accessor):
            cache = self._generic_method_type_cache
        else:
            cache = self._generic_field_type_cache

        generic_type = cache.get(member)

        if generic_type is None:
            hint = self._accessor_payload(member) if isinstance(member, Accessor) else member.type
            generic_type = cache.setdefault(member, element_type_of(hint, member))

        return generic_type

    # Names

    def get_xml_element_name(self, name: str) -> XmlName:
        return self._interner.intern(name)

    def get_field_element_name(self, field: XmlField) -> XmlName:
        xml_element = field.annotations.get("element")
        if xml_element is None or not xml_element.name:
            return self.get_xml_element_name(field.name)
        return self.get_xml_element_name(xml_element.name)

    def get_xml_prop_order(self, cls: type) -> Optional[Tuple[XmlName, ...]]:
        prop_order = self._prop_order_cache.get(cls)

        if prop_order is None and "type" in get_xml_annotations(cls):
            # Collected bottom up with every local order reversed, so that
            # reversing the whole at the end puts the furthest ancestor first.
            collected: Dict[XmlName, None] = {}

            for klass in cls.__mro__:
                if klass is object:
                    break
                xml_type = get_xml_annotations(klass).get("type")
                if xml_type is None:
                    continue
                for prop in reversed(xml_type.prop_order):
                    collected.setdefault(self.get_xml_element_name(prop), None)

            prop_order = self._prop_order_cache.setdefault(cls, tuple(reversed(tuple(collected))))

        return prop_order

    # Object factories

    def _resolve_object_factory(self, scan_class: type, namespace: str) -> None:
        if not namespace or namespace in self._namespace_object_factory_cache:
            return

        try:
            object_factory = self._factory_resolver(scan_class, namespace)
            if object_factory is None:
                raise LookupError(f"no object factory next to {scan_class.__module__}")
            self.scan_object_factory(object_factory, False)
        except Exception as e:
            logging.warning(f"Failed to Locate Object Factory for Namespace = {namespace} ({e})")
            return

        self._namespace_object_factory_cache.setdefault(namespace, object_factory)

    def register_object_factory(self, object_factory: Any, namespace: str) -> None:
        """Bind a user supplied factory to ``namespace``. Its ``create``
        methods are called once to discover the classes they produce."""
        if self.cache_mode != CacheMode.READER:
            raise XmlBindingException("Object factories are only used when reading.")

        self._namespace_object_factory_cache[namespace] = object_factory
        self.scan_object_factory(object_factory, True)

    def scan_object_factory(self, object_factory: Any, custom_factory: bool) -> None:
        factory_class = type(object_factory)

        for name, function in self.get_declared_methods(factory_class).items():
            producer = getattr(object_factory, name)
            object_class = _function_hints(function, factory_class).get("return")
            if object_class is not None:
                object_class = normalize_type(object_class)

            if custom_factory and "create" in name:
                try:
                    custom_class = type(producer())
                    if object_class is None:
                        object_class = custom_class
                    if not self.is_registered(custom_class):
                        self._register_nested(custom_class)
                except Exception:
                    logging.exception(f"Error Scanning Custom Object Factory <{factory_class}>!")

            if object_class is None:
                continue

            self._class_object_factory_cache[object_class] = object_factory
            self._object_factory_cache[object_class] = producer

    @staticmethod
    def get_declared_methods(cls: type) -> Dict[str, Callable[..., Any]]:
        """Public methods callable without arguments, most derived first."""
        methods: Dict[str, Callable[..., Any]] = {}

        for klass in cls.__mro__:
            if klass is object:
                break
            for name, function in vars(klass).items():
                if name.startswith("_") or name in methods or not isfunction(function):
                    continue
                if not _positional_parameters(function):
                    methods[name] = function

        return methods

    # Lookups

    def get_cache_data(self, element_class: type) -> Optional[CacheData]:
        return self._class_cache_data.get(element_class)

    def get_namespace(self, cls: type) -> Optional[str]:
        return self._class_namespace_cache.get(cls)

    def get_required(self, cls: type) -> Optional[Set[XmlName]]:
        cache_data = self._class_cache_data.get(cls)
        return None if cache_data is None else cache_data.required

    def get_element_class(self, name: str) -> Optional[Any]:
        return self._element_class_cache.get(name)

    def get_element_name(self, cls: type) -> Optional[str]:
        if self._class_element_name_cache is None:
            raise XmlBindingException("Element names of classes are only cached when writing.")
        return self._class_element_name_cache.get(cls)

    def get_attribute_name(self, accessor: Accessor) -> Optional[XmlName]:
        return self._method_attribute_name_cache.get(accessor)

    def get_accessor_element_name(self, accessor: Accessor) -> Optional[XmlName]:
        return self._method_element_name_cache.get(accessor)

    def get_type_adapter(self, accessor: Accessor) -> Optional[Type[XmlAdapter]]:
        return self._xml_type_adapter_cache.get(accessor)

    def get_schema_type(self, accessor: Accessor) -> Optional[XmlSchemaType]:
        return self._xml_schema_type_cache.get(accessor)

    def has_see_also(self, cls: type) -> bool:
        return cls in self._xml_see_also_cache

    def get_object_factory(self, cls: Any) -> Optional[Any]:
        if self._class_object_factory_cache is None:
            raise XmlBindingException("Object factories are only used when reading.")
        return self._class_object_factory_cache.get(cls)

    def get_object_factory_method(self, cls: Any) -> Optional[Callable[[], Any]]:
        if self._object_factory_cache is None:
            raise XmlBindingException("Object factories are only used when reading.")
        return self._object_factory_cache.get(cls)

    def get_namespace_object_factory(self, namespace: str) -> Optional[Any]:
        if self._namespace_object_factory_cache is None:
            raise XmlBindingException("Object factories are only used when reading.")
        return self._namespace_object_factory_cache.get(namespace)

    def is_instance_of_basic_type(self, obj_class: Any) -> bool:
        basic_instance = self._basic_instance_cache.get(obj_class)

        if basic_instance is None:
            basic_instance = self._basic_instance_cache.setdefault(
                obj_class,
                obj_class is object or InvocationClassType.value_of(obj_class) != InvocationClassType.OBJECT
            )

        return basic_instance

    @property
    def registered_classes(self) -> Tuple[type, ...]:
        with self._lock:
            return tuple(self._registered_classes)

    def __repr__(self) -> str:
        return f"Caches({_type_repr(self.root_class)}, {self.cache_mode.name})"


__all__ = ["Caches", "CacheData", "FactoryResolver"]
