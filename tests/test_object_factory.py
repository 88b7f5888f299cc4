import pytest
import logging

from xmlbind import Caches, CacheMode, XmlBindingException, XmlObject
from xmlbind.annotations import root_element
import support_modules.test_classes as tc
import support_modules.shop as shop
from support_modules.shop.model import Item, Order, SpecialItem


class SpecialFactory:
    def create_item(self):
        return SpecialItem()


class FailingFactory:
    def create_item(self) -> Item:
        raise RuntimeError("out of stock")


def test_factory_found_next_to_module(reader_caches):
    caches = reader_caches(Order)

    factory = caches.get_namespace_object_factory("urn:xmlbind:shop")
    assert isinstance(factory, shop.ObjectFactory)
    assert caches.get_object_factory(Order) is factory
    assert caches.get_object_factory(Item) is factory
    assert isinstance(caches.get_object_factory_method(Item)(), Item)
    assert isinstance(caches.get_object_factory_method(Order)(), Order)


def test_factory_missing_logs_warning(reader_caches, caplog):
    with caplog.at_level(logging.WARNING):
        caches = reader_caches(tc.Person)

    assert "Failed to Locate Object Factory for Namespace = urn:xmlbind:test" in caplog.text
    assert caches.get_namespace_object_factory("urn:xmlbind:test") is None
    assert caches.get_cache_data(tc.Person) is not None


def test_factory_not_looked_up_for_empty_namespace(mocker):
    resolver = mocker.Mock(return_value=None)

    @root_element(name="plain")
    class Plain(XmlObject):
        pass

    caches = Caches(Plain, CacheMode.READER, factory_resolver=resolver)
    caches.register()

    resolver.assert_not_called()


def test_factory_resolver_option(mocker):
    resolver = mocker.Mock(return_value=shop.ObjectFactory())

    caches = Caches(tc.Node, CacheMode.READER, factory_resolver=resolver)
    caches.register()

    resolver.assert_called_once_with(tc.Node, "urn:xmlbind:test")
    assert caches.get_namespace_object_factory("urn:xmlbind:test") is resolver.return_value
    assert caches.get_object_factory(Item) is resolver.return_value


def test_factory_resolver_error_is_logged(mocker, caplog):
    resolver = mocker.Mock(side_effect=ImportError("no factory module"))

    with caplog.at_level(logging.WARNING):
        caches = Caches(tc.Node, CacheMode.READER, factory_resolver=resolver)
        caches.register()

    assert "no factory module" in caplog.text
    assert caches.get_namespace_object_factory("urn:xmlbind:test") is None


def test_custom_factory_takes_precedence():
    custom = SpecialFactory()
    caches = Caches(Order, CacheMode.READER, object_factories={"urn:xmlbind:shop": custom})

    # Produced classes are registered while the factory is scanned
    assert caches.is_registered(SpecialItem)
    assert caches.get_cache_data(SpecialItem) is not None
    assert caches.get_object_factory(SpecialItem) is custom
    assert isinstance(caches.get_object_factory_method(SpecialItem)(), SpecialItem)

    caches.register()
    assert caches.get_namespace_object_factory("urn:xmlbind:shop") is custom
    assert caches.get_object_factory(Order) is None


def test_custom_factory_registered_later():
    caches = Caches(Order, CacheMode.READER)
    custom = SpecialFactory()
    caches.register_object_factory(custom, "urn:other")

    assert caches.get_namespace_object_factory("urn:other") is custom
    assert caches.get_object_factory(SpecialItem) is custom


def test_custom_factory_error_is_logged(caplog):
    failing = FailingFactory()
    with caplog.at_level(logging.ERROR):
        caches = Caches(Order, CacheMode.READER, object_factories={"urn:xmlbind:shop": failing})

    assert "Error Scanning Custom Object Factory" in caplog.text
    # The return annotation still names what it produces
    assert caches.get_object_factory(Item) is failing


def test_factories_are_reader_only():
    caches = Caches(Order, CacheMode.WRITER)
    caches.register()

    with pytest.raises(XmlBindingException):
        caches.get_object_factory(Order)
    with pytest.raises(XmlBindingException):
        caches.get_object_factory_method(Order)
    with pytest.raises(XmlBindingException):
        caches.get_namespace_object_factory("urn:xmlbind:shop")
    with pytest.raises(XmlBindingException):
        caches.register_object_factory(SpecialFactory(), "urn:xmlbind:shop")
    with pytest.raises(XmlBindingException):
        Caches(Order, CacheMode.WRITER, object_factories={"urn:xmlbind:shop": SpecialFactory()})


def test_element_names_are_writer_only(reader_caches):
    caches = reader_caches(Order)
    with pytest.raises(XmlBindingException):
        caches.get_element_name(Order)


def test_declared_methods():
    methods = Caches.get_declared_methods(shop.ObjectFactory)
    assert set(methods) == {"create_order", "create_item"}
