import pytest

from xmlbind import Caches, CacheMode, XmlObject
from xmlbind.annotations import root_element, xml_type
from xmlbind._type_normalize import get_module_namespace, get_type_local_name
import support_modules.test_classes as tc
import support_modules.shop as shop


@root_element(name="plain")
class Plain(XmlObject):
    pass


@root_element(name="rooted", namespace="urn:root")
class Rooted(XmlObject):
    pass


@root_element(name="both", namespace="urn:root")
@xml_type(name="bothType", namespace="urn:type")
class Both(XmlObject):
    pass


class Keyword(XmlObject, typename="keywordType", namespace="urn:keyword"):
    pass


@pytest.mark.parametrize("cls,namespace", [
    (tc.Person, "urn:xmlbind:test"),
    (shop.Order, "urn:xmlbind:shop"),
    (Plain, ""),
    (Rooted, "urn:root"),
    (Both, "urn:type"),
    (Keyword, "urn:keyword"),
])
def test_scan_for_namespace(cls, namespace):
    caches = Caches(tc.Person, CacheMode.WRITER)
    assert caches.scan_for_namespace(cls) == namespace
    assert caches.get_namespace(cls) == namespace


def test_root_namespace():
    assert Caches(tc.Person, CacheMode.WRITER).root_namespace == "urn:xmlbind:test"
    assert Caches(shop.Order, CacheMode.WRITER).root_namespace == "urn:xmlbind:shop"
    assert Caches(Plain, CacheMode.WRITER).root_namespace == ""


def test_namespace_unknown_before_scan():
    caches = Caches(tc.Person, CacheMode.WRITER)
    assert caches.get_namespace(tc.Address) is None
    caches.register()
    assert caches.get_namespace(tc.Address) == "urn:xmlbind:test"


def test_module_namespace_from_package():
    assert get_module_namespace("support_modules.shop.model") == "urn:xmlbind:shop"
    assert get_module_namespace("support_modules") is None


@pytest.mark.parametrize("cls,name", [
    (Plain, "plain"),
    (Both, "bothType"),
    (Keyword, "keywordType"),
    (tc.Person, "personType"),
    (tc.Counter, "counter"),
])
def test_type_local_name(cls, name):
    assert get_type_local_name(cls) == name


def test_root_element_name_default():
    @root_element()
    class ShoppingCart(XmlObject):
        pass

    assert Caches(ShoppingCart, CacheMode.WRITER).root_element_name == "shoppingCart"
