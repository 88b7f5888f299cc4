import pytest
from dataclasses import dataclass

from xmlbind import XmlObject, XmlEnum, XmlAccessType, AnnotationException
from xmlbind.annotations import element, value, elements, schema_type, accessor_type, generate_accessors, \
    xml_type, root_element, see_also
from xmlbind._support import XmlElement, XmlRootElement, XmlType
from xmlbind._type_normalize import get_xml_annotations, get_xml_field_annotations, xml_name_to_identifier
import support_modules.test_classes as tc


def test_class_annotations():
    annotations = get_xml_annotations(tc.Leaf)
    assert annotations["root_element"] == XmlRootElement(name="leaf")
    assert annotations["type"] == XmlType(name="leaf", prop_order=("e",))
    assert get_xml_annotations(tc.Base)["accessor_type"] == XmlAccessType.FIELD
    assert "accessor_type" not in get_xml_annotations(tc.Leaf)
    assert get_xml_annotations(tc.Fleet)["see_also"] == (tc.Car, tc.Truck)


def test_field_annotations():
    f_annot = get_xml_field_annotations(tc.Person)
    assert f_annot["id"]["attribute"].required
    assert f_annot["nicknames"]["element"].name == "nickname"
    assert f_annot["born"]["schema_type"] == "date"
    assert f_annot["name"]["adapter"] is tc.UpperCaseAdapter
    assert "scratch" not in f_annot
    assert get_xml_field_annotations(tc.Drawing)["shape"]["elements"] == (
        XmlElement(name="circle", type=tc.Circle), XmlElement(name="square", type=tc.Square)
    )


def test_annotations_are_not_inherited_into_subclass_dict():
    assert get_xml_field_annotations(tc.SpecialCounter) == {}
    assert "count" in get_xml_field_annotations(tc.Counter)


def test_annotate_outside_class():
    with pytest.raises(AnnotationException):
        element("name")


def test_annotate_undefined_member():
    with pytest.raises(AnnotationException):
        class Undefined(XmlObject):
            a: int
            element("b")

    # The class scope is closed again
    with pytest.raises(AnnotationException):
        element("a")


def test_two_value_members():
    with pytest.raises(AnnotationException):
        class TwoValues(XmlObject):
            a: int
            b: int
            value("a")
            value("b")


def test_unknown_schema_type():
    with pytest.raises(AnnotationException):
        class BadSchemaType(XmlObject):
            a: str
            schema_type("a", "gYear")


def test_empty_choice():
    with pytest.raises(AnnotationException):
        class EmptyChoice(XmlObject):
            a: str
            elements("a", {})


def test_bad_accessor_type():
    with pytest.raises(AnnotationException):
        accessor_type("FIELD")


def test_enum_annotation_on_unknown_constant():
    with pytest.raises(AnnotationException):
        class BadEnum(XmlEnum):
            A = 1
            element("B")


def test_keyword_arguments():
    class Keyword(XmlObject, typename="kw", namespace="urn:kw"):
        pass

    assert get_xml_annotations(Keyword)["type"] == XmlType(name="kw", namespace="urn:kw")


def test_enum_keyword_arguments():
    class Kind(XmlEnum, typename="kind", namespace="urn:kind"):
        A = 1
        B = 2

    assert get_xml_annotations(Kind)["type"] == XmlType(name="kind", namespace="urn:kind")
    assert list(Kind.__members__) == ["A", "B"]


def test_class_repr():
    assert repr(XmlObject) == "XmlObject"
    assert repr(tc.Address) == "Address(XmlObject, typename='address')"
    assert repr(tc.Node) == "Node(XmlObject)"
    assert repr(tc.Color) == "Color(XmlEnum)"


def test_decorators_return_class():
    @see_also(tc.Car)
    @root_element()
    @xml_type()
    class Decorated(XmlObject):
        pass

    assert isinstance(Decorated, type)
    assert set(get_xml_annotations(Decorated)) == {"see_also", "root_element", "type"}


def test_generated_accessors():
    person = tc.Person(id="p1", active=True, nicknames=["Bo"])
    assert person.get_id() == "p1"
    assert person.is_active() is True
    assert person.get_nickname() == ["Bo"]
    person.set_nickname(["Al"])
    assert person.nicknames == ["Al"]
    price = tc.Price()
    price.set_value(3)
    assert price.amount == 3
    assert price.get_value() == 3


def test_generated_accessors_keep_existing_methods():
    @generate_accessors
    @dataclass
    class Custom(XmlObject):
        label: str = ""

        def get_label(self) -> str:
            return "fixed"

    custom = Custom(label="x")
    assert custom.get_label() == "fixed"
    custom.set_label("y")
    assert custom.label == "y"


def test_generated_accessor_annotations():
    assert tc.Person.get_nickname.__annotations__["return"] == tc.List[str]
    assert tc.Person.set_age.__annotations__["value"] == tc.xt.int32
    # Forward reference to a class defined later in the module
    assert tc.Employee.get_department.__annotations__ == {}


@pytest.mark.parametrize("xml_name,identifier", [
    ("name", "name"),
    ("firstName", "first_name"),
    ("HTTPServer", "http_server"),
    ("first-name", "first_name"),
    ("giftWrap", "gift_wrap"),
    ("value", "value"),
])
def test_xml_name_to_identifier(xml_name, identifier):
    assert xml_name_to_identifier(xml_name) == identifier
