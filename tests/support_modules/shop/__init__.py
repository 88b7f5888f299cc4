from .model import Item, Order, SpecialItem


__xml_namespace__ = "urn:xmlbind:shop"


class ObjectFactory:
    def create_order(self) -> Order:
        return Order()

    def create_item(self) -> Item:
        return Item()
