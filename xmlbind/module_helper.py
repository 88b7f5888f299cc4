from inspect import isclass
from typing import Any, Optional
import sys


OBJECT_FACTORY_NAME = "ObjectFactory"


def module_object_factory(cls: type, namespace: str) -> Optional[Any]:
    """Instantiate the ``ObjectFactory`` class that lives next to ``cls``:
    in its own module or in the closest enclosing package defining one."""
    module_name = cls.__module__

    while module_name:
        module = sys.modules.get(module_name)
        factory_class = getattr(module, OBJECT_FACTORY_NAME, None)
        if isclass(factory_class):
            return factory_class()
        module_name = module_name.rpartition(".")[0]

    return None
