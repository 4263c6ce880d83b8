"""Components: definitions, instances and the registry that mounts them."""

from petal.component.behavior import Behavior
from petal.component.boundary import RenderBoundary
from petal.component.definition import TemplateDefinition
from petal.component.host import HostElement
from petal.component.lifecycle import Component, ComponentState
from petal.component.registry import ComponentRegistry

__all__ = [
    "Behavior",
    "Component",
    "ComponentRegistry",
    "ComponentState",
    "HostElement",
    "RenderBoundary",
    "TemplateDefinition",
]
