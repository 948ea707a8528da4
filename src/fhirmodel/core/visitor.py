"""Generic tree walk over model instances.

One traversal engine serves every model type; it is driven by the element
metadata in :mod:`fhirmodel.core.model_support`, so types need no
per-type ``accept`` code. The protocol for each node is::

    pre_visit(node)                      -> False skips the node entirely
    visit_start(name, index, node)
    visit(name, index, node)             -> False skips the children
        children, in declaration order
    visit_end(name, index, node)
    post_visit(node)

Non-empty repeating elements are bracketed by ``visit_start_list`` and
``visit_end_list``. Raw scalars (``id`` strings and primitive values) are
reported through ``visit_value``.
"""

from typing import Any, List, Sequence, Type, TypeVar

from fhirmodel.core import model_support
from fhirmodel.core.model import FHIRModel

M = TypeVar("M", bound=FHIRModel)


class Visitor:
    """Traversal callbacks.

    The base implementation visits everything and does nothing else.
    """

    def pre_visit(self, node: FHIRModel) -> bool:
        """Return False to skip ``node`` and its subtree."""
        return True

    def visit_start(
        self, element_name: str, element_index: int, node: FHIRModel, choice: bool = False
    ) -> None:
        """Called on entering a node."""

    def visit(
        self, element_name: str, element_index: int, node: FHIRModel, choice: bool = False
    ) -> bool:
        """Return False to skip the children of ``node``."""
        return True

    def visit_end(
        self, element_name: str, element_index: int, node: FHIRModel, choice: bool = False
    ) -> None:
        """Called on leaving a node, whether or not its children were visited."""

    def post_visit(self, node: FHIRModel) -> None:
        """Called after ``visit_end``."""

    def visit_start_list(
        self, element_name: str, nodes: Sequence[Any], item_type: type
    ) -> None:
        """Called before the items of a non-empty repeating element."""

    def visit_end_list(self, element_name: str, nodes: Sequence[Any], item_type: type) -> None:
        """Called after the items of a non-empty repeating element."""

    def visit_value(self, element_name: str, value: Any) -> None:
        """Called for a raw scalar such as an ``id`` or a primitive's value."""


class DefaultVisitor(Visitor):
    """Visitor with per-type hooks.

    ``visit`` dispatches to a ``visit_<TypeName>`` method for the most
    specific model class of the node that defines one, falling back to
    :meth:`default_action`. The hook name uses the FHIR type name with dots
    replaced by underscores, so a nested backbone element is handled by
    e.g. ``visit_PlanDefinition_Action_RelatedAction``. Hooks take
    ``(element_name, element_index, node)`` and return whether to visit the
    node's children.
    """

    def __init__(self, visit_children: bool = True):
        """Initialize the visitor.

        Args:
            visit_children: Return value of the fallback action
        """
        self.visit_children = visit_children

    def visit(
        self, element_name: str, element_index: int, node: FHIRModel, choice: bool = False
    ) -> bool:
        for cls in type(node).__mro__:
            if not (isinstance(cls, type) and issubclass(cls, FHIRModel)):
                continue
            hook_name = "visit_" + cls.fhir_type_name().replace(".", "_")
            hook = getattr(self, hook_name, None)
            if hook is not None:
                return hook(element_name, element_index, node)
        return self.default_action(element_name, element_index, node)

    def default_action(self, element_name: str, element_index: int, node: FHIRModel) -> bool:
        """Fallback for node types without a hook."""
        return self.visit_children


class CollectingVisitor(DefaultVisitor):
    """Collects every node of a given type, in traversal order."""

    def __init__(self, type_: Type[M]):
        """Initialize with the type to collect (subclasses included)."""
        super().__init__(visit_children=True)
        self.type = type_
        self.result: List[M] = []

    def default_action(self, element_name: str, element_index: int, node: FHIRModel) -> bool:
        if isinstance(node, self.type):
            self.result.append(node)
        return True

    def get_result(self) -> List[M]:
        """Return the collected nodes."""
        return list(self.result)


class PathAwareVisitor(Visitor):
    """Visitor that tracks the FHIRPath-style location of the current node.

    Paths look like ``PlanDefinition.action[0].relatedAction[0].offset``.
    Subclasses override :meth:`do_visit_start` / :meth:`do_visit_end`.
    """

    def __init__(self) -> None:
        """Initialize an empty path stack."""
        self._path: List[str] = []

    def get_path(self) -> str:
        """Return the path of the current node."""
        return ".".join(self._path)

    def visit_start(
        self, element_name: str, element_index: int, node: FHIRModel, choice: bool = False
    ) -> None:
        segment = element_name if element_index == -1 else f"{element_name}[{element_index}]"
        self._path.append(segment)
        self.do_visit_start(element_name, element_index, node)

    def visit_end(
        self, element_name: str, element_index: int, node: FHIRModel, choice: bool = False
    ) -> None:
        self.do_visit_end(element_name, element_index, node)
        self._path.pop()

    def do_visit_start(self, element_name: str, element_index: int, node: FHIRModel) -> None:
        """Hook run after the node's path segment is pushed."""

    def do_visit_end(self, element_name: str, element_index: int, node: FHIRModel) -> None:
        """Hook run before the node's path segment is popped."""


def accept(
    node: FHIRModel,
    element_name: str,
    visitor: Visitor,
    element_index: int = -1,
    choice: bool = False,
) -> None:
    """Drive the visitor protocol over ``node`` and its subtree.

    Args:
        node: Root of the walk
        element_name: Name reported for ``node``
        visitor: Callback receiver
        element_index: Position of ``node`` within its parent list, or -1
        choice: True if ``node`` fills a choice element
    """
    if not visitor.pre_visit(node):
        return
    visitor.visit_start(element_name, element_index, node, choice)
    if visitor.visit(element_name, element_index, node, choice):
        for info in model_support.get_element_info(type(node)):
            value = getattr(node, info.attr)
            if info.repeating:
                accept_list(value, info.name, visitor, info.type)
            elif isinstance(value, FHIRModel):
                accept(value, info.name, visitor, choice=info.is_choice)
            elif value is not None:
                visitor.visit_value(info.name, value)
    visitor.visit_end(element_name, element_index, node, choice)
    visitor.post_visit(node)


def accept_list(
    nodes: Sequence[FHIRModel], element_name: str, visitor: Visitor, item_type: type
) -> None:
    """Walk the items of a repeating element in order."""
    if not nodes:
        return
    visitor.visit_start_list(element_name, nodes, item_type)
    for index, node in enumerate(nodes):
        accept(node, element_name, visitor, index)
    visitor.visit_end_list(element_name, nodes, item_type)
