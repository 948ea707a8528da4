"""Test the generic tree walk."""

from decimal import Decimal

import pytest

from fhirmodel.core.visitor import CollectingVisitor, DefaultVisitor, PathAwareVisitor, Visitor
from fhirmodel.resources.plan_definition import PlanDefinition
from fhirmodel.types.datatypes import UCUM, Duration, Quantity

pytestmark = pytest.mark.visitor

RelatedAction = PlanDefinition.Action.RelatedAction


class RecordingVisitor(Visitor):
    """Records every callback as a tuple."""

    def __init__(self):
        self.events = []

    def visit_start(self, element_name, element_index, node, choice=False):
        self.events.append(("start", element_name, element_index, choice))

    def visit_end(self, element_name, element_index, node, choice=False):
        self.events.append(("end", element_name, element_index))

    def visit_start_list(self, element_name, nodes, item_type):
        self.events.append(("start_list", element_name, len(nodes), item_type))

    def visit_end_list(self, element_name, nodes, item_type):
        self.events.append(("end_list", element_name))

    def visit_value(self, element_name, value):
        self.events.append(("value", element_name, value))

    def starts(self):
        return [event[1] for event in self.events if event[0] == "start"]


class TestWalkOrder:
    """Test the order of visitor callbacks."""

    def test_children_in_declaration_order(self, related_action):
        """Test that elements are visited in declaration order, depth first."""
        visitor = RecordingVisitor()

        related_action.accept(visitor)

        assert visitor.starts() == [
            "PlanDefinition.Action.RelatedAction",
            "actionId",
            "relationship",
            "offset",
            "value",
            "unit",
            "system",
            "code",
        ]

    def test_scalar_values_are_reported(self, related_action):
        """Test that raw primitive values are passed to visit_value."""
        visitor = RecordingVisitor()

        related_action.accept(visitor)

        values = [event[2] for event in visitor.events if event[0] == "value"]
        assert values == ["step-1", "after", Decimal("30"), "min", UCUM, "min"]

    def test_order_is_stable(self, plan_definition):
        """Test that two walks of the same tree produce the same events."""
        first = RecordingVisitor()
        second = RecordingVisitor()

        plan_definition.accept(first)
        plan_definition.accept(second)

        assert first.events == second.events

    def test_starts_and_ends_are_balanced(self, plan_definition):
        """Test that every visit_start has a matching visit_end."""
        visitor = RecordingVisitor()

        plan_definition.accept(visitor)

        depth = 0
        for event in visitor.events:
            if event[0] == "start":
                depth += 1
            elif event[0] == "end":
                depth -= 1
            assert depth >= 0
        assert depth == 0
        assert visitor.events[-1] == ("end", "PlanDefinition", -1)

    def test_lists_are_bracketed_and_indexed(self, plan_definition):
        """Test list callbacks and item indexes for repeating elements."""
        visitor = RecordingVisitor()

        plan_definition.accept(visitor)

        assert ("start_list", "action", 2, PlanDefinition.Action) in visitor.events
        assert ("start", "action", 0, False) in visitor.events
        assert ("start", "action", 1, False) in visitor.events
        start = visitor.events.index(("start_list", "action", 2, PlanDefinition.Action))
        end = visitor.events.index(("end_list", "action"))
        assert start < end

    def test_choice_flag(self, related_action):
        """Test that choice elements are reported as such."""
        visitor = RecordingVisitor()

        related_action.accept(visitor)

        assert ("start", "offset", -1, True) in visitor.events
        assert ("start", "relationship", -1, False) in visitor.events

    def test_custom_root_name(self, thirty_minutes):
        """Test the element name reported for the root."""
        visitor = RecordingVisitor()

        thirty_minutes.accept(visitor, "offset")

        assert visitor.events[0] == ("start", "offset", -1, False)


class TestWalkControl:
    """Test skipping parts of the tree."""

    def test_pre_visit_false_skips_node(self, related_action):
        """Test that pre_visit returning False skips the whole subtree."""

        class SkipDurations(RecordingVisitor):
            def pre_visit(self, node):
                return not isinstance(node, Duration)

        visitor = SkipDurations()

        related_action.accept(visitor)

        assert "offset" not in visitor.starts()
        assert "unit" not in visitor.starts()

    def test_visit_false_skips_children_only(self, related_action):
        """Test that visit returning False still calls visit_end."""

        class NoChildren(RecordingVisitor):
            def visit(self, element_name, element_index, node, choice=False):
                return False

        visitor = NoChildren()

        related_action.accept(visitor)

        assert visitor.events == [
            ("start", "PlanDefinition.Action.RelatedAction", -1, False),
            ("end", "PlanDefinition.Action.RelatedAction", -1),
        ]

    def test_post_visit_follows_visit_end(self, thirty_minutes):
        """Test that post_visit runs once per node, after visit_end."""

        class PostRecorder(RecordingVisitor):
            def post_visit(self, node):
                self.events.append(("post", type(node).__name__))

        visitor = PostRecorder()

        thirty_minutes.accept(visitor)

        assert visitor.events[-2:] == [("end", "Duration", -1), ("post", "Duration")]


class TestDefaultVisitor:
    """Test per-type dispatch."""

    def test_dispatch_by_type_name(self, plan_definition):
        """Test that hooks are found by FHIR type name, dots as underscores."""

        class Hooks(DefaultVisitor):
            def __init__(self):
                super().__init__()
                self.related = []

            def visit_PlanDefinition_Action_RelatedAction(self, element_name, element_index, node):
                self.related.append(node.action_id.value)
                return True

        visitor = Hooks()

        plan_definition.accept(visitor)

        assert visitor.related == ["step-1"]

    def test_dispatch_falls_back_along_hierarchy(self, related_action):
        """Test that a Duration is handled by a Quantity hook."""

        class QuantityHook(DefaultVisitor):
            def __init__(self):
                super().__init__()
                self.seen = []

            def visit_Quantity(self, element_name, element_index, node):
                self.seen.append((element_name, type(node)))
                return False

        visitor = QuantityHook()

        related_action.accept(visitor)

        assert visitor.seen == [("offset", Duration)]

    def test_default_action_controls_children(self, related_action):
        """Test that visit_children=False stops at the root."""

        class Counter(DefaultVisitor):
            def __init__(self):
                super().__init__(visit_children=False)
                self.count = 0

            def visit_start(self, element_name, element_index, node, choice=False):
                self.count += 1

        visitor = Counter()

        related_action.accept(visitor)

        assert visitor.count == 1


class TestCollectingVisitor:
    """Test collecting nodes by type."""

    def test_collects_in_traversal_order(self, plan_definition):
        """Test collecting backbone elements."""
        visitor = CollectingVisitor(PlanDefinition.Action)

        plan_definition.accept(visitor)

        titles = [action.title.value for action in visitor.get_result()]
        assert titles == ["Draw blood", "Measure glucose"]

    def test_collects_subclasses(self, plan_definition, thirty_minutes):
        """Test that subclasses of the requested type are collected."""
        visitor = CollectingVisitor(Quantity)

        plan_definition.accept(visitor)

        assert visitor.get_result() == [thirty_minutes]


class TestPathAwareVisitor:
    """Test location tracking."""

    def test_paths(self, plan_definition):
        """Test FHIRPath-style paths with list indexes."""

        class Paths(PathAwareVisitor):
            def __init__(self):
                super().__init__()
                self.paths = {}

            def do_visit_start(self, element_name, element_index, node):
                self.paths.setdefault(type(node), []).append(self.get_path())

        visitor = Paths()

        plan_definition.accept(visitor)

        assert visitor.paths[PlanDefinition] == ["PlanDefinition"]
        assert visitor.paths[PlanDefinition.Action] == [
            "PlanDefinition.action[0]",
            "PlanDefinition.action[1]",
        ]
        assert visitor.paths[Duration] == ["PlanDefinition.action[1].relatedAction[0].offset"]
        assert visitor.get_path() == ""
