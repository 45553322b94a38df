"""Widget configuration objects -> element trees.

A config such as ``{ xtype: 'button', text: 'Go', handler: 'onGo' }`` is
looked up in the capability table, its properties are run through the
transforms of the tag's chain (most general first) and its ``items`` become
child elements. Complex literal values are pulled out into local bindings so
the markup stays readable.
"""

from __future__ import annotations

import logging
import re
from typing import Callable, Optional

from tree_sitter import Node

from extjs2react.ast.nodes import (
    boolean_value,
    elements,
    get_property,
    is_array,
    is_boolean,
    is_object,
    is_string,
    is_ternary,
    node_text,
    properties,
    property_name,
    property_value,
    string_value,
    unwrap,
    walk,
)
from extjs2react.diagnostics import Diagnostics
from extjs2react.elements.capabilities import CapabilityTable, ResolvedCapability
from extjs2react.elements.printer import print_jsx
from extjs2react.elements.tree import (
    Attribute,
    AttributeKind,
    Child,
    Conditional,
    ElementNode,
    Expression,
    Text,
)
from extjs2react.errors import TemplateSyntaxError
from extjs2react.naming import NamingContext
from extjs2react.template.compiler import TemplateCompiler
from extjs2react.util import code, dedent_fragment

log = logging.getLogger(__name__)

EXTRACT_RE = re.compile(r"<[^>]+>|,|\.|\?")
PROP_NAMES = {"cls": "className"}
SKIPPED_PROPS = ("xtype", "items")
IGNORED_LISTENER_KEYS = ("scope", "element")
TEMPLATE_PROPS = ("tpl", "itemTpl")
BASE_CAPABILITY = "component"


def should_extract(value: Node) -> bool:
    """True when a string literal anywhere in value looks like markup, a path or a list."""
    return any(
        node.type == "string" and EXTRACT_RE.search(string_value(node))
        for node in walk(value)
    )


class ElementCompiler:
    """Compiles the declarative parts of one class.

    Args:
        capabilities: Capability table.
        resolve_widget: xtype -> import name of a registered ``widget.<xtype>`` class.
        naming: Capitalization of listener names.
        diagnostics: Receives unrecognized tag and property tallies.
        templates: Compiles extracted ``tpl`` / ``itemTpl`` bindings.
    """

    def __init__(
        self,
        capabilities: CapabilityTable,
        resolve_widget: Optional[Callable[[str], Optional[str]]] = None,
        naming: Optional[NamingContext] = None,
        diagnostics: Optional[Diagnostics] = None,
        templates: Optional[TemplateCompiler] = None,
    ) -> None:
        self.capabilities = capabilities
        self.resolve_widget = resolve_widget or (lambda tag: None)
        self.naming = naming or NamingContext()
        self.diagnostics = diagnostics or Diagnostics()
        self.templates = templates or TemplateCompiler()

        self.bindings: dict[str, tuple[str, Node]] = {}
        self.libraries: list[str] = []
        self.components: list[str] = []
        self.listeners: list[str] = []

    # Elements

    def compile(self, config: Node, xtype: Optional[Node] = None) -> Optional[Child]:
        """Element for one widget config object, or None when its tag is unknown."""
        config = unwrap(config)
        if not is_object(config):
            return None

        xtype = xtype if xtype is not None else get_property(config, "xtype")
        if xtype is not None and is_ternary(unwrap(xtype)):
            return self._conditional(config, unwrap(xtype))

        tag = string_value(unwrap(xtype)) if xtype is not None and is_string(unwrap(xtype)) else None
        capability = self._capability(tag)
        if capability is None:
            self.diagnostics.tag_unrecognized(tag or "(none)")
            log.debug(f"Unrecognized tag {tag}; keeping the config as is")
            return None

        element = ElementNode(tag=capability.type, text_capable=capability.text_capable)
        icon = self.compile_props(element, properties(config, exclude=list(SKIPPED_PROPS)), capability)
        self._add_items(element, get_property(config, "items"))

        if icon and not element.children and capability.icon_type:
            element.tag = capability.icon_type
        if capability.tag in self.capabilities and not capability.type_override:
            self._use_component(element.tag)
        return element

    def compile_items(self, items: Optional[Node]) -> Optional[list[Child]]:
        """Child elements of an ``items`` list or single item config.

        None when items is any other expression or one of the items has no
        element; whatever compiling the earlier items recorded is undone.
        """
        if items is None:
            return []
        value = unwrap(items)
        if is_object(value):
            entries = [value]
        elif is_array(value):
            entries = elements(value)
        else:
            return None

        saved = (dict(self.bindings), list(self.libraries), list(self.components), list(self.listeners))
        children = []
        for item in entries:
            child = self.compile(item)
            if child is None:
                self.bindings, self.libraries, self.components, self.listeners = saved
                return None
            children.append(child)
        return children

    def _add_items(self, element: ElementNode, items: Optional[Node]) -> None:
        if items is None:
            return
        children = self.compile_items(items)
        if children is None:
            log.debug(f"Keeping the items of {element.tag} as is")
            element.set_attribute(self._attribute("items", items))
            return
        element.children += children

    def compile_root(self, tag: str, members: list[Node], items: Optional[Node]) -> ElementNode:
        """Root element of a component's render function.

        The element is tagged with the parent component, receives the given
        config members as attributes and passes the component's own props on.
        """
        root = ElementNode(tag=tag)
        self.compile_props(root, members, None)
        root.attributes.append(Attribute("props", "props", AttributeKind.SPREAD))
        self._add_items(root, items)
        return root

    def _conditional(self, config: Node, xtype: Node) -> Optional[Child]:
        arms = [
            self.compile(config, xtype.child_by_field_name(field))
            for field in ("consequence", "alternative")
        ]
        if all(arm is None for arm in arms):
            return None
        test = node_text(xtype.child_by_field_name("condition"))
        consequent, alternate = (arm if arm is not None else Expression("null") for arm in arms)
        return Conditional(test=f"({test})" if " " in test else test, consequent=consequent, alternate=alternate)

    def _capability(self, tag: Optional[str]) -> Optional[ResolvedCapability]:
        if tag is None:
            return None
        capability = self.capabilities.resolve(tag)
        if capability is not None:
            return capability

        import_name = self.resolve_widget(tag)
        if import_name is None:
            return None
        if BASE_CAPABILITY in self.capabilities:
            capability = self.capabilities.resolve(BASE_CAPABILITY, type_override=import_name)
            return capability.model_copy(update={"tag": tag})
        return ResolvedCapability(tag=tag, type=import_name, type_override=True)

    def _use_component(self, name: str) -> None:
        if name not in self.components:
            self.components.append(name)

    # Properties

    def compile_props(
        self,
        element: ElementNode,
        members: list[Node],
        capability: Optional[ResolvedCapability],
    ) -> bool:
        """Add the attributes and children produced by members to element.

        Returns:
            Whether an ``icon`` transform kept a property.
        """
        icon = False
        for member in members:
            config_name = property_name(member)
            value = property_value(member)
            if config_name is None or value is None or config_name in SKIPPED_PROPS:
                continue

            if config_name == "listeners":
                for listener in properties(unwrap(value)):
                    icon |= self._prop(element, capability, *self._listener(listener))
                continue

            if config_name == "handler":
                icon |= self._prop(element, capability, *self._listener(member))
                continue

            name = PROP_NAMES.get(config_name, config_name)
            icon |= self._prop(element, capability, config_name, name, value, None)
        return icon

    def _listener(self, member: Node) -> tuple[str, str, Node, Optional[Attribute]]:
        event = property_name(member)
        value = property_value(member)
        if event in IGNORED_LISTENER_KEYS:
            return event, "", value, None
        name = "on" + ("Tap" if event == "handler" else self.naming.capitalize(event))
        value_node = unwrap(value)
        if is_string(value_node):
            handler = string_value(value_node)
            self.listeners.append(handler)
            return event, name, value, Attribute(name, handler)
        return event, name, value, Attribute(name, dedent_fragment(node_text(value)))

    def _prop(
        self,
        element: ElementNode,
        capability: Optional[ResolvedCapability],
        raw_name: str,
        name: str,
        value: Node,
        attribute: Optional[Attribute],
    ) -> bool:
        """Run one property through the transform layers and add what survives."""
        if not name:
            return False

        icon = False
        if capability is not None:
            if raw_name not in capability.known_props and name not in capability.known_props:
                self.diagnostics.prop_unrecognized(capability.tag, raw_name)
            for layer in capability.transforms:
                transform = layer.get(name) or layer.get(raw_name)
                if transform is None:
                    continue
                if transform.kind == "suppress":
                    return icon
                if transform.kind == "content":
                    element.children.append(self._content(value))
                    element.text_capable = True
                    return icon
                if transform.kind == "class-name":
                    self._merge_class_name(element, self._attribute("className", value))
                    return icon
                if transform.kind == "icon":
                    icon = True
                elif transform.kind == "rename":
                    name = transform.argument
                elif transform.kind == "listener":
                    name = transform.argument
                    if attribute is None and is_string(unwrap(value)):
                        handler = string_value(unwrap(value))
                        self.listeners.append(handler)
                        attribute = Attribute(name, handler)

        if attribute is None:
            attribute = self._attribute(name, value)
        attribute.name = name
        element.set_attribute(attribute)
        return icon

    def _attribute(self, name: str, value: Node) -> Attribute:
        if should_extract(value):
            return Attribute(name, self.extract(name, value), AttributeKind.BINDING)
        value = unwrap(value)
        if is_boolean(value) and boolean_value(value):
            return Attribute(name, kind=AttributeKind.PRESENCE)
        if is_string(value):
            return Attribute(name, string_value(value), AttributeKind.LITERAL)
        return Attribute(name, dedent_fragment(node_text(value)))

    def _content(self, value: Node) -> Child:
        value = unwrap(value)
        if is_string(value) and not should_extract(value):
            return Text(string_value(value))
        if should_extract(value):
            return Expression(self.extract("content", value))
        return Expression(dedent_fragment(node_text(value)))

    @staticmethod
    def _merge_class_name(element: ElementNode, attribute: Attribute) -> None:
        existing = element.attribute("className")
        if existing is None:
            element.set_attribute(attribute)
            return

        def part(attr: Attribute) -> str:
            if attr.kind == AttributeKind.LITERAL:
                return (attr.value or "").replace("`", "\\`")
            return "${" + (attr.value or "") + "}"

        if existing.kind == attribute.kind == AttributeKind.LITERAL:
            merged = Attribute("className", f"{existing.value} {attribute.value}", AttributeKind.LITERAL)
        else:
            merged = Attribute("className", f"`{part(existing)} {part(attribute)}`")
        element.set_attribute(merged)

    # Bindings

    def extract(self, name: str, value: Node) -> str:
        """Bind value to a fresh local name: ``label``, ``label2``, ``label3`` ..."""
        instance = 1
        while True:
            keyed = name if instance == 1 else f"{name}{instance}"
            if keyed not in self.bindings:
                self.bindings[keyed] = (name, value)
                return keyed
            instance += 1

    def binding_code(self, name: str) -> str:
        base, value = self.bindings[name]
        if base in TEMPLATE_PROPS:
            try:
                compiled = self.templates.compile_value(value)
            except TemplateSyntaxError as e:
                log.warning(f"Keeping {name} as is: {e.message}")
                return dedent_fragment(node_text(value))
            if "Template" not in self.libraries:
                self.libraries.append("Template")
            return compiled
        return dedent_fragment(node_text(value))

    def binding_declarations(self) -> list[str]:
        return [f"const {name} = {self.binding_code(name)}" for name in self.bindings]

    def render(self, root: Child) -> str:
        """Render function body: the extracted bindings, then ``return (<root>)``."""
        body = code("return (", [print_jsx(root)], ")")
        declarations = self.binding_declarations()
        if declarations:
            return "\n\n".join(declarations) + "\n\n" + body
        return body
