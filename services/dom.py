"""
Minimal element tree used by the dialog components.

It models just enough of a page for focus management and scroll locking:
element nesting, inline style values, focusability and a document-level
active element plus window event listeners.
"""
from typing import Callable, Dict, Iterator, List, Optional

FOCUSABLE_TAGS = {"textarea", "input", "select"}


class Element:
    def __init__(
        self,
        tag: str = "div",
        attributes: Optional[Dict[str, str]] = None,
        children: Optional[List["Element"]] = None,
        element_id: Optional[str] = None,
    ):
        self.tag = tag.lower()
        self.attributes: Dict[str, str] = dict(attributes or {})
        self.style: Dict[str, str] = {}
        self.children: List[Element] = []
        self.parent: Optional[Element] = None
        self.document: Optional[Document] = None
        if element_id:
            self.attributes["id"] = element_id
        for child in children or []:
            self.append(child)

    def __repr__(self):
        ident = self.attributes.get("id")
        return f"<{self.tag}{' #' + ident if ident else ''}>"

    @property
    def id(self) -> Optional[str]:
        return self.attributes.get("id")

    @property
    def tabindex(self) -> Optional[int]:
        value = self.attributes.get("tabindex")
        if value is None:
            return None
        try:
            return int(value.strip())
        except ValueError:
            # Unparsable values count as unset.
            return None

    @property
    def disabled(self) -> bool:
        return "disabled" in self.attributes

    def append(self, child: "Element") -> "Element":
        if child.parent is not None:
            child.parent.remove(child)
        child.parent = self
        self.children.append(child)
        return child

    def remove(self, child: "Element") -> None:
        self.children.remove(child)
        child.parent = None

    def detach(self) -> None:
        if self.parent is not None:
            self.parent.remove(self)

    def iter_descendants(self) -> Iterator["Element"]:
        for child in self.children:
            yield child
            yield from child.iter_descendants()

    def contains(self, other: Optional["Element"]) -> bool:
        node = other
        while node is not None:
            if node is self:
                return True
            node = node.parent
        return False

    def root(self) -> "Element":
        node = self
        while node.parent is not None:
            node = node.parent
        return node

    def is_focusable(self) -> bool:
        """Mirrors the usual tabbable selector used for focus traps."""
        if self.tag == "a" and "href" in self.attributes:
            return True
        if self.tag == "button":
            return not self.disabled
        if self.tag in FOCUSABLE_TAGS:
            return True
        tabindex = self.tabindex
        return tabindex is not None and tabindex != -1

    def focus(self) -> None:
        document = self.owner_document()
        if document is not None:
            document.focus(self)

    def owner_document(self) -> Optional["Document"]:
        return self.root().document


def focusable_descendants_of(boundary: Optional[Element]) -> List[Element]:
    if boundary is None:
        return []
    return [element for element in boundary.iter_descendants() if element.is_focusable()]


Listener = Callable[[dict], None]


class Document:
    """A page: ``<html>`` root with a ``<body>``, a focused element and window listeners."""

    def __init__(self):
        self.root = Element("html")
        self.root.document = self
        self.body = self.root.append(Element("body"))
        self.active_element: Optional[Element] = self.body
        self._listeners: Dict[str, List[Listener]] = {}
        self.focus_listeners: List[Callable[[Element], None]] = []

    def contains(self, element: Optional[Element]) -> bool:
        return self.root.contains(element)

    def get_element_by_id(self, element_id: str) -> Optional[Element]:
        for element in self.root.iter_descendants():
            if element.id == element_id:
                return element
        return None

    def focus(self, element: Element) -> None:
        if not self.contains(element):
            return
        self.active_element = element
        for listener in list(self.focus_listeners):
            listener(element)

    def add_event_listener(self, event_type: str, listener: Listener) -> None:
        self._listeners.setdefault(event_type, []).append(listener)

    def remove_event_listener(self, event_type: str, listener: Listener) -> None:
        listeners = self._listeners.get(event_type, [])
        if listener in listeners:
            listeners.remove(listener)

    def listeners(self, event_type: str) -> List[Listener]:
        return list(self._listeners.get(event_type, []))

    def dispatch(self, event_type: str) -> bool:
        """Dispatches a window event. Returns False when a listener prevented the default."""
        event = {"type": event_type, "default_prevented": False}
        for listener in self.listeners(event_type):
            listener(event)
        return not event["default_prevented"]
