from typing import Callable, List, Optional, Sequence, Tuple

from services.dom import Document, Element, focusable_descendants_of

BLOCKED_SCROLL_EVENTS = ("wheel", "touchmove")


def _prevent_default(event: dict) -> None:
    event["default_prevented"] = True


class ScrollLock:
    """
    Suspends background scrolling while held.

    Saves the exact inline ``overflow`` of the root and body (and ``overflow``
    plus ``touch-action`` of each extra container) before overriding them,
    and puts those exact values back on release.
    """

    def __init__(self, document: Document, containers: Sequence[Element] = ()):
        self.document = document
        self.containers = [c for c in containers if c is not None]
        self._saved: List[Tuple[Element, str, Optional[str]]] = []
        self.held = False

    def _override(self, element: Element, prop: str, value: str) -> None:
        self._saved.append((element, prop, element.style.get(prop)))
        element.style[prop] = value

    def acquire(self) -> "ScrollLock":
        if self.held:
            return self
        self._saved = []
        self._override(self.document.root, "overflow", "hidden")
        self._override(self.document.body, "overflow", "hidden")
        for container in self.containers:
            self._override(container, "overflow", "hidden")
            self._override(container, "touch-action", "none")
        for event_type in BLOCKED_SCROLL_EVENTS:
            self.document.add_event_listener(event_type, _prevent_default)
        self.held = True
        return self

    def release(self) -> None:
        if not self.held:
            return
        for event_type in BLOCKED_SCROLL_EVENTS:
            self.document.remove_event_listener(event_type, _prevent_default)
        for element, prop, original in reversed(self._saved):
            if original is None:
                element.style.pop(prop, None)
            else:
                element.style[prop] = original
        self._saved = []
        self.held = False

    def __enter__(self):
        return self.acquire()

    def __exit__(self, exc_type, exc, tb):
        self.release()
        return False


class FocusTrapDialog:
    """
    Modal overlay that keeps keyboard focus inside ``boundary`` while open.

    The owner decides whether the dialog is open: Escape and backdrop clicks
    only call ``on_close_request``; the owner then calls ``close()`` (or
    ``sync(False)``). Used as a context manager, the dialog is closed on
    every exit path.
    """

    def __init__(
        self,
        document: Document,
        boundary: Element,
        on_close_request: Callable[[], None],
        initial_focus_target: Optional[Element] = None,
        scroll_containers: Sequence[Element] = (),
    ):
        self.document = document
        self.boundary = boundary
        self.on_close_request = on_close_request
        self.initial_focus_target = initial_focus_target
        self.scroll_containers = list(scroll_containers)
        self.is_open = False
        self.last_focused: Optional[Element] = None
        self._scroll_lock: Optional[ScrollLock] = None
        self._added_tabindex = False

    def open(self) -> None:
        if self.is_open:
            return
        active = self.document.active_element
        self.last_focused = active if active is not self.document.body else None
        self._scroll_lock = ScrollLock(self.document, self.scroll_containers).acquire()
        self.document.focus_listeners.append(self.handle_focus_in)
        self.is_open = True
        self._focus_initial()

    def close(self) -> None:
        if not self.is_open:
            return
        self.is_open = False
        if self.handle_focus_in in self.document.focus_listeners:
            self.document.focus_listeners.remove(self.handle_focus_in)
        if self._scroll_lock is not None:
            self._scroll_lock.release()
            self._scroll_lock = None
        if self._added_tabindex:
            self.boundary.attributes.pop("tabindex", None)
            self._added_tabindex = False
        target, self.last_focused = self.last_focused, None
        if target is not None and self.document.contains(target):
            target.focus()

    def sync(self, open_: bool) -> None:
        if open_:
            self.open()
        else:
            self.close()

    def __enter__(self):
        self.open()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False

    def focusable_elements(self) -> List[Element]:
        return focusable_descendants_of(self.boundary)

    def _focus_boundary(self) -> None:
        if "tabindex" not in self.boundary.attributes:
            self.boundary.attributes["tabindex"] = "-1"
            self._added_tabindex = True
        self.boundary.focus()

    def _focus_initial(self) -> None:
        target = self.initial_focus_target
        if target is not None and self.boundary.contains(target):
            target.focus()
        else:
            self._focus_boundary()

    def request_close(self) -> None:
        self.on_close_request()

    def handle_backdrop_click(self) -> None:
        if self.is_open:
            self.request_close()

    def handle_keydown(self, key: str, shift: bool = False) -> bool:
        """
        Handles a key pressed anywhere in the document. Returns True when the
        browser default (focus movement) was replaced.
        """
        if not self.is_open:
            return False
        if key == "Escape":
            self.request_close()
            return False
        if key != "Tab":
            return False

        focusable = self.focusable_elements()
        if not focusable:
            self._focus_boundary()
            return True

        first, last = focusable[0], focusable[-1]
        active = self.document.active_element
        if shift and (active is first or not self.boundary.contains(active)):
            last.focus()
            return True
        if not shift and (active is last or not self.boundary.contains(active)):
            first.focus()
            return True
        return False

    def handle_focus_in(self, target: Element) -> None:
        if not self.is_open or self.boundary.contains(target):
            return
        focusable = self.focusable_elements()
        if focusable:
            focusable[0].focus()
        else:
            self._focus_boundary()

    def tab(self, shift: bool = False) -> Optional[Element]:
        """
        Simulates a Tab press: the trap runs first and, when it leaves the
        default alone, focus moves to the next/previous focusable element.
        """
        if not self.handle_keydown("Tab", shift=shift):
            focusable = self.focusable_elements()
            active = self.document.active_element
            if active in focusable:
                index = focusable.index(active) + (-1 if shift else 1)
                if 0 <= index < len(focusable):
                    focusable[index].focus()
        return self.document.active_element