"""Патч слоёв оверлея Calendly.

Встроенный iframe виджета перекрывает кнопку закрытия. Патч опускает iframe
и поднимает кнопку в правый верхний угол окна. Каждый оверлей
обрабатывается один раз (unseen -> fixed); отсутствие кнопки закрытия не
считается ошибкой. Escape удаляет все оверлеи и попапы независимо от
состояния.
"""
from __future__ import annotations

import logging
import weakref
from typing import List, Optional

from brandkit.models.dom_model import Document, Element, MutationRecord

log = logging.getLogger(__name__)

OVERLAY_SELECTOR = ".calendly-overlay"
POPUP_SELECTOR = ".calendly-popup, .calendly-popup-content"
IFRAME_SELECTOR = 'iframe[src*="calendly"]'
CLOSE_SELECTORS = (".calendly-popup-close", '[aria-label="Close"]')
CLOSE_FALLBACK_SELECTOR = "button, a"
CLOSE_TEXT = "Close"
FIXED_MARKER = "calendlyFixed"
MAX_Z_INDEX = "2147483647"

CLOSE_STYLE = {
    "position": "fixed",
    "top": "16px",
    "right": "16px",
    "z-index": MAX_Z_INDEX,
    "pointer-events": "auto",
}


class OverlayLayeringPatch:
    def __init__(self) -> None:
        self._fixed: "weakref.WeakSet[Element]" = weakref.WeakSet()

    def is_fixed(self, overlay: Element) -> bool:
        return overlay in self._fixed

    def lower_iframe(self, root: Element) -> Optional[Element]:
        iframe = root.query(IFRAME_SELECTOR)
        if iframe is not None:
            iframe.style["z-index"] = "0"
            iframe.style["position"] = "relative"
        return iframe

    def find_close_control(self, root: Element) -> Optional[Element]:
        for selector in CLOSE_SELECTORS:
            found = root.query(selector)
            if found is not None:
                return found
        for candidate in root.query_all(CLOSE_FALLBACK_SELECTOR):
            if candidate.text_content.strip() == CLOSE_TEXT:
                return candidate
        return None

    def elevate_close(self, root: Element) -> Optional[Element]:
        close = self.find_close_control(root)
        if close is not None:
            close.style.update(CLOSE_STYLE)
        return close

    def fix_overlay(self, overlay: Element) -> bool:
        """Переводит оверлей в состояние fixed; повторный вызов ничего не меняет."""
        if self.is_fixed(overlay) or overlay.dataset.get(FIXED_MARKER):
            return False
        popup = overlay.query(POPUP_SELECTOR) or overlay
        self.lower_iframe(popup)
        if self.elevate_close(popup) is None:
            log.debug("No close control inside overlay %r", overlay)
        overlay.dataset[FIXED_MARKER] = "true"
        self._fixed.add(overlay)
        return True

    def fix_layering(self, document: Document) -> List[Element]:
        return [overlay for overlay in document.query_all(OVERLAY_SELECTOR) if self.fix_overlay(overlay)]

    def remove_overlays(self, document: Document) -> int:
        """Удаляет все оверлеи и попапы, в том числе ещё не обработанные."""
        removed = 0
        for selector in (OVERLAY_SELECTOR, POPUP_SELECTOR):
            for el in document.query_all(selector):
                if el.is_connected:
                    el.remove()
                    removed += 1
        return removed

    def handle_key(self, document: Document, key: str) -> int:
        """Escape убирает оверлеи; остальные клавиши игнорируются."""
        if key != "Escape":
            return 0
        return self.remove_overlays(document)

    def install(self, document: Document) -> None:
        """Подписывает патч на документ на всё время его жизни."""

        def on_mutations(_records: List[MutationRecord]) -> None:
            self.fix_layering(document)

        def on_ready() -> None:
            self.fix_layering(document)
            document.subscribe_mutations(on_mutations)

        document.add_ready_listener(on_ready)
        document.add_key_listener(lambda key: self.handle_key(document, key))
