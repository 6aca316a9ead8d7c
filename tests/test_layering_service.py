"""Tests for services/layering_service: overlay fix, idempotence, Escape teardown."""

from brandkit.models.dom_model import Document, Element
from brandkit.services.layering_service import CLOSE_STYLE, FIXED_MARKER, OverlayLayeringPatch


def _overlay(close=None, with_popup=True):
    iframe = Element("iframe", attrs={"src": "https://calendly.com/kalyan"})
    children = [iframe] + ([close] if close is not None else [])
    if with_popup:
        inner = [Element("div", classes=["calendly-popup"], children=children)]
    else:
        inner = children
    return Element("div", classes=["calendly-overlay"], children=inner), iframe


def test_fix_lowers_iframe_and_elevates_close():
    close = Element("div", classes=["calendly-popup-close"])
    overlay, iframe = _overlay(close)
    doc = Document([overlay])

    fixed = OverlayLayeringPatch().fix_layering(doc)

    assert fixed == [overlay]
    assert iframe.style == {"z-index": "0", "position": "relative"}
    assert close.style == CLOSE_STYLE
    assert overlay.dataset[FIXED_MARKER] == "true"


def test_close_found_by_aria_label():
    close = Element("span", attrs={"aria-label": "Close"})
    overlay, _ = _overlay(close)
    OverlayLayeringPatch().fix_layering(Document([overlay]))
    assert close.style["position"] == "fixed"


def test_close_found_by_text_fallback():
    decoy = Element("button", text="Book")
    close = Element("a", children=[Element("span", text="  Close ")])
    overlay, _ = _overlay(close)
    overlay.children[0].append(decoy)
    OverlayLayeringPatch().fix_layering(Document([overlay]))
    assert close.style["z-index"] == "2147483647"
    assert decoy.style == {}


def test_overlay_without_popup_is_used_as_root():
    close = Element("button", text="Close")
    overlay, iframe = _overlay(close, with_popup=False)
    OverlayLayeringPatch().fix_layering(Document([overlay]))
    assert iframe.style["z-index"] == "0"
    assert close.style["top"] == "16px"


def test_missing_close_control_is_tolerated():
    overlay, iframe = _overlay(None)
    fixed = OverlayLayeringPatch().fix_layering(Document([overlay]))
    assert fixed == [overlay]
    assert iframe.style["position"] == "relative"


def test_fix_is_idempotent():
    close = Element("button", classes=["calendly-popup-close"])
    overlay, _ = _overlay(close)
    doc = Document([overlay])
    patch = OverlayLayeringPatch()

    patch.fix_layering(doc)
    close.style["top"] = "99px"
    assert patch.fix_layering(doc) == []
    assert close.style["top"] == "99px"
    assert patch.is_fixed(overlay)
    assert overlay.dataset == {FIXED_MARKER: "true"}


def test_dataset_marker_blocks_reprocessing_across_patches():
    close = Element("button", classes=["calendly-popup-close"])
    overlay, _ = _overlay(close)
    doc = Document([overlay])
    OverlayLayeringPatch().fix_layering(doc)
    close.style.clear()
    assert OverlayLayeringPatch().fix_layering(doc) == []
    assert close.style == {}


def test_install_fixes_initial_and_inserted_overlays():
    first, _ = _overlay(Element("button", text="Close"))
    doc = Document([first])
    patch = OverlayLayeringPatch()
    patch.install(doc)
    assert not patch.is_fixed(first)

    doc.dispatch_ready()
    assert patch.is_fixed(first)

    second, iframe = _overlay(Element("button", text="Close"))
    doc.body.append(second)
    assert patch.is_fixed(second)
    assert iframe.style["z-index"] == "0"


def test_escape_removes_every_overlay_and_popup():
    fixed_overlay, _ = _overlay(Element("button", text="Close"), with_popup=False)
    unfixed_overlay, _ = _overlay(None, with_popup=False)
    popups = [
        Element("div", classes=["calendly-popup"]),
        Element("div", classes=["calendly-popup-content"]),
    ]
    other = Element("main")
    doc = Document([fixed_overlay, unfixed_overlay, *popups, other])
    patch = OverlayLayeringPatch()
    patch.fix_overlay(fixed_overlay)
    patch.install(doc)

    doc.dispatch_key("Enter")
    assert len(doc.body.children) == 5

    doc.dispatch_key("Escape")
    assert doc.body.children == [other]
    assert doc.query_all(".calendly-overlay") == []
    assert doc.query_all(".calendly-popup, .calendly-popup-content") == []


def test_remove_overlays_counts_removed_elements():
    overlays = [_overlay(None, with_popup=False)[0] for _ in range(3)]
    popups = [Element("div", classes=["calendly-popup"]) for _ in range(2)]
    doc = Document([*overlays, *popups])
    assert OverlayLayeringPatch().remove_overlays(doc) == 5


def test_handle_key_only_escape_tears_down():
    fixed_overlay, _ = _overlay(Element("button", text="Close"), with_popup=False)
    unfixed_overlay, _ = _overlay(None, with_popup=False)
    popup = Element("div", classes=["calendly-popup-content"])
    other = Element("main")
    doc = Document([fixed_overlay, unfixed_overlay, popup, other])
    patch = OverlayLayeringPatch()
    patch.fix_overlay(fixed_overlay)

    assert patch.handle_key(doc, "Enter") == 0
    assert len(doc.body.children) == 4

    assert patch.handle_key(doc, "Escape") == 3
    assert doc.body.children == [other]
    assert patch.handle_key(doc, "Escape") == 0
