"""Минимальная модель документа для патча слоёв встраиваемого виджета.

Принципы:
- SRP: только дерево элементов, сопоставление селекторов и подписки.
- Подписки явные: мутации дерева и нажатия клавиш доставляются синхронно,
  в порядке регистрации обработчиков.

Поддерживаемые селекторы: списки через запятую из составных селекторов
`tag.class[attr][attr="v"][attr*="v"]` без комбинаторов.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, Iterator, List, Optional, Tuple

_COMPOUND_RE = re.compile(
    r"""
    (?P<tag>^[a-zA-Z][\w-]*)
    | \.(?P<cls>[\w-]+)
    | \[\s*(?P<attr>[\w-]+)\s*(?:(?P<op>\*?=)\s*(?:"(?P<dq>[^"]*)"|'(?P<sq>[^']*)'|(?P<bare>[^\]\s]+))\s*)?\]
    """,
    re.VERBOSE,
)


@dataclass(frozen=True)
class _AttrTest:
    name: str
    op: Optional[str]
    value: Optional[str]

    def matches(self, attrs: Dict[str, str]) -> bool:
        if self.name not in attrs:
            return False
        actual = attrs[self.name]
        if self.op is None:
            return True
        if self.op == "=":
            return actual == self.value
        return self.value is not None and self.value in actual


@dataclass(frozen=True)
class _Compound:
    tag: Optional[str]
    classes: Tuple[str, ...]
    attrs: Tuple[_AttrTest, ...]

    def matches(self, element: "Element") -> bool:
        if self.tag is not None and element.tag != self.tag:
            return False
        if any(c not in element.classes for c in self.classes):
            return False
        return all(test.matches(element.attrs) for test in self.attrs)


def _parse_compound(text: str) -> _Compound:
    pos = 0
    tag: Optional[str] = None
    classes: List[str] = []
    attrs: List[_AttrTest] = []
    while pos < len(text):
        m = _COMPOUND_RE.match(text, pos)
        if m is None or m.end() == pos:
            raise ValueError(f"Неподдерживаемый селектор: {text!r}")
        if m.group("tag"):
            tag = m.group("tag").lower()
        elif m.group("cls"):
            classes.append(m.group("cls"))
        else:
            value = next((g for g in (m.group("dq"), m.group("sq"), m.group("bare")) if g is not None), None)
            attrs.append(_AttrTest(name=m.group("attr"), op=m.group("op"), value=value))
        pos = m.end()
    return _Compound(tag=tag, classes=tuple(classes), attrs=tuple(attrs))


def parse_selector(selector: str) -> Tuple[_Compound, ...]:
    parts = [p.strip() for p in selector.split(",") if p.strip()]
    if not parts:
        raise ValueError("Пустой селектор")
    return tuple(_parse_compound(p) for p in parts)


@dataclass(frozen=True)
class MutationRecord:
    added: Tuple["Element", ...] = ()
    removed: Tuple["Element", ...] = ()


MutationCallback = Callable[[List[MutationRecord]], None]
KeyCallback = Callable[[str], None]


@dataclass(eq=False)
class Element:
    """Узел дерева. Сравнение и хэш — по идентичности объекта."""
    tag: str
    classes: List[str] = field(default_factory=list)
    attrs: Dict[str, str] = field(default_factory=dict)
    text: str = ""
    style: Dict[str, str] = field(default_factory=dict)
    dataset: Dict[str, str] = field(default_factory=dict)
    children: List["Element"] = field(default_factory=list)
    parent: Optional["Element"] = field(default=None, repr=False)
    _document: Optional["Document"] = field(default=None, repr=False)

    def __post_init__(self) -> None:
        self.tag = self.tag.lower()
        for child in self.children:
            child.parent = self

    # ---- Tree ----
    def append(self, child: "Element") -> "Element":
        if child.parent is not None:
            child.remove()
        child.parent = self
        self.children.append(child)
        doc = self.owner_document
        if doc is not None:
            doc._notify(MutationRecord(added=(child,)))
        return child

    def remove(self) -> None:
        parent = self.parent
        if parent is None:
            return
        doc = parent.owner_document
        parent.children.remove(self)
        self.parent = None
        if doc is not None:
            doc._notify(MutationRecord(removed=(self,)))

    @property
    def owner_document(self) -> Optional["Document"]:
        node: Optional[Element] = self
        while node is not None:
            if node._document is not None:
                return node._document
            node = node.parent
        return None

    @property
    def is_connected(self) -> bool:
        return self.owner_document is not None

    @property
    def text_content(self) -> str:
        return self.text + "".join(child.text_content for child in self.children)

    def iter_descendants(self) -> Iterator["Element"]:
        for child in self.children:
            yield child
            yield from child.iter_descendants()

    # ---- Queries ----
    def query_all(self, selector: str) -> List["Element"]:
        compounds = parse_selector(selector)
        return [el for el in self.iter_descendants() if any(c.matches(el) for c in compounds)]

    def query(self, selector: str) -> Optional["Element"]:
        compounds = parse_selector(selector)
        for el in self.iter_descendants():
            if any(c.matches(el) for c in compounds):
                return el
        return None


class Document:
    """Документ: корень `body`, подписки на мутации, клавиши и готовность."""

    def __init__(self, children: Iterable[Element] = ()) -> None:
        self.body = Element("body", children=list(children))
        self.body._document = self
        self._mutation_callbacks: List[MutationCallback] = []
        self._key_callbacks: List[KeyCallback] = []
        self._ready_callbacks: List[Callable[[], None]] = []

    def query_all(self, selector: str) -> List[Element]:
        return self.body.query_all(selector)

    def query(self, selector: str) -> Optional[Element]:
        return self.body.query(selector)

    # ---- Subscriptions ----
    def subscribe_mutations(self, callback: MutationCallback) -> None:
        self._mutation_callbacks.append(callback)

    def add_key_listener(self, callback: KeyCallback) -> None:
        self._key_callbacks.append(callback)

    def add_ready_listener(self, callback: Callable[[], None]) -> None:
        self._ready_callbacks.append(callback)

    def dispatch_ready(self) -> None:
        for callback in list(self._ready_callbacks):
            callback()

    def dispatch_key(self, key: str) -> None:
        for callback in list(self._key_callbacks):
            callback(key)

    def _notify(self, record: MutationRecord) -> None:
        for callback in list(self._mutation_callbacks):
            callback([record])
