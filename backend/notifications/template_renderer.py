"""
Minimal mustache-style renderer for notification emails.

Supported syntax, resolved in this order:

1. ``{{#each key}}...{{/each}}`` repeats the body once per record in a
   non-empty list. Inside the body ``{{item.field}}`` and
   ``{{#if item.field}}`` refer to the current record, and nested
   ``{{#each item.children}}`` blocks iterate over a field of it.
2. ``{{#if key}}...{{/if}}`` keeps the body when the value is truthy.
3. ``{{key}}`` is replaced by the value's string form, or nothing.

Rendering never raises: missing keys render as empty strings, blocks over
non-list values disappear, and unbalanced tags are left as written.
"""

import math
import re
import secrets
from dataclasses import dataclass
from typing import Any, Callable

from models.types import TemplateContext, TemplateValue

Lookup = Callable[[str], Any]

_KEY = r"[A-Za-z_][\w.]*"
_OPEN_TAGS = {
    "each": re.compile(r"\{\{#each\s+(" + _KEY + r")\s*\}\}"),
    "if": re.compile(r"\{\{#if\s+(" + _KEY + r")\s*\}\}"),
}
_CLOSE_TAGS = {"each": "{{/each}}", "if": "{{/if}}"}
_VARIABLE = re.compile(r"\{\{\s*(" + _KEY + r")\s*\}\}")

ITEM = "item"
ITEM_PREFIX = ITEM + "."


@dataclass(frozen=True)
class _Block:
    key: str
    start: int
    body_start: int
    body_end: int
    end: int


def render(template: str, context: TemplateContext) -> str:
    """Render ``template`` against ``context``."""
    if not template:
        return template or ""

    lookup = _context_lookup(context or {})
    guard = _new_guard(template)

    rendered = _expand_each(template, lookup, guard)
    rendered = _resolve_conditionals(rendered, lookup)
    rendered = _interpolate(rendered, lookup)
    return rendered.replace(guard, "{{")


def _new_guard(template: str) -> str:
    """
    Placeholder for "{{" inside record values, unique to one render.

    Record values are stored guarded until the end of the render so later
    stages never treat them as template syntax. Only the spans written with
    this token are turned back into "{{".
    """
    while True:
        guard = f"\x00{secrets.token_hex(8)}\x00"
        if guard not in template:
            return guard


def is_truthy(value: Any) -> bool:
    """JavaScript truthiness for template values."""
    if isinstance(value, float) and math.isnan(value):
        return False
    return bool(value)


def to_display(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _find_block(template: str, tag: str, pos: int = 0) -> _Block | None:
    """Find the next balanced ``tag`` block at or after ``pos``."""
    opener = _OPEN_TAGS[tag]
    closer = _CLOSE_TAGS[tag]

    match = opener.search(template, pos)
    if match is None:
        return None

    depth = 1
    cursor = match.end()
    while depth:
        close_at = template.find(closer, cursor)
        if close_at == -1:
            return None
        nested = opener.search(template, cursor, close_at)
        if nested is not None:
            depth += 1
            cursor = nested.end()
            continue
        depth -= 1
        if depth == 0:
            return _Block(
                key=match.group(1),
                start=match.start(),
                body_start=match.end(),
                body_end=close_at,
                end=close_at + len(closer),
            )
        cursor = close_at + len(closer)
    return None


def _expand_each(template: str, lookup: Lookup, guard: str) -> str:
    parts = []
    pos = 0
    while (block := _find_block(template, "each", pos)) is not None:
        parts.append(template[pos:block.start])
        value = lookup(block.key)
        if isinstance(value, (list, tuple)) and value:
            body = template[block.body_start:block.body_end]
            parts.extend(_render_item(body, item, lookup, guard) for item in value)
        pos = block.end
    parts.append(template[pos:])
    return "".join(parts)


def _render_item(body: str, item: Any, parent: Lookup, guard: str) -> str:
    """Instantiate one iteration. Inner blocks bind ``item.`` to their own records first."""

    def lookup(key: str) -> Any:
        if key == ITEM:
            return item
        if key.startswith(ITEM_PREFIX):
            return _walk(item, key[len(ITEM_PREFIX):])
        return parent(key)

    def item_scoped(key: str) -> bool:
        return key == ITEM or key.startswith(ITEM_PREFIX)

    rendered = _expand_each(body, lookup, guard)
    rendered = _resolve_conditionals(rendered, lookup, applies=item_scoped)
    return _interpolate(rendered, lookup, applies=item_scoped, guard=guard)


def _resolve_conditionals(
    template: str,
    lookup: Lookup,
    applies: Callable[[str], bool] = lambda key: True,
) -> str:
    parts = []
    pos = 0
    while (block := _find_block(template, "if", pos)) is not None:
        parts.append(template[pos:block.start])
        body = template[block.body_start:block.body_end]
        if not applies(block.key):
            # Someone else's conditional: keep the tags, resolve ours inside it
            parts.append(template[block.start:block.body_start])
            parts.append(_resolve_conditionals(body, lookup, applies))
            parts.append(template[block.body_end:block.end])
        elif is_truthy(lookup(block.key)):
            parts.append(_resolve_conditionals(body, lookup, applies))
        pos = block.end
    parts.append(template[pos:])
    return "".join(parts)


def _interpolate(
    template: str,
    lookup: Lookup,
    applies: Callable[[str], bool] = lambda key: True,
    guard: str | None = None,
) -> str:
    def substitute(match: re.Match) -> str:
        key = match.group(1)
        if not applies(key):
            return match.group(0)
        text = to_display(lookup(key))
        return text.replace("{{", guard) if guard else text

    return _VARIABLE.sub(substitute, template)


def _context_lookup(context: TemplateContext) -> Lookup:
    def lookup(key: str) -> TemplateValue:
        if key in context:
            return context[key]
        return _walk(context, key)

    return lookup


def _walk(record: Any, dotted: str) -> Any:
    value = record
    for part in dotted.split("."):
        if isinstance(value, dict):
            value = value.get(part)
        elif value is not None and not isinstance(value, (str, int, float, list)):
            value = getattr(value, part, None)
        else:
            return None
    return value
