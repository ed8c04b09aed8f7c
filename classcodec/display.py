#  -*- coding: utf-8 -*-
"""
Rich terminal description of serializable classes.

``describe(Person)`` renders a panel listing every rule visible from the class
(inherited ones included), the class that declared it, and the guards bound to
the property::

    >>> print(describe(Person))   # doctest: +SKIP
    ╭──────────── Person ────────────╮
    │  property  rule    target  ... │
    │  name      plain           ... │
    │  address   nested  Address ... │
    ╰────────────────────────────────╯

The layout is controlled by ``DisplaySettings``, which is itself serializable,
so a theme can be stored as plain data and restored with ``from_data``.
"""

from __future__ import annotations

from io import StringIO

import pandas

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text
from typing_extensions import TypedDict

from classcodec.guards import AccessKind, validators_for
from classcodec.registry import rule_owner, rules_for, schema_for
from classcodec.rules import Custom, Nested, Rule
from classcodec.serialization import Serializable, SerializableProperty


COLUMNS = ['property', 'rule', 'target', 'declared on', 'get guards', 'set guards']


class DisplaySettingsSchema(TypedDict, total=False):
    console_width: int
    header_style: str
    property_style: str
    panel_border_style: str
    panel_box: str


class DisplaySettings(Serializable):
    """
    Layout of ``describe`` output.

    Attributes
    ----------
    console_width : int
        Maximum console output width in characters. Default 150.
    header_style : str
        Rich style of the table header. Default 'bold bright_yellow'.
    property_style : str
        Rich style of the property column. Default 'bold'.
    panel_border_style : str
        Rich style of the panel border. Default 'bright_cyan'.
    panel_box : str
        Box style name from ``rich.box``. Default 'ROUNDED'.
    """

    schema = DisplaySettingsSchema

    console_width: int = SerializableProperty(default=150)
    header_style: str = SerializableProperty(default='bold bright_yellow')
    property_style: str = SerializableProperty(default='bold')
    panel_border_style: str = SerializableProperty(default='bright_cyan')
    panel_box: str = SerializableProperty(default='ROUNDED')


def _describe_target(rule: Rule) -> str:

    if isinstance(rule, Nested):
        spec = rule.spec
        return spec if isinstance(spec, str) else spec.__qualname__

    if isinstance(rule, Custom):
        return f'{rule.forward_func.__qualname__} / {rule.backward_func.__qualname__}'

    return ''


def _describe_guards(cls: type, name: str, kind: AccessKind) -> str:

    names = []

    for guard in validators_for(cls, name, kind):
        source = guard.schema.source
        names.append(getattr(source, '__qualname__', None) or repr(source))

    return ', '.join(names)


def rules_frame(cls: type) -> pandas.DataFrame:
    """
    Tabulate the rules visible from ``cls``.

    Returns
    -------
    pandas.DataFrame
        One row per serializable property, in ``rules_for`` order, with the
        columns listed in ``COLUMNS``.
    """
    rows = []

    for name, rule in rules_for(cls).items():

        owner = rule_owner(cls, name)

        rows.append([
            name,
            rule.kind,
            _describe_target(rule),
            owner.__qualname__ if owner is not None else '',
            _describe_guards(cls, name, AccessKind.GET),
            _describe_guards(cls, name, AccessKind.SET),
        ])

    return pandas.DataFrame(rows, columns=COLUMNS)


def format_rules(cls: type, settings: DisplaySettings | None = None) -> Table:
    """Render ``rules_frame(cls)`` as a Rich table."""
    settings = settings or DisplaySettings()

    frame = rules_frame(cls)

    table = Table(box=None, padding=(0, 2), header_style=settings.header_style)

    for column in frame.columns:
        style = settings.property_style if column == 'property' else None
        table.add_column(column, justify='left', style=style)

    for row in frame.itertuples(index=False):
        table.add_row(*(str(value) for value in row))

    return table


def rules_panel(cls: type, settings: DisplaySettings | None = None) -> Panel:
    """Wrap ``format_rules(cls)`` in a titled panel."""
    settings = settings or DisplaySettings()

    schema = schema_for(cls)
    subtitle = f'schema: {schema!r}' if schema is not None else 'no schema'

    return Panel(
        format_rules(cls, settings),
        title=Text(cls.__qualname__, style='bold'),
        subtitle=subtitle,
        border_style=settings.panel_border_style,
        expand=False,
        box=getattr(box, settings.panel_box),
    )


def describe(cls: type, settings: DisplaySettings | None = None, color: bool = False) -> str:
    """
    Render the rules of ``cls`` as a string.

    Parameters
    ----------
    cls : type
        Class to describe.
    settings : DisplaySettings, optional
        Layout; defaults to ``DisplaySettings()``.
    color : bool, default False
        If True, keep ANSI color codes in the output.
    """
    settings = settings or DisplaySettings()

    string_io = StringIO()
    console = Console(file=string_io,
                      force_terminal=color,
                      no_color=not color,
                      color_system='truecolor' if color else None,
                      width=settings.console_width)

    console.print(rules_panel(cls, settings))

    return string_io.getvalue()


__all__ = [
    'COLUMNS',
    'DisplaySettings',
    'rules_frame',
    'format_rules',
    'rules_panel',
    'describe',
]
