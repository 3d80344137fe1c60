"""Row-to-model mapping for catalog query results."""

from typing import Iterable, List, Mapping, Optional

from .categories import basic_category_description, category_name
from .models import (
    BasicCategory,
    BasicCommand,
    BasicGroup,
    Command,
    CommandDetail,
    CommandSection,
    Tip,
    TipSection,
)

TLDR_TITLE = "TLDR"


def shape_command(row: Mapping) -> Command:
    return Command(
        id=row["id"],
        name=row["name"],
        category=category_name(row["category"]),
        description=row["description"] or "",
    )


def shape_commands(rows: Iterable[Mapping]) -> List[Command]:
    return [shape_command(row) for row in rows]


def shape_command_detail(row: Mapping, section_rows: Iterable[Mapping]) -> CommandDetail:
    """Nest sections under their command, keeping the order they were read in.

    ``tldr`` is lifted from the first section titled ``TLDR``.
    """
    sections = [
        CommandSection(title=section["title"], content=section["content"] or "")
        for section in section_rows
    ]
    tldr: Optional[str] = next(
        (section.content for section in sections if section.title == TLDR_TITLE),
        None,
    )
    command = shape_command(row)
    return CommandDetail(**command.model_dump(), sections=sections, tldr=tldr)


def shape_tip(row: Mapping, section_rows: Iterable[Mapping]) -> Tip:
    sections = [
        TipSection(
            type=section["type"],
            data1=section["data1"] or "",
            data2=section["data2"] or "",
            extra=section["extra"] or "",
        )
        for section in section_rows
    ]
    return Tip(id=row["id"], title=row["title"], sections=sections)


def shape_basic_category(row: Mapping) -> BasicCategory:
    # No icon column exists; the frontend bundles its own icon set
    return BasicCategory(
        id=row["id"],
        title=row["title"],
        position=row["position"],
        description=basic_category_description(row["title"]),
        icon=None,
    )


def shape_basic_command(row: Mapping) -> BasicCommand:
    text = row["command"] or ""
    lines = text.splitlines()
    name = lines[0].strip() if lines else text.strip()
    return BasicCommand(id=row["id"], name=name, command=text, mans=row["mans"] or "")


def shape_basic_groups(group_rows: Iterable[Mapping], command_rows: Iterable[Mapping]) -> List[BasicGroup]:
    """Attach basic commands to their groups, keeping both input orders."""
    groups = [
        BasicGroup(id=row["id"], title=row["description"] or "", position=row["position"])
        for row in group_rows
    ]
    by_id = {group.id: group for group in groups}
    for row in command_rows:
        group = by_id.get(row["group_id"])
        if group is not None:
            group.commands.append(shape_basic_command(row))
    return groups
