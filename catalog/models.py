"""Pydantic models for the external JSON contract."""

from typing import List, Optional

from pydantic import BaseModel, Field


class Command(BaseModel):
    """A catalog command with its category already translated to a name."""
    id: int
    name: str
    category: str = Field(description="Display name of the category")
    description: str


class CommandSection(BaseModel):
    title: str
    content: str


class CommandDetail(Command):
    sections: List[CommandSection] = Field(default_factory=list)
    tldr: Optional[str] = Field(default=None, description="Content of the TLDR section, if any")


class TipSection(BaseModel):
    type: int
    data1: str
    data2: str
    extra: str


class Tip(BaseModel):
    id: int
    title: str
    sections: List[TipSection] = Field(default_factory=list)


class BasicCategory(BaseModel):
    id: int
    title: str
    position: int
    description: Optional[str] = None
    icon: Optional[str] = None


class BasicCommand(BaseModel):
    id: int
    name: str = Field(description="First line of the command text")
    command: str = Field(description="Full command text, possibly multi-line")
    mans: str = ""


class BasicGroup(BaseModel):
    id: int
    title: str
    position: int
    commands: List[BasicCommand] = Field(default_factory=list)


class AppStats(BaseModel):
    total_commands: int
    total_categories: int
    total_tips: int
    total_basic_categories: int
