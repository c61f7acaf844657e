"""Pydantic models for options, command configuration and reports"""

from enum import Enum
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator


class SeparatorKind(str, Enum):
    """How records are delimited"""

    LINE = 'line'
    SPACE = 'space'
    NULL = 'null'
    CUSTOM = 'custom'


class Separator(BaseModel):
    """A record separator: newline, space, null, or a custom delimiter string."""

    model_config = ConfigDict(frozen=True)

    kind: SeparatorKind = Field(default=SeparatorKind.LINE, description='Separator kind')
    delimiter: str | None = Field(None, description='Delimiter text, only for the custom kind')

    @model_validator(mode='after')
    def _check_delimiter(self) -> 'Separator':
        if self.kind == SeparatorKind.CUSTOM:
            if not self.delimiter:
                raise ValueError('Custom delimiter must not be empty')
        elif self.delimiter is not None:
            raise ValueError(f'Only custom separators take a delimiter, not {self.kind.value}')
        return self

    @classmethod
    def line(cls) -> 'Separator':
        return cls(kind=SeparatorKind.LINE)

    @classmethod
    def space(cls) -> 'Separator':
        return cls(kind=SeparatorKind.SPACE)

    @classmethod
    def null(cls) -> 'Separator':
        return cls(kind=SeparatorKind.NULL)

    @classmethod
    def custom(cls, delimiter: str) -> 'Separator':
        return cls(kind=SeparatorKind.CUSTOM, delimiter=delimiter)

    def sep(self) -> str:
        """The separator as text."""
        if self.kind == SeparatorKind.SPACE:
            return ' '
        if self.kind == SeparatorKind.NULL:
            return '\0'
        if self.kind == SeparatorKind.CUSTOM:
            return self.delimiter
        return '\n'


# Grouping specifiers


CaptureGroup = Union[int, str]


class FirstChars(BaseModel):
    """Group by the first n characters of each token."""

    model_config = ConfigDict(frozen=True)

    kind: Literal['first_chars'] = 'first_chars'
    n: int = Field(..., ge=0, description='Number of leading characters')


class LastChars(BaseModel):
    """Group by the last n characters of each token."""

    model_config = ConfigDict(frozen=True)

    kind: Literal['last_chars'] = 'last_chars'
    n: int = Field(..., ge=0, description='Number of trailing characters')


class RegexGrouping(BaseModel):
    """Group by the first match of a regular expression.

    When capture_group is None, the first capture group is used if the pattern
    has one; otherwise the whole match is used.
    """

    model_config = ConfigDict(frozen=True)

    kind: Literal['regex'] = 'regex'
    pattern: str = Field(..., description='Regular expression pattern')
    capture_group: CaptureGroup | None = Field(None, description='Capture group number or name')


class FileExtension(BaseModel):
    """Group by file extension, excluding the leading period."""

    model_config = ConfigDict(frozen=True)

    kind: Literal['file_extension'] = 'file_extension'


class CounterGrouping(BaseModel):
    """Place every token in its own numbered group."""

    model_config = ConfigDict(frozen=True)

    kind: Literal['counter'] = 'counter'


GroupingSpecifier = Annotated[
    Union[FirstChars, LastChars, RegexGrouping, FileExtension, CounterGrouping],
    Field(discriminator='kind'),
]


# Options


class InputOptions(BaseModel):
    """Options for splitting program input into tokens."""

    model_config = ConfigDict(frozen=True)

    separator: Separator = Field(default_factory=Separator.line)


class OutputOptions(BaseModel):
    """Options controlling program output."""

    model_config = ConfigDict(frozen=True)

    separator: Separator = Field(default_factory=Separator.line)
    only_group_names: bool = Field(default=False, description='Output only group names')
    run_command: str | None = Field(None, description='Shell command to run for each group')
    sequential: bool = Field(default=False, description='Run commands one at a time in key order')
    stats: bool = Field(default=False, description='Print item counts and overall statistics')

    @model_validator(mode='after')
    def _check_separator(self) -> 'OutputOptions':
        if self.separator.kind == SeparatorKind.CUSTOM:
            raise ValueError('Output separators must be line, space or null')
        return self

    def defaults_for_command_results(self) -> 'OutputOptions':
        """Options for printing command results.

        Separator and only_group_names shape what each command receives, so the
        final report falls back to defaults and keeps only stats.
        """
        return OutputOptions(stats=self.stats)


class GroupByOptions(BaseModel):
    """All options for one run."""

    model_config = ConfigDict(frozen=True)

    input: InputOptions = Field(default_factory=InputOptions)
    grouping: GroupingSpecifier
    output: OutputOptions = Field(default_factory=OutputOptions)


class ShellCommandOptions(BaseModel):
    """Per-run configuration shared by every command invocation."""

    model_config = ConfigDict(frozen=True)

    shell: str = Field(..., description='Path to the shell executable')
    shell_args: tuple[str, ...] = Field(..., description='Arguments passed to the shell')
    line_separator: str = Field('\n', description='Written after each item fed to a command')
    only_group_names: bool = Field(default=False, description="Feed the group's key instead of its values")


# Reports


def item_count(count: int) -> str:
    """Format an item count: '1 item', '3 items'."""
    if count == 1:
        return '1 item'
    return f'{count} items'


class GroupStatistics(BaseModel):
    """Statistics about a grouped collection"""

    total_items: int = Field(..., description='Items across all groups')
    total_groups: int = Field(..., description='Number of groups')
    median: int = Field(..., description='Lower median group size')
    average: float = Field(..., description='Mean group size')
    min: int = Field(..., description='Smallest group size')
    max: int = Field(..., description='Largest group size')

    @classmethod
    def from_sizes(cls, sizes: list[int]) -> 'GroupStatistics':
        sizes = sorted(sizes)
        total_items = sum(sizes)
        total_groups = len(sizes)
        if not sizes:
            return cls(total_items=0, total_groups=0, median=0, average=0.0, min=0, max=0)
        return cls(
            total_items=total_items,
            total_groups=total_groups,
            median=sizes[total_groups // 2],
            average=total_items / total_groups,
            min=sizes[0],
            max=sizes[-1],
        )

    def to_cli(self) -> str:
        return (
            'Statistics:\n'
            f'  Total items: {self.total_items}\n'
            f'  Total groups: {self.total_groups}\n'
            '\n'
            '  Group size:\n'
            f'    Median: {self.median}\n'
            f'    Average: {self.average:.2f}\n'
            f'    Min: {self.min}\n'
            f'    Max: {self.max}\n'
        )


class GroupsResponse(BaseModel):
    """JSON document describing groups and, optionally, command results."""

    groups: dict[str, list[str]] = Field(..., description='Group key -> tokens, in key order')
    results: dict[str, str] | None = Field(None, description='Group key -> command output')
    statistics: GroupStatistics | None = Field(None, description='Present when stats were requested')
