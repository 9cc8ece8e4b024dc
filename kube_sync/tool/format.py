"""Library for formatting command output."""

from abc import ABC, abstractmethod
import json
import sys
from typing import Any, Generator, TextIO

import yaml

PADDING = 4


class TableFormatter:
    """A formatter that prints rows as aligned columns."""

    def __init__(self, keys: list[str]) -> None:
        """Initialize the TableFormatter with the row keys to print."""
        self._keys = keys

    def format(self, data: list[dict[str, Any]]) -> Generator[str, None, None]:
        """Format the rows, preceded by a header line."""
        if not data:
            return
        header = [key.upper().replace("_", " ") for key in self._keys]
        rows = [header] + [
            ["" if row.get(key) is None else str(row[key]) for key in self._keys]
            for row in data
        ]
        widths = [max(len(row[i]) for row in rows) + PADDING for i in range(len(header))]
        for row in rows:
            yield "".join(value.ljust(width) for value, width in zip(row, widths)).rstrip()

    def print(self, data: list[dict[str, Any]], file: TextIO | None = None) -> None:
        """Output the rows."""
        file = file or sys.stdout
        for line in self.format(data):
            print(line, file=file)


class DocumentFormatter(ABC):
    """A formatter that prints kubernetes documents."""

    @abstractmethod
    def print(self, doc: dict[str, Any], file: TextIO | None = None) -> None:
        """Print the document."""


class YamlFormatter(DocumentFormatter):
    """A formatter that prints a yaml document."""

    def print(self, doc: dict[str, Any], file: TextIO | None = None) -> None:
        file = file or sys.stdout
        print(
            yaml.dump(doc, sort_keys=False, explicit_start=True), end="", file=file
        )


class JsonFormatter(DocumentFormatter):
    """A formatter that prints json output."""

    def print(self, doc: dict[str, Any], file: TextIO | None = None) -> None:
        file = file or sys.stdout
        json.dump(doc, sort_keys=False, indent=4, fp=file)
        print(file=file)


def formatter(output: str) -> DocumentFormatter:
    """Return the formatter for an output flag value."""
    if output == "json":
        return JsonFormatter()
    return YamlFormatter()
