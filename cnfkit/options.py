"""Command-line options of the form ``-name=value`` and ``-name`` / ``-no-name``."""

from __future__ import annotations

import re
import sys
from abc import ABC, abstractmethod
from dataclasses import dataclass

INT32_MIN = -(2**31)
INT32_MAX = 2**31 - 1
INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1

_FLOAT_PREFIX = re.compile(
    r"\s*[+-]?(?:inf(?:inity)?|nan|(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)",
    re.IGNORECASE,
)
_INT_PREFIX = re.compile(r"\s*[+-]?\d+")


class OptionError(ValueError):
    """Raised for an unknown flag or an option value outside its range."""


@dataclass(frozen=True)
class IntRange:
    """Inclusive bounds of an integer option."""

    begin: int = INT32_MIN
    end: int = INT32_MAX


@dataclass(frozen=True)
class DoubleRange:
    """Bounds of a floating-point option, each inclusive or exclusive."""

    begin: float = float("-inf")
    begin_inclusive: bool = False
    end: float = float("inf")
    end_inclusive: bool = False


def _leading_float(text: str) -> float:
    """Read the longest numeric prefix of ``text``; 0.0 when there is none."""
    found = _FLOAT_PREFIX.match(text)
    return float(found.group().strip()) if found else 0.0


def _leading_int(text: str) -> int:
    """Read the longest integer prefix of ``text``; 0 when there is none."""
    found = _INT_PREFIX.match(text)
    return int(found.group().strip()) if found else 0


def _verbose_block(description: str) -> str:
    return f"\n        {description}\n\n"


class OptionRegistry:
    """A collection of options together with the usage text that describes them."""

    def __init__(self, usage: str | None = None, help_prefix: str = "") -> None:
        self.options: list[Option] = []
        self.usage = usage
        self.help_prefix = help_prefix

    def register(self, option: "Option") -> None:
        """Add ``option`` to the registry."""
        self.options.append(option)

    def parse(self, argv: list[str], strict: bool = False) -> list[str]:
        """Consume the recognised options of ``argv`` and return what is left.

        The first element is the program name and is always kept. A help
        flag prints the usage and exits; in strict mode an unrecognised
        argument starting with ``-`` raises :class:`OptionError`.
        """
        if not argv:
            return []
        program, remaining = argv[0], [argv[0]]
        help_flag = f"--{self.help_prefix}help"
        for arg in argv[1:]:
            if arg.startswith(help_flag):
                rest = arg[len(help_flag):]
                if rest == "":
                    self.print_usage_and_exit(program)
                elif rest.startswith("-verb"):
                    self.print_usage_and_exit(program, True)
                continue
            if any(option.parse(arg) for option in self.options):
                continue
            if strict and arg.startswith("-"):
                raise OptionError(
                    f"Unknown flag \"{arg}\". Use '--{self.help_prefix}help' for help."
                )
            remaining.append(arg)
        return remaining

    def help_text(self, program: str, verbose: bool = False) -> str:
        """Return the full help message, options grouped by category and type."""
        parts: list[str] = []
        if self.usage is not None:
            parts.append(self.usage % program if "%s" in self.usage else self.usage)

        self.options.sort(key=lambda option: (option.category, option.type_name))
        previous_category: str | None = None
        previous_type: str | None = None
        for option in self.options:
            if option.category != previous_category:
                parts.append(f"\n{option.category} OPTIONS:\n\n")
            elif option.type_name != previous_type:
                parts.append("\n")
            parts.append(option.help(verbose))
            previous_category = option.category
            previous_type = option.type_name

        prefix = self.help_prefix
        parts.append("\nHELP OPTIONS:\n\n")
        parts.append(f"  --{prefix}help        Print help message.\n")
        parts.append(f"  --{prefix}help-verb   Print verbose help message.\n")
        parts.append("\n")
        return "".join(parts)

    def print_usage_and_exit(self, program: str, verbose: bool = False) -> None:
        """Write the help message to standard error and exit with status 0."""
        sys.stderr.write(self.help_text(program, verbose))
        raise SystemExit(0)


default_registry = OptionRegistry()


class Option(ABC):
    """An option with a name, a description, a category and a type label."""

    def __init__(
        self,
        name: str,
        description: str,
        category: str,
        type_name: str,
        registry: OptionRegistry | None = None,
    ) -> None:
        self.name = name
        self.description = description
        self.category = category
        self.type_name = type_name
        (default_registry if registry is None else registry).register(self)

    def _value_text(self, arg: str) -> str | None:
        """Return what follows ``-name=`` in ``arg``, or None when it does not match."""
        head = f"-{self.name}="
        return arg[len(head):] if arg.startswith(head) else None

    @abstractmethod
    def parse(self, arg: str) -> bool:
        """Set the value from ``arg`` if it names this option; report whether it did."""

    @abstractmethod
    def help(self, verbose: bool = False) -> str:
        """Return the help line (and description when verbose) of this option."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r}, value={getattr(self, 'value', None)!r})"


class DoubleOption(Option):
    """A floating-point option."""

    def __init__(
        self,
        category: str,
        name: str,
        description: str,
        default: float = 0.0,
        range: DoubleRange | None = None,
        registry: OptionRegistry | None = None,
    ) -> None:
        super().__init__(name, description, category, "<double>", registry)
        self.range = DoubleRange() if range is None else range
        self.value = float(default)

    def parse(self, arg: str) -> bool:
        text = self._value_text(arg)
        if text is None:
            return False
        candidate = _leading_float(text)
        bounds = self.range
        if candidate >= bounds.end and (not bounds.end_inclusive or candidate != bounds.end):
            raise OptionError(f'value <{text}> is too large for option "{self.name}".')
        if candidate <= bounds.begin and (
            not bounds.begin_inclusive or candidate != bounds.begin
        ):
            raise OptionError(f'value <{text}> is too small for option "{self.name}".')
        self.value = candidate
        return True

    def help(self, verbose: bool = False) -> str:
        bounds = self.range
        text = "  -%-12s = %-8s %c%4.2g .. %4.2g%c (default: %g)\n" % (
            self.name,
            self.type_name,
            "[" if bounds.begin_inclusive else "(",
            bounds.begin,
            bounds.end,
            "]" if bounds.end_inclusive else ")",
            self.value,
        )
        return text + (_verbose_block(self.description) if verbose else "")

    def __float__(self) -> float:
        return self.value


class IntOption(Option):
    """A 32-bit integer option."""

    _TYPE_NAME = "<int32>"
    _MIN = INT32_MIN
    _MAX = INT32_MAX

    def __init__(
        self,
        category: str,
        name: str,
        description: str,
        default: int = 0,
        range: IntRange | None = None,
        registry: OptionRegistry | None = None,
    ) -> None:
        super().__init__(name, description, category, self._TYPE_NAME, registry)
        self.range = IntRange(self._MIN, self._MAX) if range is None else range
        self.value = int(default)

    def parse(self, arg: str) -> bool:
        text = self._value_text(arg)
        if text is None:
            return False
        candidate = _leading_int(text)
        if candidate > self.range.end:
            raise OptionError(f'value <{text}> is too large for option "{self.name}".')
        if candidate < self.range.begin:
            raise OptionError(f'value <{text}> is too small for option "{self.name}".')
        self.value = candidate
        return True

    def help(self, verbose: bool = False) -> str:
        low = "imin" if self.range.begin == self._MIN else "%4d" % self.range.begin
        high = "imax" if self.range.end == self._MAX else "%4d" % self.range.end
        text = "  -%-12s = %-8s [%s .. %s] (default: %d)\n" % (
            self.name,
            self.type_name,
            low,
            high,
            self.value,
        )
        return text + (_verbose_block(self.description) if verbose else "")

    def __int__(self) -> int:
        return self.value


class Int64Option(IntOption):
    """A 64-bit integer option."""

    _TYPE_NAME = "<int64>"
    _MIN = INT64_MIN
    _MAX = INT64_MAX


class StringOption(Option):
    """A string option; its value is None until set."""

    def __init__(
        self,
        category: str,
        name: str,
        description: str,
        default: str | None = None,
        registry: OptionRegistry | None = None,
    ) -> None:
        super().__init__(name, description, category, "<string>", registry)
        self.value = default

    def parse(self, arg: str) -> bool:
        text = self._value_text(arg)
        if text is None:
            return False
        self.value = text
        return True

    def help(self, verbose: bool = False) -> str:
        text = "  -%-10s = %8s\n" % (self.name, self.type_name)
        return text + (_verbose_block(self.description) if verbose else "")


class BoolOption(Option):
    """A switch set by ``-name`` and cleared by ``-no-name``."""

    def __init__(
        self,
        category: str,
        name: str,
        description: str,
        default: bool,
        registry: OptionRegistry | None = None,
    ) -> None:
        super().__init__(name, description, category, "<bool>", registry)
        self.value = bool(default)

    def parse(self, arg: str) -> bool:
        if not arg.startswith("-"):
            return False
        span = arg[1:]
        enabled = not span.startswith("no-")
        if not enabled:
            span = span[3:]
        if span != self.name:
            return False
        self.value = enabled
        return True

    def help(self, verbose: bool = False) -> str:
        padding = " " * max(0, 32 - 2 * len(self.name))
        text = "  -%s, -no-%s%s (default: %s)\n" % (
            self.name,
            self.name,
            padding,
            "on" if self.value else "off",
        )
        return text + (_verbose_block(self.description) if verbose else "")

    def __bool__(self) -> bool:
        return self.value