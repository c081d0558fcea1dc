# SPDX-License-Identifier: MIT
"""Compiler and linker flag composition.

Each configuration block of a makefile defines CPPFLAGS, CFLAGS,
CXXFLAGS and LDFLAGS. The conditional tokens of those variables are
described by ordered tables of FlagRule entries: a token (or a
toolchain lookup producing tokens) and the predicate deciding whether
it applies. The tables are evaluated in order, so the emitted order
is fixed:

    CPPFLAGS  dependency flags, -D defines, -I include paths
    CFLAGS    $(CPPFLAGS), PIC, debug symbols, optimization, warnings,
              frame pointer, extra build options
    CXXFLAGS  $(CFLAGS), exceptions, RTTI
    LDFLAGS   -L$(BINDIR) -L$(LIBDIR), shared, strip, dylib,
              [--start-group] link options, -L paths, links [--end-group]

Nothing here modifies the model.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, NamedTuple

from mkgen.core.project import PackageKind

if TYPE_CHECKING:
    from mkgen.configure.platform import PlatformContext
    from mkgen.core.project import Configuration, Package


@dataclass(frozen=True)
class FlagContext:
    """What a flag predicate may look at."""

    package: Package
    config: Configuration
    platform: PlatformContext

    def has(self, flag: str) -> bool:
        return self.config.has_flag(flag)

    @property
    def is_shared_library(self) -> bool:
        return self.package.kind is PackageKind.DLL


@dataclass(frozen=True)
class FlagRule:
    """One conditional contribution to a flag variable.

    Attributes:
        name: Rule name (usually the configuration flag it reacts to).
        tokens: Fixed tokens, or a callable computing them from the context.
        predicate: Decides whether the rule applies.
    """

    name: str
    tokens: Sequence[str] | Callable[[FlagContext], Sequence[str]]
    predicate: Callable[[FlagContext], bool] = lambda ctx: True

    def apply(self, ctx: FlagContext) -> list[str]:
        if not self.predicate(ctx):
            return []
        tokens = self.tokens(ctx) if callable(self.tokens) else self.tokens
        return list(tokens)


def when_flag(flag: str, *tokens: str) -> FlagRule:
    """Rule emitting tokens when a configuration flag is set."""
    return FlagRule(flag, tokens, lambda ctx: ctx.has(flag))


PREPROCESSOR_RULES: tuple[FlagRule, ...] = (
    FlagRule("depflags", lambda ctx: ctx.platform.toolchain.get_depflags()),
)

COMPILE_RULES: tuple[FlagRule, ...] = (
    FlagRule(
        "pic",
        ("-fPIC",),
        lambda ctx: ctx.is_shared_library and not ctx.platform.is_windows,
    ),
    FlagRule("symbols", ("-g",), lambda ctx: not ctx.has("no-symbols")),
    when_flag("optimize-size", "-Os"),
    when_flag("optimize-speed", "-O3"),
    # Size and speed take precedence over plain optimize
    FlagRule(
        "optimize",
        ("-O2",),
        lambda ctx: ctx.has("optimize")
        and not ctx.has("optimize-size")
        and not ctx.has("optimize-speed"),
    ),
    when_flag("extra-warnings", "-Wall"),
    when_flag("fatal-warnings", "-Werror"),
    when_flag("no-frame-pointer", "-fomit-frame-pointer"),
)

CXX_RULES: tuple[FlagRule, ...] = (
    FlagRule(
        "no-exceptions",
        lambda ctx: [ctx.platform.toolchain.NO_EXCEPTIONS_FLAG],
        lambda ctx: ctx.has("no-exceptions"),
    ),
    FlagRule(
        "no-rtti",
        lambda ctx: [ctx.platform.toolchain.NO_RTTI_FLAG],
        lambda ctx: ctx.has("no-rtti"),
    ),
)

LINK_RULES: tuple[FlagRule, ...] = (
    FlagRule(
        "shared",
        lambda ctx: ctx.platform.toolchain.get_shared_flags(),
        lambda ctx: ctx.is_shared_library,
    ),
    when_flag("no-symbols", "-s"),
    FlagRule(
        "dylib",
        ("-dynamiclib", "-flat_namespace"),
        lambda ctx: ctx.platform.is_macos and ctx.has("dylib"),
    ),
)

# Grouping lets static libraries appear in any order, even when they
# depend on each other. Apple's linker does not know the option.
LINK_GROUP_START = FlagRule(
    "start-group",
    ("-Xlinker", "--start-group"),
    lambda ctx: not ctx.platform.is_macos,
)
LINK_GROUP_END = FlagRule(
    "end-group",
    ("-Xlinker", "--end-group"),
    lambda ctx: not ctx.platform.is_macos,
)


def apply_rules(rules: Iterable[FlagRule], ctx: FlagContext) -> list[str]:
    """Evaluate rules in order and concatenate their tokens."""
    flags: list[str] = []
    for rule in rules:
        flags.extend(rule.apply(ctx))
    return flags


def preprocessor_flags(ctx: FlagContext) -> list[str]:
    """Tokens of CPPFLAGS."""
    flags = apply_rules(PREPROCESSOR_RULES, ctx)
    flags.extend(f'-D "{define}"' for define in ctx.config.defines)
    flags.extend(f'-I "{path}"' for path in ctx.config.include_paths)
    return flags


def compile_flags(ctx: FlagContext) -> list[str]:
    """Tokens appended to $(CPPFLAGS) in CFLAGS."""
    flags = apply_rules(COMPILE_RULES, ctx)
    flags.extend(ctx.config.build_options)
    return flags


def cxx_flags(ctx: FlagContext) -> list[str]:
    """Tokens appended to $(CFLAGS) in CXXFLAGS."""
    return apply_rules(CXX_RULES, ctx)


def link_flags(ctx: FlagContext, links: Iterable[str] = ()) -> list[str]:
    """Tokens of LDFLAGS.

    Args:
        ctx: Flag context.
        links: Resolved link references, placed inside the link group.
    """
    flags = ["-L$(BINDIR)", "-L$(LIBDIR)"]
    flags.extend(apply_rules(LINK_RULES, ctx))
    flags.extend(LINK_GROUP_START.apply(ctx))
    flags.extend(ctx.config.link_options)
    flags.extend(f'-L"{path}"' for path in ctx.config.lib_paths)
    flags.extend(links)
    flags.extend(LINK_GROUP_END.apply(ctx))
    return flags


class ConfigFlags(NamedTuple):
    """The composed flag tokens of one configuration block."""

    cppflags: list[str]
    cflags: list[str]
    cxxflags: list[str]
    ldflags: list[str]


def compose_flags(
    package: Package,
    config: Configuration,
    platform: PlatformContext,
    links: Iterable[str] = (),
) -> ConfigFlags:
    """Compose all flag variables of one configuration.

    Args:
        package: Package being generated.
        config: The configuration to compose, passed explicitly.
        platform: Target OS and toolchain.
        links: Resolved link references for LDFLAGS.
    """
    ctx = FlagContext(package, config, platform)
    return ConfigFlags(
        cppflags=preprocessor_flags(ctx),
        cflags=compile_flags(ctx),
        cxxflags=cxx_flags(ctx),
        ldflags=link_flags(ctx, links),
    )
