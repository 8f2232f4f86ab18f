"""Shared pytest fixtures for source fetcher tests."""

import os
import stat
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Optional

import pytest

from source_fetcher.config.schema import SettingsConfig
from source_fetcher.core.resource import Resource
from source_fetcher.utils.system import CommandResult
from source_fetcher.utils.tools import locate

FAKE_TOOLS = (
    "git", "svn", "hg", "bzr", "cvs", "fossil",
    "tar", "unzip", "gunzip", "bunzip2", "xz", "lzip", "unrar", "7zr",
)


@dataclass
class Call:
    """A command recorded by FakeRunner."""

    argv: list[str]
    cwd: Optional[Path] = None
    capture: bool = False
    output: Optional[Path] = None


@dataclass
class Rule:
    prefix: tuple[str, ...]
    returncode: int = 0
    stdout: str = ""
    effect: Optional[Callable[[list[str], Path], None]] = None


@dataclass
class FakeRunner:
    """Command runner that records commands instead of executing them.

    The program name is reduced to its basename, so ``/usr/bin/hg clone``
    is recorded (and matched) as ``hg clone`` wherever the tool was found.
    Rules registered with :meth:`on` match on an argv prefix; the most
    recently registered match wins.
    """

    calls: list[Call] = field(default_factory=list)
    rules: list[Rule] = field(default_factory=list)

    def on(
        self,
        *prefix: str,
        returncode: int = 0,
        stdout: str = "",
        effect: Optional[Callable[[list[str], Path], None]] = None,
    ) -> None:
        self.rules.insert(0, Rule(tuple(prefix), returncode, stdout, effect))

    def execute(self, args, *, cwd=None, capture=False, output=None):
        argv = [os.path.basename(str(args[0])), *(str(arg) for arg in args[1:])]
        workdir = Path(cwd) if cwd is not None else None
        self.calls.append(Call(argv, workdir, capture, output))

        rule = self._match(argv)
        if rule.effect is not None:
            rule.effect(argv, workdir or Path.cwd())
        if output is not None:
            Path(output).write_text(rule.stdout)
            return CommandResult(argv, rule.returncode)
        return CommandResult(argv, rule.returncode, rule.stdout)

    def pipeline(self, producer, consumer, *, cwd=None):
        return self.execute(producer, cwd=cwd), self.execute(consumer, cwd=cwd)

    @property
    def commands(self) -> list[list[str]]:
        return [call.argv for call in self.calls]

    def find(self, *prefix: str) -> list[Call]:
        """Recorded calls whose argv starts with ``prefix``."""
        return [c for c in self.calls if tuple(c.argv[: len(prefix)]) == prefix]

    def _match(self, argv: list[str]) -> Rule:
        for rule in self.rules:
            if tuple(argv[: len(rule.prefix)]) == rule.prefix:
                return rule
        return Rule(())


@pytest.fixture(autouse=True)
def clear_tool_cache():
    """Forget tool lookups between tests."""
    locate.cache_clear()
    yield
    locate.cache_clear()


@pytest.fixture
def runner():
    """Provide a recording command runner."""
    return FakeRunner()


@pytest.fixture
def cache_dir(tmp_path):
    """Provide a temporary cache directory."""
    cache_dir = tmp_path / "cache"
    cache_dir.mkdir()
    return cache_dir


@pytest.fixture
def tool_prefix(tmp_path):
    """Provide an installation prefix holding stub executables."""
    prefix = tmp_path / "prefix"
    bin_dir = prefix / "bin"
    bin_dir.mkdir(parents=True)
    for name in FAKE_TOOLS:
        tool = bin_dir / name
        tool.write_text("#!/bin/sh\nexit 0\n")
        tool.chmod(tool.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return prefix


@pytest.fixture
def settings(cache_dir, tool_prefix):
    """Provide settings pointing at the temporary cache and prefix."""
    return SettingsConfig(cache_dir=str(cache_dir), prefix=str(tool_prefix))


@pytest.fixture
def stage_dir(tmp_path, monkeypatch):
    """Provide an empty staging directory and make it the working directory."""
    stage_dir = tmp_path / "stage"
    stage_dir.mkdir()
    monkeypatch.chdir(stage_dir)
    return stage_dir


@pytest.fixture
def make_resource():
    """Build Resource descriptors with a default name and version."""

    def _make(url, name="foo", version="1.0", mirrors=None, using=None, **specs):
        return Resource(
            name=name,
            url=url,
            version=version,
            specs=specs,
            mirrors=list(mirrors or []),
            using=using,
        )

    return _make


@pytest.fixture
def bare_settings(cache_dir, tmp_path, monkeypatch):
    """Provide settings under which no external tool can be found."""
    empty = tmp_path / "empty"
    empty.mkdir()
    monkeypatch.setenv("PATH", str(empty))
    return SettingsConfig(cache_dir=str(cache_dir), prefix=str(tmp_path / "none"))
