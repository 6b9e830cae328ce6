"""
Layering of ``BT_*`` settings from the process, a ``.env`` file and overrides.

Precedence, lowest first: ``.env`` file, ``base`` (the process environment
unless given), ``overrides``. The result feeds
:meth:`bt_gateway.core.config.GatewayConfig.from_mapping`.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, Mapping, MutableMapping, Optional

_QUOTES = ("'", '"')


def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] in _QUOTES and value[-1] == value[0]:
        return value[1:-1]
    return value


def parse_env_lines(lines: Iterable[str]) -> Dict[str, str]:
    """
    Parse ``KEY=VALUE`` lines as written in a ``.env`` file.

    Blank lines, ``#`` comments and lines without ``=`` are skipped. A
    leading ``export`` is accepted and matching outer quotes are removed.
    """
    values: Dict[str, str] = {}
    for raw_line in lines:
        line = raw_line.strip()
        if line.startswith("export "):
            line = line[len("export ") :].lstrip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, value = line.split("=", 1)
        if key.strip():
            values[key.strip()] = _unquote(value.strip())
    return values


def read_env_file(path: Path) -> Dict[str, str]:
    # a missing file contributes nothing
    if not path.is_file():
        return {}
    return parse_env_lines(path.read_text(encoding="utf-8").splitlines())


def load_env_file(
    path: str = ".env",
    *,
    environ: Optional[MutableMapping[str, str]] = None,
) -> Dict[str, str]:
    """
    Copy settings from ``path`` into ``environ`` without replacing existing keys.

    ``environ`` defaults to :data:`os.environ`; a snapshot of it is returned.
    """
    target: MutableMapping[str, str] = os.environ if environ is None else environ
    for key, value in read_env_file(Path(path)).items():
        target.setdefault(key, value)
    return dict(target)


@dataclass(frozen=True)
class GatewayEnvironment:
    variables: Mapping[str, str]

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        return self.variables.get(key, default)

    def __contains__(self, key: object) -> bool:
        return key in self.variables


def build_environment(
    *,
    env_file: Optional[str] = ".env",
    base: Optional[Mapping[str, str]] = None,
    overrides: Optional[Mapping[str, str]] = None,
) -> GatewayEnvironment:
    """
    Merge the configuration sources into one :class:`GatewayEnvironment`.

    Pass ``env_file=None`` to skip the file entirely.
    """
    merged: Dict[str, str] = {}
    if env_file is not None:
        merged.update(read_env_file(Path(env_file)))
    merged.update(os.environ if base is None else base)
    merged.update(overrides or {})
    return GatewayEnvironment(variables=merged)
